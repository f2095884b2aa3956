#!/usr/bin/env python3
"""
webhost-ops CLI
Provision a single web host with CloudWatch log shipping
"""

import click
from pathlib import Path

from webhost_ops import __version__
from webhost_ops.core.models import StackSettings
from webhost_ops.core.renderers import render_agent_config, render_user_data
from webhost_ops.utils.decorators import build_config, handle_operation_error, stack_operation
from webhost_ops.utils.exceptions import ConfigurationError
from webhost_ops.utils.logger import setup_logger


def setup_logging(verbose: bool = False):
    level = "DEBUG" if verbose else "INFO"
    return setup_logger("webhost_ops_cli", "cli.log", level)


# Common CLI options
def add_common_options(func):
    func = click.option("--verbose", is_flag=True, help="Enable verbose output")(func)
    func = click.option("--output", type=click.Path(dir_okay=False), help="Write a CSV report to this path")(func)
    return func


def add_mutating_options(func):
    func = click.option("--force", is_flag=True, help="Skip confirmation prompts")(func)
    func = click.option(
        "--dry-run", is_flag=True, help="Show the plan instead of executing"
    )(func)
    return add_common_options(func)


def write_or_echo(text: str, output):
    if output:
        Path(output).write_text(text, encoding="utf-8")
        click.echo(f"Written to {output}")
    else:
        click.echo(text, nl=False)


def load_settings(ctx) -> StackSettings:
    return StackSettings.from_config(build_config(ctx.obj))


@click.group()
@click.option("--region", help="AWS region (overrides aws.region)")
@click.option("--profile", help="AWS named profile (overrides aws.profile)")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    help="Directory holding settings.yaml",
)
@click.pass_context
def cli(ctx, region, profile, config_dir):
    """webhost-ops - single web host provisioning with log shipping"""
    ctx.ensure_object(dict)

    ctx.obj["region"] = region
    ctx.obj["profile"] = profile
    ctx.obj["config_dir"] = config_dir


@cli.command()
@click.option("--destroy", is_flag=True, help="Plan a teardown instead of an apply")
@add_common_options
@click.pass_context
@stack_operation(requires_confirmation=False)
def plan(ctx, destroy, output, verbose):
    """Show what apply (or destroy) would change"""
    setup_logging(verbose)


@cli.command()
@click.option("--no-wait", is_flag=True, help="Do not wait for the instance to be running")
@add_mutating_options
@click.pass_context
@stack_operation(requires_confirmation=True)
def apply(ctx, no_wait, output, verbose, force, dry_run):
    """Create the missing resources of the stack

    Resources are created in order: IAM role, policy, policy attachment,
    instance profile, log group, security group, instance.
    """
    setup_logging(verbose)


@cli.command()
@click.option("--keep-logs", is_flag=True, help="Keep the log group and its data")
@add_mutating_options
@click.pass_context
@stack_operation(requires_confirmation=True)
def destroy(ctx, keep_logs, output, verbose, force, dry_run):
    """Delete the stack resources in reverse order"""
    setup_logging(verbose)


@cli.command()
@click.option("--check-http", is_flag=True, help="Request the site URL and report the result")
@add_common_options
@click.pass_context
@stack_operation(requires_confirmation=False)
def status(ctx, check_http, output, verbose):
    """Show the state of every stack resource"""
    setup_logging(verbose)


@cli.command()
@click.pass_context
def validate(ctx):
    """Validate the settings file without calling AWS"""
    settings = load_settings(ctx)
    problems = settings.validate()
    if problems:
        for problem in problems:
            click.echo(f"  ! {problem}", err=True)
        handle_operation_error("validate", ConfigurationError(problems))
        ctx.exit(1)
    click.echo(f"Configuration for stack '{settings.name}' is valid")


@cli.command("render-user-data")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@click.pass_context
def render_user_data_cmd(ctx, output):
    """Print the instance boot script"""
    try:
        script = render_user_data(load_settings(ctx))
    except ConfigurationError as e:
        handle_operation_error("render-user-data", e)
        ctx.exit(1)
    write_or_echo(script, output)


@cli.command("render-agent-config")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@click.pass_context
def render_agent_config_cmd(ctx, output):
    """Print the CloudWatch agent configuration"""
    write_or_echo(render_agent_config(load_settings(ctx)) + "\n", output)


@cli.command()
def version():
    """Show version information"""
    click.echo(f"webhost-ops {__version__}")
    click.echo("Single web host provisioning with CloudWatch log shipping")


if __name__ == "__main__":
    cli()
