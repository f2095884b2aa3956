"""Decorator patterns for stack operations."""

import click
import importlib
from functools import wraps
from typing import Any, Callable, Dict, Optional, Type

from webhost_ops.core.processors import CSVReportGenerator
from webhost_ops.jobs.base import BaseJob
from webhost_ops.utils.config import ConfigManager
from webhost_ops.utils.exceptions import CLIError
from webhost_ops.utils.logger import setup_logger

# Centralized job registry, keyed by keywords found in CLI command names
JOB_REGISTRY = {
    "plan": "webhost_ops.jobs.plan_stack.PlanStackJob",
    "apply": "webhost_ops.jobs.apply_stack.ApplyStackJob",
    "destroy": "webhost_ops.jobs.destroy_stack.DestroyStackJob",
    "status": "webhost_ops.jobs.stack_status.StackStatusJob",
}

ACTION_SYMBOLS = {"create": "+", "update": "~", "delete": "-", "no-op": "="}


def get_job_class(func_name: str) -> Type[BaseJob]:
    """Dynamically resolve job class based on the command function name.

    Raises:
        ValueError: If the function name matches no registered job
    """
    for keyword, job_path in JOB_REGISTRY.items():
        if keyword in func_name:
            module_path, class_name = job_path.rsplit(".", 1)
            module = importlib.import_module(module_path)
            return getattr(module, class_name)

    raise ValueError(f"Unknown stack operation: {func_name}")


def build_config(ctx_obj: Optional[Dict[str, Any]]) -> ConfigManager:
    """ConfigManager for the CLI context, with global flags applied as overrides."""
    ctx_obj = ctx_obj or {}
    config = ConfigManager(ctx_obj.get("config_dir"))
    config.set_override("aws.region", ctx_obj.get("region"))
    config.set_override("aws.profile", ctx_obj.get("profile"))
    return config


def handle_operation_error(operation_name: str, error: Exception) -> None:
    """Centralized error handling for operations."""
    error_msg = f"Error in {operation_name}: {str(error)}"
    click.echo(error_msg, err=True)

    logger = setup_logger("webhost_ops.errors", "errors.log")
    logger.error(
        error_msg,
        extra={"operation": operation_name, "error_type": type(error).__name__},
    )


def format_result(result: Dict[str, Any]) -> str:
    """Human readable rendering of a job result."""
    lines = [result.get("message", "")]

    for step in result.get("steps", []):
        symbol = ACTION_SYMBOLS.get(step["action"], "?")
        detail = step.get("reason") or step.get("identifier") or ""
        lines.append(
            f"  {symbol} {step['kind']:<18} {step['name']:<40} {step['action']:<7} {detail}".rstrip()
        )

    if "resources" in result and "steps" not in result:
        for resource in result["resources"]:
            lines.append(
                f"  {resource['kind']:<18} {resource['name']:<40} "
                f"{resource['status']:<8} {resource['identifier']}".rstrip()
            )

    instance = result.get("instance")
    if instance:
        lines.append(
            f"Instance {instance['id']} ({instance['state']}): "
            f"public IP {instance['public_ip']}, URL {instance['url']}"
        )

    health = result.get("health")
    if health:
        status = "OK" if health.get("ok") else f"FAILED ({health.get('error')})"
        lines.append(f"HTTP check: {status}")

    for problem in result.get("problems", []):
        lines.append(f"  ! {problem}")

    return "\n".join(lines)


def handle_output(
    result: Dict[str, Any],
    output_path: Optional[str] = None,
    correlation_id: Optional[str] = None,
):
    """Echo the result and optionally write a CSV report of its rows."""
    logger = setup_logger("webhost_ops.output", "operations.log")
    logger.info(
        f"[{correlation_id or 'N/A'}] Operation completed with status {result.get('status')}: "
        f"{result.get('message')}"
    )

    click.echo(format_result(result))

    if output_path:
        rows = result.get("resources") or result.get("steps") or []
        written = CSVReportGenerator().write_resources(rows, output_path)
        if written:
            click.echo(f"Results saved to {written}")
            logger.info(f"[{correlation_id or 'N/A'}] Results saved to {written}")


def execute_stack_operation(
    job_class: Type[BaseJob], ctx_obj: Optional[Dict[str, Any]] = None, **kwargs
) -> Dict[str, Any]:
    """Run a job against the configured stack and report its result."""
    output = kwargs.pop("output", None)
    config = build_config(ctx_obj)

    job = job_class(config)
    result = job.execute(**kwargs)
    handle_output(result, output, getattr(job, "correlation_id", None))

    if result.get("status") != "success":
        raise CLIError(result.get("message", "operation failed"))
    return result


def stack_operation(requires_confirmation: bool = False):
    """Decorator turning a click command into a stack job invocation.

    Args:
        requires_confirmation: Whether to ask before running (skipped with --force)
    """

    def decorator(func: Callable) -> Callable:
        job_class = get_job_class(func.__name__)

        @wraps(func)
        def wrapper(ctx, **kwargs):
            operation_name = func.__name__
            func(ctx, **kwargs)

            kwargs.pop("verbose", None)
            force = kwargs.pop("force", False)
            dry_run = kwargs.pop("dry_run", False)

            try:
                # Dry run shows the plan for the operation instead of executing it
                if dry_run:
                    click.echo(f"[DRY RUN] {operation_name} would perform:")
                    plan_class = get_job_class("plan")
                    return execute_stack_operation(
                        plan_class,
                        ctx.obj,
                        destroy="destroy" in operation_name,
                        output=kwargs.get("output"),
                    )

                if requires_confirmation and not force:
                    stack = build_config(ctx.obj).get_value("stack.name", "webhost")
                    if not click.confirm(f"Continue with {operation_name} of stack '{stack}'?"):
                        click.echo("Operation cancelled by user.")
                        return None

                return execute_stack_operation(job_class, ctx.obj, **kwargs)

            except Exception as e:
                handle_operation_error(operation_name, e)
                ctx.exit(1)

        return wrapper

    return decorator
