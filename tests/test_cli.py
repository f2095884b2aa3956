import json
from unittest.mock import patch

from click.testing import CliRunner

from webhost_ops.cli import cli
from tests.conftest import make_existing_managers, make_managers


def run(config_dir, *args, **kwargs):
    return CliRunner().invoke(cli, ["--config-dir", str(config_dir), *args], **kwargs)


def test_version():
    result = CliRunner().invoke(cli, ["version"])
    assert result.exit_code == 0
    assert "webhost-ops 1.0.0" in result.output


def test_validate_ok(write_settings):
    result = run(write_settings(), "validate")
    assert result.exit_code == 0
    assert "Configuration for stack 'webhost' is valid" in result.output


def test_validate_reports_problems(write_settings):
    result = run(write_settings({"stack": {"ami_id": "nope"}}), "validate")
    assert result.exit_code == 1
    assert "not a valid AMI id" in result.output


def test_render_user_data(write_settings):
    result = run(write_settings(), "render-user-data")
    assert result.exit_code == 0
    assert result.output.startswith("#!/bin/bash\n")
    assert "amazon-cloudwatch-agent-ctl" in result.output


def test_render_agent_config_to_file(write_settings, tmp_path):
    target = tmp_path / "agent.json"
    result = run(write_settings(), "render-agent-config", "-o", str(target))
    assert result.exit_code == 0
    config = json.loads(target.read_text(encoding="utf-8"))
    assert config["logs"]["logs_collected"]["files"]["collect_list"][0]["log_group_name"] == "webhost-logs"


def test_region_flag_overrides_settings(write_settings):
    result = run(write_settings(), "--region", "eu-west-1", "render-agent-config")
    assert result.exit_code == 0
    with patch("webhost_ops.jobs.base.create_stack_managers", return_value=make_managers()) as factory, \
            patch("webhost_ops.jobs.base.SessionManager.get_session") as get_session:
        result = run(write_settings(), "--region", "eu-west-1", "plan")
    assert result.exit_code == 0, result.output
    assert get_session.call_args.kwargs["region"] == "eu-west-1"
    assert factory.call_args.args[1] == "eu-west-1"


@patch("webhost_ops.jobs.base.SessionManager.get_session")
@patch("webhost_ops.jobs.base.create_stack_managers")
def test_plan_lists_steps(factory, get_session, write_settings):
    factory.return_value = make_managers()
    result = run(write_settings(), "plan")

    assert result.exit_code == 0, result.output
    assert "7 change(s) planned for stack webhost" in result.output
    assert "+ iam_role" in result.output


@patch("webhost_ops.jobs.base.SessionManager.get_session")
@patch("webhost_ops.jobs.base.create_stack_managers")
def test_apply_asks_for_confirmation(factory, get_session, write_settings):
    managers = make_managers()
    factory.return_value = managers
    result = run(write_settings(), "apply", input="n\n")

    assert "Operation cancelled by user." in result.output
    managers.iam.create_role.assert_not_called()


@patch("webhost_ops.jobs.base.SessionManager.get_session")
@patch("webhost_ops.jobs.base.create_stack_managers")
def test_apply_dry_run_shows_plan_only(factory, get_session, write_settings):
    managers = make_managers()
    factory.return_value = managers
    result = run(write_settings(), "apply", "--dry-run")

    assert result.exit_code == 0, result.output
    assert "[DRY RUN] apply would perform:" in result.output
    managers.iam.create_role.assert_not_called()


@patch("webhost_ops.jobs.base.SessionManager.get_session")
@patch("webhost_ops.jobs.base.create_stack_managers")
def test_apply_force(factory, get_session, write_settings):
    managers = make_managers()
    factory.return_value = managers
    result = run(write_settings(), "apply", "--force")

    assert result.exit_code == 0, result.output
    assert "Stack webhost applied: 7 created" in result.output
    assert "URL http://203.0.113.10/" in result.output


@patch("webhost_ops.jobs.base.SessionManager.get_session")
@patch("webhost_ops.jobs.base.create_stack_managers")
def test_failed_apply_exits_non_zero(factory, get_session, write_settings):
    managers = make_managers()
    managers.ec2.get_default_vpc_id.return_value = None
    factory.return_value = managers
    result = run(write_settings(), "apply", "--force")

    assert result.exit_code == 1
    assert "Apply halted at security_group" in result.output


@patch("webhost_ops.jobs.base.SessionManager.get_session")
@patch("webhost_ops.jobs.base.create_stack_managers")
def test_status_writes_csv_report(factory, get_session, write_settings, tmp_path):
    factory.return_value = make_existing_managers()
    report = tmp_path / "reports" / "status.csv"
    result = run(write_settings(), "status", "--output", str(report))

    assert result.exit_code == 0, result.output
    lines = report.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("kind,name,status,identifier")
    assert len(lines) == 8


@patch("webhost_ops.jobs.base.SessionManager.get_session")
@patch("webhost_ops.jobs.base.create_stack_managers")
def test_destroy_dry_run_plans_teardown(factory, get_session, write_settings):
    managers = make_existing_managers()
    factory.return_value = managers
    result = run(write_settings(), "destroy", "--dry-run")

    assert result.exit_code == 0, result.output
    assert "- instance" in result.output
    managers.ec2.terminate_instance.assert_not_called()
