from webhost_ops.core.models import (
    DEPENDENCIES,
    PlanAction,
    ResourceKind,
    ResourceRecord,
    ResourceStatus,
    creation_order,
    destruction_order,
)
from webhost_ops.core.processors import build_plan, summarize_plan


def records(existing=(), retention=7):
    result = []
    for kind in creation_order():
        record = ResourceRecord(kind=kind, name=kind.value)
        if kind in existing:
            record.status = ResourceStatus.EXISTS
            record.identifier = f"id-{kind.value}"
            if kind == ResourceKind.LOG_GROUP:
                record.details["retention_days"] = retention
        result.append(record)
    return result


def test_creation_order_is_the_dependency_chain():
    assert [k.value for k in creation_order()] == [
        "iam_role",
        "iam_policy",
        "policy_attachment",
        "instance_profile",
        "log_group",
        "security_group",
        "instance",
    ]
    assert destruction_order() == list(reversed(creation_order()))


def test_every_dependency_comes_earlier_in_the_chain():
    order = creation_order()
    for kind, deps in DEPENDENCIES.items():
        for dep in deps:
            assert order.index(dep) < order.index(kind)


def test_empty_account_plans_seven_creates():
    steps = build_plan(records())
    assert [s.action for s in steps] == [PlanAction.CREATE] * 7
    assert summarize_plan(steps)["create"] == 7


def test_existing_resources_are_left_alone():
    steps = build_plan(records(existing=creation_order()), desired_retention=7)
    assert all(not s.changes for s in steps)


def test_partial_stack_only_creates_the_rest():
    existing = [ResourceKind.IAM_ROLE, ResourceKind.IAM_POLICY]
    steps = build_plan(records(existing=existing))
    actions = {s.kind: s.action for s in steps}
    assert actions[ResourceKind.IAM_ROLE] == PlanAction.NOOP
    assert actions[ResourceKind.POLICY_ATTACHMENT] == PlanAction.CREATE
    assert actions[ResourceKind.INSTANCE] == PlanAction.CREATE


def test_retention_drift_is_an_update():
    steps = build_plan(records(existing=[ResourceKind.LOG_GROUP], retention=30), desired_retention=7)
    log_step = next(s for s in steps if s.kind == ResourceKind.LOG_GROUP)
    assert log_step.action == PlanAction.UPDATE
    assert log_step.reason == "retention 30 -> 7 days"


def test_destroy_plan_runs_backwards_and_skips_missing():
    existing = [ResourceKind.IAM_ROLE, ResourceKind.INSTANCE]
    steps = build_plan(records(existing=existing), destroy=True)

    assert steps[0].kind == ResourceKind.INSTANCE
    assert steps[-1].kind == ResourceKind.IAM_ROLE
    deletes = [s.kind for s in steps if s.action == PlanAction.DELETE]
    assert deletes == [ResourceKind.INSTANCE, ResourceKind.IAM_ROLE]


def test_step_to_dict():
    step = build_plan(records())[2]
    assert step.to_dict() == {
        "kind": "policy_attachment",
        "name": "policy_attachment",
        "action": "create",
        "depends_on": "iam_role,iam_policy",
        "reason": "missing",
    }


def test_security_group_with_missing_ports_is_an_update():
    recs = records(existing=creation_order())
    group = next(r for r in recs if r.kind == ResourceKind.SECURITY_GROUP)
    group.details["missing_ports"] = "80"
    steps = build_plan(recs, desired_retention=7)

    changed = [s for s in steps if s.changes]
    assert [s.kind for s in changed] == [ResourceKind.SECURITY_GROUP]
    assert changed[0].reason == "open tcp ports 80"
