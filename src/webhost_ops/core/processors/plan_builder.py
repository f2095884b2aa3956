#!/usr/bin/env python3
"""Builds create and destroy plans from live resource records."""

from typing import Iterable, List

from webhost_ops.core.models import (
    DEPENDENCIES,
    PlanAction,
    PlannedStep,
    ResourceKind,
    ResourceRecord,
    creation_order,
    destruction_order,
)


def _create_step(record: ResourceRecord, desired_retention: int = None) -> PlannedStep:
    depends_on = DEPENDENCIES[record.kind]
    if not record.exists:
        return PlannedStep(record.kind, record.name, PlanAction.CREATE, depends_on, "missing")

    if record.kind == ResourceKind.LOG_GROUP and desired_retention is not None:
        current = record.details.get("retention_days")
        if current != desired_retention:
            return PlannedStep(
                record.kind,
                record.name,
                PlanAction.UPDATE,
                depends_on,
                f"retention {current} -> {desired_retention} days",
            )

    missing_ports = record.details.get("missing_ports")
    if record.kind == ResourceKind.SECURITY_GROUP and missing_ports:
        return PlannedStep(
            record.kind,
            record.name,
            PlanAction.UPDATE,
            depends_on,
            f"open tcp ports {missing_ports}",
        )
    return PlannedStep(record.kind, record.name, PlanAction.NOOP, depends_on, "exists")


def _destroy_step(record: ResourceRecord) -> PlannedStep:
    if record.exists:
        return PlannedStep(record.kind, record.name, PlanAction.DELETE, (), record.identifier or "")
    return PlannedStep(record.kind, record.name, PlanAction.NOOP, (), "missing")


def build_plan(
    records: Iterable[ResourceRecord],
    destroy: bool = False,
    desired_retention: int = None,
) -> List[PlannedStep]:
    """Order records along the dependency chain and decide an action for each.

    Creation plans follow creation_order(); destroy plans walk the chain
    backwards so nothing is deleted while a dependent still exists.
    """
    by_kind = {record.kind: record for record in records}
    if destroy:
        return [_destroy_step(by_kind[kind]) for kind in destruction_order() if kind in by_kind]
    return [
        _create_step(by_kind[kind], desired_retention)
        for kind in creation_order()
        if kind in by_kind
    ]


def summarize_plan(steps: Iterable[PlannedStep]) -> dict:
    """Count steps per action."""
    counts = {action.value: 0 for action in PlanAction}
    for step in steps:
        counts[step.action.value] += 1
    return counts
