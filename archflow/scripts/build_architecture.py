#!/usr/bin/env python3
"""Build an architecture on the graph service from a JSON plan.

Usage:
    python -m archflow.scripts.build_architecture plan.json

    # against another service, with JSON output
    python -m archflow.scripts.build_architecture plan.json --base-url http://host:8080/api --json

Plan format:
    {
      "name": "Checkout",
      "components": [
        {"key": "api", "type": "API_SERVICE", "subtype": "REST", "name": "Checkout API"},
        {"key": "db", "type": "DATABASE", "subtype": "SQL"}
      ],
      "links": [
        {"source": "api", "target": "db", "link_type": "DATABASE_QUERY"}
      ]
    }

``subtype``, ``name`` and ``link_type`` are optional: the first offered
subtype or link type and the default name are taken when they are missing.
Exits with status 1 if any step did not succeed.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from archflow.adapters.sinks import FanoutSink, ListSink, LoggingSink
from archflow.analysis.canvas_summary import format_summary, summarize, summary_to_dict
from archflow.config import ServiceConfig, configure_logging
from archflow.engine.engine import WorkflowEngine
from archflow.models.component import ComponentType, Position, SubtypeOption
from archflow.models.link import ConnectionParams, LinkType
from archflow.models.selection import DragPayload
from archflow.models.workflow import WorkflowResult
from archflow.sdk.client import GraphServiceClient

logger = logging.getLogger(__name__)

# components are laid out on a grid of this many columns
GRID_COLUMNS = 4
GRID_SPACING = 200.0


class PlannedComponent(BaseModel):
    key: str
    type: ComponentType
    subtype: str | None = None
    name: str | None = None


class PlannedLink(BaseModel):
    source: str
    target: str
    link_type: LinkType | None = None


class ArchitecturePlan(BaseModel):
    """The components and links to create, in order."""

    name: str | None = None
    components: list[PlannedComponent] = Field(default_factory=list)
    links: list[PlannedLink] = Field(default_factory=list)


class PlanConfirmation:
    """Answers the engine's dialogs from the plan step being executed."""

    def __init__(self) -> None:
        self.subtype: str | None = None
        self.name: str | None = None
        self.link_type: LinkType | None = None

    async def present_subtype_choice(
        self,
        component_type: ComponentType,
        options: list[SubtypeOption],
    ) -> str | None:
        if self.subtype is not None:
            return self.subtype
        return options[0].id if options else None

    async def present_name_entry(
        self,
        component_type: ComponentType,
        subtype: str | None,
        default_name: str,
    ) -> str | None:
        return self.name or default_name

    async def present_link_type_choice(
        self,
        options: list[LinkType],
        source_label: str,
        target_label: str,
    ) -> LinkType | None:
        if self.link_type is None:
            return options[0] if options else None
        if self.link_type not in options:
            logger.warning(
                "%s is not offered between %s and %s (offered: %s)",
                self.link_type.value, source_label, target_label,
                ", ".join(option.value for option in options),
            )
            return None
        return self.link_type


def load_plan(plan_file: Path) -> ArchitecturePlan:
    """Load and validate a plan file.

    Args:
        plan_file: path to the JSON plan

    Returns:
        the parsed ArchitecturePlan
    """
    with open(plan_file) as f:
        data = json.load(f)
    plan = ArchitecturePlan.model_validate(data)

    keys = [component.key for component in plan.components]
    duplicates = sorted({key for key in keys if keys.count(key) > 1})
    if duplicates:
        raise ValueError(f"duplicate component keys: {', '.join(duplicates)}")
    for link in plan.links:
        for key in (link.source, link.target):
            if key not in keys:
                raise ValueError(f"link references unknown component key: {key}")
    return plan


def grid_position(index: int) -> Position:
    row, column = divmod(index, GRID_COLUMNS)
    return Position(x=column * GRID_SPACING, y=row * GRID_SPACING)


async def build(
    plan: ArchitecturePlan,
    client: GraphServiceClient,
    architecture_name: str,
) -> dict[str, Any]:
    """Run the plan through a workflow engine and collect what happened."""
    surface = PlanConfirmation()
    notifications = ListSink()
    engine = WorkflowEngine(
        client,
        surface,
        FanoutSink(notifications, LoggingSink()),
        architecture_name=plan.name or architecture_name,
    )

    results: list[WorkflowResult] = []
    architecture = await engine.start()
    ok = architecture is not None

    local_ids: dict[str, str] = {}
    for index, component in enumerate(plan.components):
        surface.subtype, surface.name = component.subtype, component.name
        result = await engine.drop(
            DragPayload(component_type=component.type, subtype=component.subtype),
            grid_position(index),
        )
        results.append(result)
        if result.succeeded and result.node is not None:
            local_ids[component.key] = result.node.local_id
        else:
            ok = False

    for link in plan.links:
        source, target = local_ids.get(link.source), local_ids.get(link.target)
        if source is None or target is None:
            logger.warning("skipping link %s -> %s: endpoint was not created", link.source, link.target)
            ok = False
            continue
        surface.link_type = link.link_type
        result = await engine.connect(ConnectionParams(source=source, target=target))
        results.append(result)
        ok = ok and result.succeeded

    validation = await engine.validate_architecture()
    evaluation = await engine.evaluate_architecture()
    if validation is None or evaluation is None:
        ok = False

    return {
        "ok": ok,
        "architecture": architecture,
        "summary": summarize(engine.store),
        "validation": validation,
        "evaluation": evaluation,
        "results": results,
        "notifications": notifications.notifications,
    }


def format_report(report: dict[str, Any]) -> str:
    """Format the build report for human-readable output."""
    architecture = report["architecture"]
    title = f"ARCHITECTURE: {architecture.name}" if architecture else "ARCHITECTURE (not created)"
    lines = [format_summary(report["summary"], title=title)]

    validation = report["validation"]
    if validation is not None:
        lines.append("-" * 40)
        lines.append("VALIDATION")
        lines.append("-" * 40)
        lines.append("  ✓ valid" if validation.valid else "  ✗ invalid")
        for violation in validation.violations:
            lines.append(f"  • {violation}")
        lines.append("")

    evaluation = report["evaluation"]
    if evaluation is not None:
        lines.append("-" * 40)
        lines.append("EVALUATION")
        lines.append("-" * 40)
        if evaluation.overall_score is not None:
            lines.append(f"  Overall score: {evaluation.overall_score:.1f}/10 ({evaluation.rating})")
        for recommendation in evaluation.recommendations:
            lines.append(f"  • {recommendation}")
        lines.append("")

    lines.append("-" * 40)
    lines.append("NOTIFICATIONS")
    lines.append("-" * 40)
    for notification in report["notifications"]:
        lines.append(f"  [{notification.level.value}] {notification.operation}: {notification.message}")
    lines.append("")
    return "\n".join(lines)


def report_to_dict(report: dict[str, Any]) -> dict:
    """Convert a build report to a JSON-serializable dict."""

    def dump(model):
        return model.model_dump(mode="json") if model is not None else None

    return {
        "ok": report["ok"],
        "architecture": dump(report["architecture"]),
        "summary": summary_to_dict(report["summary"]),
        "validation": dump(report["validation"]),
        "evaluation": dump(report["evaluation"]),
        "results": [dump(result) for result in report["results"]],
        "notifications": [dump(n) for n in report["notifications"]],
    }


async def run(args: argparse.Namespace, plan: ArchitecturePlan) -> dict[str, Any]:
    config = ServiceConfig.from_env()
    if args.base_url:
        config.base_url = args.base_url
    async with GraphServiceClient.from_config(config) as client:
        return await build(plan, client, config.architecture_name)


def main():
    parser = argparse.ArgumentParser(
        description="Create the components and links of a JSON plan on the graph service."
    )
    parser.add_argument(
        "plan_file",
        type=Path,
        help="path to the JSON plan",
    )
    parser.add_argument(
        "--base-url",
        help="graph service API URL (default: $ARCHFLOW_BASE_URL)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="output the report as JSON instead of human-readable format",
    )

    args = parser.parse_args()
    configure_logging()

    if not args.plan_file.exists():
        print(f"Error: plan file not found: {args.plan_file}", file=sys.stderr)
        sys.exit(1)

    try:
        plan = load_plan(args.plan_file)
    except (json.JSONDecodeError, ValidationError, ValueError) as e:
        print(f"Error: invalid plan: {e}", file=sys.stderr)
        sys.exit(1)

    report = asyncio.run(run(args, plan))

    if args.json:
        print(json.dumps(report_to_dict(report), indent=2))
    else:
        print(format_report(report))

    if not report["ok"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
