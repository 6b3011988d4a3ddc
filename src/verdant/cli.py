"""
verdant command line.

Examples:
    verdant pipeline
    verdant create Toggle --category input --description "Switch a setting"
    verdant review Toggle
    verdant review Toggle --agent ag
    verdant promote COMP-001 --review
    verdant override COMP-001 --reason "Contrast fixed upstream"
    verdant ask "Which components are waiting in the canopy?"
    verdant serve --port 3001
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import NoReturn

import click

from verdant.application.context import GovernanceContext
from verdant.config import VerdantConfig
from verdant.console import (
    console,
    print_component,
    print_decisions,
    print_error,
    print_failure,
    print_initiatives,
    print_pipeline,
    print_review,
    print_success,
)
from verdant.domain.chat import ChatEventType, ChatMessage
from verdant.domain.exceptions import UnknownZone, VerdantError
from verdant.domain.models import InitiativeEventType, Zone
from verdant.logging_setup import setup_logging
from verdant.wiring import build_context


class _Lazy:
    """Builds the governance context on first use."""

    def __init__(self, config: VerdantConfig) -> None:
        self.config = config
        self._context: GovernanceContext | None = None

    @property
    def context(self) -> GovernanceContext:
        if self._context is None:
            self._context = build_context(self.config)
        return self._context


def _context(ctx: click.Context) -> GovernanceContext:
    lazy: _Lazy = ctx.obj
    return lazy.context


def _fail(error: VerdantError) -> NoReturn:
    print_error(str(error))
    sys.exit(1)


@click.group()
@click.option(
    "--project-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Design-system project root (default: $VERDANT_PROJECT_ROOT or cwd)",
)
@click.option("--log-file", default=None, type=click.Path(), help="Path to log file")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose (DEBUG) logging")
@click.pass_context
def main(
    ctx: click.Context, project_root: Path | None, log_file: str | None, verbose: bool
) -> None:
    """Zone-based governance for design-system components."""
    setup_logging(verbose=verbose, log_file=log_file)
    try:
        config = VerdantConfig.from_env(project_root=project_root)
    except VerdantError as e:
        _fail(e)
    ctx.obj = _Lazy(config)


# =============================================================================
# PIPELINE
# =============================================================================


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print the raw document")
@click.pass_context
def pipeline(ctx: click.Context, as_json: bool) -> None:
    """Show every component by zone."""
    document = _context(ctx).pipeline().state()
    if as_json:
        console.print_json(json.dumps(document.to_dict()))
    else:
        print_pipeline(document)


@main.command()
@click.argument("name")
@click.option("--category", required=True, help="Component category (e.g. input)")
@click.option("--description", required=True, help="Job-to-be-done statement")
@click.pass_context
def create(ctx: click.Context, name: str, category: str, description: str) -> None:
    """Plant a new component in the nursery."""
    try:
        component = _context(ctx).pipeline().create(name, category, description)
    except VerdantError as e:
        _fail(e)
    print_success(f"Created {component.id} ({component.name}) in the nursery")
    print_component(component)


@main.command()
@click.argument("component_id")
@click.option("--review", "with_review", is_flag=True, help="Review in the new zone")
@click.pass_context
def promote(ctx: click.Context, component_id: str, with_review: bool) -> None:
    """Move a component to the next zone."""
    context = _context(ctx)
    try:
        if with_review:
            outcome = context.orchestrator().promote_with_review(component_id)
            result, review = outcome.promotion, outcome.review
        else:
            result, review = context.pipeline().promote(component_id), None
    except VerdantError as e:
        _fail(e)

    if not result.success:
        print_failure("Promotion refused", result.reason)
        sys.exit(1)
    assert result.from_zone and result.to_zone
    print_success(
        f"{component_id}: {result.from_zone.value} -> {result.to_zone.value}"
    )
    if review is not None:
        print_review(review)


@main.command()
@click.argument("component_id")
@click.option("--reason", default="", help="Why the component is archived")
@click.pass_context
def archive(ctx: click.Context, component_id: str, reason: str) -> None:
    """Move a component to the seed vault."""
    try:
        result = _context(ctx).pipeline().archive(
            component_id, reason or "Archived by gardener"
        )
    except VerdantError as e:
        _fail(e)
    if not result.success:
        print_failure("Archive refused", result.reason)
        sys.exit(1)
    print_success(f"{component_id} moved to the seed vault")


# =============================================================================
# REVIEWS
# =============================================================================


@main.command()
@click.argument("component_id")
@click.option("--zone", default=None, help="Review against this zone's rules")
@click.option("--agent", "agent_id", default=None, help="Ask a single reviewer")
@click.pass_context
def review(
    ctx: click.Context, component_id: str, zone: str | None, agent_id: str | None
) -> None:
    """Run a governance review."""
    orchestrator = _context(ctx).orchestrator()
    try:
        if agent_id:
            single = orchestrator.run_single_agent_review(agent_id, component_id)
            console.print_json(json.dumps(single.to_dict()))
            return
        target = None
        if zone is not None:
            try:
                target = Zone(zone)
            except ValueError:
                raise UnknownZone(zone) from None
        print_review(orchestrator.run_review(component_id, zone=target))
    except VerdantError as e:
        _fail(e)


@main.command()
@click.option("--component", default=None, help="Filter by component name")
@click.option("--limit", default=20, type=int, help="Most recent N decisions")
@click.pass_context
def decisions(ctx: click.Context, component: str | None, limit: int) -> None:
    """List recorded governance decisions."""
    memory = _context(ctx).decisions
    if component:
        records = memory.chain(component.lower())[-limit:]
    else:
        records = memory.tail(limit)
    print_decisions(records)


@main.command()
@click.argument("component_id")
@click.option("--reason", required=True, help="Why the veto is overridden")
@click.pass_context
def override(ctx: click.Context, component_id: str, reason: str) -> None:
    """Override a veto as the gardener; the override is recorded."""
    try:
        record = _context(ctx).orchestrator().override_veto(component_id, reason)
    except VerdantError as e:
        _fail(e)
    print_success(f"Veto overridden for {component_id} ({record.id})")


# =============================================================================
# CHAT
# =============================================================================


@main.command()
@click.argument("message")
@click.option("--component", default=None, help="Component the question is about")
@click.pass_context
def ask(ctx: click.Context, message: str, component: str | None) -> None:
    """Ask the governance assistant; it may use tools."""
    context = _context(ctx)
    try:
        loop = context.chat_loop(context.chat_system_prompt(None, component))
    except VerdantError as e:
        _fail(e)
    for event in loop.run([ChatMessage.user(message)]):
        if event.type is ChatEventType.TOKEN:
            console.print(event.data["token"], end="")
        elif event.type is ChatEventType.TOOL_START:
            console.print(f"\n[dim]-> {event.data['toolName']}[/dim]")
        elif event.type is ChatEventType.TOOL_RESULT:
            style = "green" if event.data["success"] else "red"
            console.print(f"[{style}]   {event.data['preview']}[/{style}]")
        elif event.type is ChatEventType.ERROR:
            print_error(event.data["message"])
            sys.exit(1)
    console.print()


# =============================================================================
# INITIATIVES
# =============================================================================


@main.group()
def initiatives() -> None:
    """Track non-component work items."""


@initiatives.command("list")
@click.option("--status", default=None, help="proposed | active | completed | archived")
@click.option("--category", default=None, help="Filter by category")
@click.pass_context
def list_initiatives(ctx: click.Context, status: str | None, category: str | None) -> None:
    registry = _context(ctx).initiatives
    print_initiatives(registry.current(status=status, category=category))
    summary = registry.summary()
    console.print(f"[dim]{summary['total']} initiatives: {summary['byStatus']}[/dim]")


@initiatives.command("add")
@click.argument("title")
@click.option("--category", required=True, help="Initiative category")
@click.option("--description", default="", help="What the work is")
@click.pass_context
def add_initiative(ctx: click.Context, title: str, category: str, description: str) -> None:
    event = _context(ctx).initiatives.record(
        InitiativeEventType.CREATED,
        title=title,
        category=category,
        status="proposed",
        description=description,
        actor="gardener",
    )
    print_success(f"Recorded {event.id}: {title}")


_STATUS_EVENTS = {
    "active": InitiativeEventType.ACTIVATED,
    "completed": InitiativeEventType.COMPLETED,
    "archived": InitiativeEventType.ARCHIVED,
}


@initiatives.command("set-status")
@click.argument("initiative_id")
@click.argument("status", type=click.Choice(["proposed", "active", "completed", "archived"]))
@click.option("--notes", default="", help="Why the status changed")
@click.pass_context
def set_initiative_status(
    ctx: click.Context, initiative_id: str, status: str, notes: str
) -> None:
    registry = _context(ctx).initiatives
    history = registry.history(initiative_id)
    if not history:
        print_error(f"Unknown initiative: {initiative_id}")
        sys.exit(1)
    latest = history[-1]
    registry.record(
        _STATUS_EVENTS.get(status, InitiativeEventType.UPDATED),
        title=latest.title,
        category=latest.category,
        status=status,
        initiative_id=initiative_id,
        description=latest.description,
        origin=latest.origin,
        links=latest.links,
        actor="gardener",
        notes=notes,
    )
    print_success(f"{initiative_id} is now {status}")


# =============================================================================
# SPARKS
# =============================================================================


@main.group()
def sparks() -> None:
    """Ideas waiting to become components."""


@sparks.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include planted and dismissed")
@click.pass_context
def list_sparks(ctx: click.Context, show_all: bool) -> None:
    queue = _context(ctx).sparks
    for spark in queue.records() if show_all else queue.open_sparks():
        console.print(f"[bold]{spark.id}[/bold] {spark.name} [dim]({spark.status})[/dim]")
        console.print(f"  {spark.description}")


@sparks.command("add")
@click.argument("name")
@click.option("--description", required=True, help="What the component would do")
@click.pass_context
def add_spark(ctx: click.Context, name: str, description: str) -> None:
    spark = _context(ctx).sparks.capture(name, description)
    print_success(f"Captured {spark.id}: {name}")


# =============================================================================
# SERVER
# =============================================================================


@main.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=3001, type=int, help="Port number")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Start the HTTP governance server."""
    import uvicorn

    from verdant.api.server import create_app

    uvicorn.run(create_app(_context(ctx)), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
