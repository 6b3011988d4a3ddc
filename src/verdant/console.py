"""Rich console rendering for the verdant CLI."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from verdant.domain.models import ZONE_ORDER

if TYPE_CHECKING:
    from verdant.application.review_orchestrator import ReviewResult
    from verdant.domain.models import (
        Component,
        DecisionRecord,
        InitiativeEvent,
        PipelineDocument,
    )

# Shared console instances
console = Console()
error_console = Console(stderr=True)

VERDICT_STYLES = {
    "approved": "green",
    "needs-work": "yellow",
    "vetoed": "bold red",
    "unavailable": "dim",
}


def print_error(message: str, hint: str | None = None) -> None:
    """Print formatted error message to stderr."""
    content = Text(f"ERROR: {message}", style="bold red")
    if hint:
        content.append(f"\n\nHint: {hint}", style="yellow")
    error_console.print(Panel(content, title="Error", border_style="red"))


def print_success(message: str) -> None:
    console.print(Panel(message, title="Success", border_style="green"))


def print_failure(message: str, details: str | None = None) -> None:
    content = Text(message, style="bold red")
    if details:
        content.append(f"\n{details}", style="dim")
    console.print(Panel(content, title="Failed", border_style="red"))


def print_component(component: Component) -> None:
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("ID", component.id)
    table.add_row("Name", component.name)
    table.add_row("Category", component.category)
    table.add_row("Zone", component.zone.value)
    table.add_row("Maturity", component.maturity.value)
    table.add_row("JTBD", component.description)
    console.print(table)


def print_pipeline(document: PipelineDocument) -> None:
    """One table per zone, in lifecycle order."""
    for zone in ZONE_ORDER:
        components = document.components_in(zone)
        table = Table(title=f"{zone.value.capitalize()} ({len(components)})")
        table.add_column("ID", style="cyan", width=9)
        table.add_column("Name", style="bold")
        table.add_column("Category")
        table.add_column("Maturity")
        table.add_column("Last review", style="dim")
        for c in components:
            last = c.last_zone_verdict.reason if c.last_zone_verdict else ""
            table.add_row(c.id, c.name, c.category, c.maturity.value, last)
        console.print(table)


def print_review(result: ReviewResult) -> None:
    """Per-agent verdict table followed by the zone verdict panel."""
    table = Table(title=f"{result.component.name} - {result.zone.value} review")
    table.add_column("Agent", style="cyan", width=6)
    table.add_column("Verdict", width=12)
    table.add_column("Score", justify="right", width=6)
    table.add_column("Action")
    for review in result.agent_reviews:
        verdict = review.verdict.value
        table.add_row(
            review.agent_id,
            Text(verdict, style=VERDICT_STYLES.get(verdict, "")),
            str(review.score),
            review.rationale.action[:120],
        )
    console.print(table)

    style = "green" if result.zone_verdict.passed else "yellow"
    console.print(
        Panel(
            f"{result.summary}\n\nDecision: {result.decision_id}",
            title=result.overall_verdict.upper(),
            border_style=style,
        )
    )


def print_decisions(decisions: Sequence[DecisionRecord]) -> None:
    table = Table(show_header=True)
    table.add_column("ID", style="cyan")
    table.add_column("When", style="dim", width=10)
    table.add_column("Zone", width=9)
    table.add_column("Decision")
    for d in decisions:
        table.add_row(d.id, d.timestamp[:10], d.zone, d.decision[:100])
    console.print(table)


def print_initiatives(initiatives: Sequence[InitiativeEvent]) -> None:
    table = Table(show_header=True)
    table.add_column("ID", style="cyan", width=9)
    table.add_column("Status", width=10)
    table.add_column("Category", width=14)
    table.add_column("Title")
    for i in initiatives:
        table.add_row(i.id, i.status, i.category, i.title)
    console.print(table)
