"""Per-commit analysis commands."""

import json
from typing import Optional

import click
import typer
from rich.panel import Panel
from rich.table import Table

from ..impact import ANALYSIS_KINDS, AnalysisResults, Finding
from ..models import Severity
from . import app
from ._common import console, open_tracker

_SEVERITY_COLORS = {
    Severity.CRITICAL: "red bold",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "green",
    Severity.NONE: "dim",
}


def _severity(value: Severity) -> str:
    color = _SEVERITY_COLORS[value]
    return f"[{color}]{value.value}[/{color}]"


def _findings_table(title: str, findings: list[Finding]) -> Table:
    table = Table(title=title)
    table.add_column("Type")
    table.add_column("Severity")
    table.add_column("File", style="cyan")
    table.add_column("Matches", justify="right")
    table.add_column("Description", overflow="fold")
    for f in findings:
        table.add_row(f.type, _severity(f.severity), f.file or "", str(f.match_count), f.description)
    return table


def _print_recommendations(recommendations: list[str]) -> None:
    for rec in recommendations:
        console.print(f"  [dim]-[/dim] {rec}")


def _print_results(commit_hash: str, results: AnalysisResults) -> None:
    console.print(f"[bold]Analysis of {commit_hash[:8]}[/bold]")

    dep = results.dependency
    if dep is not None:
        console.print(
            f"\n[bold cyan]Dependency impact[/bold cyan]: {dep.complexity.value} "
            f"(risk {_severity(dep.risk_level)}), radius {dep.impact_radius}, "
            f"{len(dep.affected_files)} affected file(s)"
        )
        for path in dep.critical_paths:
            console.print(f"  critical: {path.file} ({path.dependent_count} dependents)")
        if dep.error:
            console.print(f"  [yellow]{dep.error}[/yellow]")

    breaking = results.breaking
    if breaking is not None:
        console.print(
            f"\n[bold cyan]Breaking changes[/bold cyan]: {_severity(breaking.severity)}"
            + (" [red](migration required)[/red]" if breaking.migration_required else "")
        )
        if breaking.changes:
            console.print(_findings_table("Breaking changes", breaking.changes))
        _print_recommendations(breaking.recommendations)

    security = results.security
    if security is not None:
        console.print(f"\n[bold cyan]Security[/bold cyan]: {_severity(security.risk_level)}")
        if security.findings:
            console.print(_findings_table("Security findings", security.findings))
        _print_recommendations(security.recommendations)

    perf = results.performance
    if perf is not None:
        console.print(
            f"\n[bold cyan]Performance[/bold cyan]: {perf.verdict.value}, "
            f"complexity increase {perf.complexity_increase}"
        )
        if perf.hotspots:
            console.print(_findings_table("Performance hotspots", perf.hotspots))
        _print_recommendations(perf.recommendations)


@app.command()
def analyze(
    ctx: typer.Context,
    commit_hash: str = typer.Argument(..., metavar="HASH", help="Commit hash (7+ char prefix)"),
    kind: str = typer.Option(
        "all",
        "--type",
        "-t",
        help="Which analysis to run",
        click_type=click.Choice([*ANALYSIS_KINDS, "all"], case_sensitive=False),
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Dependency, breaking-change, security and performance analysis of a commit.
    """
    kinds = ANALYSIS_KINDS if kind.lower() == "all" else (kind.lower(),)
    with open_tracker(ctx) as tracker:
        results = tracker.analyze(commit_hash, kinds)

    if json_output:
        print(json.dumps(results.to_dict(), indent=2))
        return
    _print_results(commit_hash, results)


@app.command()
def conflicts(
    ctx: typer.Context,
    commit_hash: str = typer.Argument(..., metavar="HASH", help="Commit hash (7+ char prefix)"),
    simulate: bool = typer.Option(
        False, "--simulate", help="Trial-merge the commit and analyze the real conflicts"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Find conflict blocks in a commit's files and suggest resolutions.
    """
    with open_tracker(ctx) as tracker:
        analysis = tracker.conflicts(commit_hash, simulate=simulate)

    if json_output:
        print(json.dumps(analysis.to_dict(), indent=2))
        return

    if analysis.error:
        console.print(f"[yellow]Warning:[/yellow] {analysis.error}")
    if not analysis.has_conflicts:
        console.print("[green]No conflict markers found.[/green]")
        return

    table = Table(title=f"Conflicts ({analysis.conflict_count} block(s))")
    table.add_column("File", style="cyan")
    table.add_column("Type")
    table.add_column("Blocks", justify="right")
    table.add_column("Complexity")
    for fc in analysis.conflicts:
        table.add_row(fc.file, fc.conflict_type.value, str(len(fc.blocks)), fc.complexity)
    console.print(table)

    for res in analysis.resolution_suggestions:
        mark = "[yellow]review[/yellow]" if res.requires_manual_review else "[green]auto[/green]"
        console.print(
            f"  {res.file}#{res.block_index} {mark} {res.resolver.value} "
            f"({res.confidence:.0%}): {res.description}"
        )
    console.print(
        f"\nApproach: [bold]{analysis.recommended_approach.value}[/bold], "
        f"automation {analysis.automation_rate:.0%}, "
        f"estimated {analysis.estimated_resolution_time}"
    )


@app.command()
def similar(
    ctx: typer.Context,
    commit_hash: str = typer.Argument(..., metavar="HASH", help="Commit hash (7+ char prefix)"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Earlier tracked commits that touched the same files, as adaptation guidance.
    """
    with open_tracker(ctx) as tracker:
        analysis = tracker.similar_changes(commit_hash)

    if json_output:
        print(json.dumps(analysis.to_dict(), indent=2))
        return

    for fs in analysis.similarities:
        table = Table(title=f"Similar changes to {fs.file}")
        table.add_column("Commit", style="cyan")
        table.add_column("Similarity", justify="right")
        table.add_column("Files")
        table.add_column("Message", overflow="fold")
        for change in fs.similar_changes:
            table.add_row(
                change.commit_hash[:8],
                f"{change.similarity:.0%}",
                ", ".join(change.similar_files),
                change.message,
            )
        console.print(table)
    console.print(analysis.overall_guidance)


@app.command("migration-plan")
def migration_plan(
    ctx: typer.Context,
    commit_hash: str = typer.Argument(..., metavar="HASH", help="Commit hash (7+ char prefix)"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Phased integration plan with effort, risks, rollback and testing strategy.
    """
    with open_tracker(ctx) as tracker:
        plan = tracker.migration_plan(commit_hash)

    if json_output:
        print(json.dumps(plan.to_dict(), indent=2))
        return

    console.print(
        Panel(
            f"Effort: [bold]{plan.effort.value}[/bold] ({plan.total_hours:g} hours)\n"
            f"Risk: {_severity(plan.risk_level)} (score {plan.risk_score})\n"
            f"Testing: {', '.join(plan.testing_strategy)}",
            title=f"[bold]Migration plan for {plan.commit_hash[:8]}[/bold]",
            expand=False,
        )
    )
    for phase in plan.phases:
        console.print(f"\n[bold cyan]{phase.name.title()}[/bold cyan] ({phase.estimated_time})")
        for task in phase.tasks:
            console.print(f"  [dim]-[/dim] {task}")
    if plan.prerequisites:
        console.print("\n[bold]Prerequisites[/bold]")
        for item in plan.prerequisites:
            console.print(f"  [dim]-[/dim] {item}")
    if plan.risks:
        console.print("\n[bold]Risks[/bold]")
        for risk in plan.risks:
            console.print(f"  {_severity(risk.severity)} {risk.description}: {risk.mitigation}")


@app.command("learn-adaptation")
def learn_adaptation(
    ctx: typer.Context,
    commit_hash: str = typer.Argument(..., metavar="HASH", help="Commit hash (7+ char prefix)"),
    pattern_type: str = typer.Option(..., "--type", help="Pattern type, e.g. import or config"),
    source: str = typer.Option(..., "--source", help="Upstream form of the change"),
    target: str = typer.Option(..., "--target", help="How the fork adapted it"),
    file_type: Optional[str] = typer.Option(
        None, "--file-type", help="File extension the pattern applies to, e.g. .py"
    ),
    success: bool = typer.Option(True, "--success/--failure", help="Did the adaptation work"),
    effort: Optional[str] = typer.Option(None, "--effort", help="Effort it took"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Free-form notes"),
):
    """
    Record how an upstream change was adapted so later conflicts can reuse it.
    """
    context = {"file_type": file_type} if file_type else None
    with open_tracker(ctx) as tracker:
        pattern = tracker.learn_adaptation(
            commit_hash,
            pattern_type,
            source,
            target,
            context=context,
            success=success,
            effort_level=effort,
            notes=notes,
        )
    console.print(f"[green]Learned[/green] adaptation pattern {pattern.id} ({pattern.pattern_type})")
