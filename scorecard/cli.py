"""Command-line interface: run the scorecard services against a workbook."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

import click

from scorecard.application import (
    budget_efficiency,
    evidence_summary,
    factory_performance,
    recompute_weights,
    score_periods,
)
from scorecard.application.budget import MODES
from scorecard.application.evidence import GROUP_KEYS
from scorecard.application.reporting.rendering import (
    budget_comment,
    evidence_comment,
    movers_comment,
    ranking_comment,
    snapshot_comment,
    trend_comment,
)
from scorecard.config import Settings, load_settings
from scorecard.domain.models import AccessScope
from scorecard.domain.periods import period_window
from scorecard.errors import ScorecardError
from scorecard.infrastructure import load_workbook_repository, save_output_workbook, save_summary_json, summary_sheets
from scorecard.infrastructure.repository import InMemoryRepository

logger = logging.getLogger(__name__)

WORKBOOK_ARGUMENT = click.argument(
    "workbook",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
SCOPE_OPTION = click.option(
    "--scope",
    "scope_ids",
    multiple=True,
    help="Restrict visibility to these factory ids (repeatable). Defaults to every factory.",
)
JSON_OPTION = click.option(
    "--output-json",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the JSON summary to this file.",
)
EXCEL_OPTION = click.option(
    "--output-excel",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the summary tables to this workbook.",
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _scope(scope_ids: Sequence[str]) -> AccessScope:
    return AccessScope.only(scope_ids) if scope_ids else AccessScope.all()


def _settings(ctx: click.Context) -> Settings:
    try:
        return load_settings()
    except ValueError as exc:
        ctx.fail(str(exc))


def _load(workbook: Path, settings: Settings) -> InMemoryRepository:
    try:
        return load_workbook_repository(workbook, threshold=settings.parse_error_threshold)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


def _run(call: Callable[[], Any]) -> Any:
    try:
        return call()
    except ScorecardError as exc:
        logger.error("%s", exc)
        raise click.ClickException(str(exc)) from exc


def _emit(summary: Dict[str, Any], comments: Sequence[str], output_json: Optional[Path], output_excel: Optional[Path]) -> None:
    click.echo(json.dumps(summary, indent=2, ensure_ascii=False))
    for line in comments:
        click.echo(line)
    if output_json is not None:
        save_summary_json(output_json, summary)
        click.echo(f"Saved JSON: {output_json}")
    if output_excel is not None:
        saved, error_message = save_output_workbook(output_excel, summary_sheets(summary))
        if saved:
            click.echo(f"Saved Excel: {output_excel}")
        else:
            click.echo(f"Excel save skipped (file may be open/locked): {error_message}", err=True)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log at DEBUG level.")
def main_cli(verbose: bool) -> None:
    """Model factory scorecard: hierarchical KPI scoring, trends, benchmarks and budget efficiency."""
    _configure_logging(verbose)


@main_cli.command("score")
@WORKBOOK_ARGUMENT
@click.option("--period", "periods", multiple=True, help="Period token YYYY-Qn (repeatable).")
@click.option("--window", type=int, default=None, help="Score this many quarters ending at the last --period.")
@click.option("--factory", "factory_id", default=None, help="Score a single factory (sector-weighted where applicable).")
@click.option("--theme", default=None, help="Benchmark only KPIs tagged with this theme.")
@click.option("--kpi", "kpi_id", default=None, help="Benchmark a single KPI.")
@SCOPE_OPTION
@JSON_OPTION
@EXCEL_OPTION
@click.pass_context
def score_command(
    ctx: click.Context,
    workbook: Path,
    periods: Tuple[str, ...],
    window: Optional[int],
    factory_id: Optional[str],
    theme: Optional[str],
    kpi_id: Optional[str],
    scope_ids: Tuple[str, ...],
    output_json: Optional[Path],
    output_excel: Optional[Path],
) -> None:
    """Hierarchy scores, SA/SH trends and factory ranking."""
    settings = _settings(ctx)
    repo = _load(workbook, settings)
    selected = list(periods) or [settings.default_period]
    if window is not None:
        if window < 1:
            ctx.fail("--window must be >= 1")
        selected = _run(lambda: period_window(sorted(selected)[-1], window))
    result = _run(
        lambda: score_periods(
            repo,
            selected,
            _scope(scope_ids),
            factory_id=factory_id,
            theme=theme,
            kpi_id=kpi_id,
            settings=settings,
        )
    )
    comments = [snapshot_comment(snapshot) for snapshot in result.snapshots]
    comments += [trend_comment(result.goal_trends), movers_comment(result.movers), ranking_comment(result.ranking)]
    _emit(result.to_dict(), comments, output_json, output_excel)


@main_cli.command("budget")
@WORKBOOK_ARGUMENT
@click.option("--period", default=None, help="Period token YYYY-Qn.")
@click.option("--previous-period", default=None, help="Comparison period; defaults to the prior quarter.")
@click.option("--mode", type=click.Choice(list(MODES), case_sensitive=False), default="gap", show_default=True)
@click.option("--factory", "factory_id", default=None, help="Use a single factory's KPI values.")
@SCOPE_OPTION
@JSON_OPTION
@EXCEL_OPTION
@click.pass_context
def budget_command(
    ctx: click.Context,
    workbook: Path,
    period: Optional[str],
    previous_period: Optional[str],
    mode: str,
    factory_id: Optional[str],
    scope_ids: Tuple[str, ...],
    output_json: Optional[Path],
    output_excel: Optional[Path],
) -> None:
    """Planned/actual spend and effect score per SA and SH."""
    settings = _settings(ctx)
    repo = _load(workbook, settings)
    result = _run(
        lambda: budget_efficiency(
            repo,
            period or settings.default_period,
            _scope(scope_ids),
            previous_period=previous_period,
            mode=mode,
            factory_id=factory_id,
            settings=settings,
        )
    )
    _emit(result.to_dict(), [budget_comment(result.goals)], output_json, output_excel)


@main_cli.command("evidence")
@WORKBOOK_ARGUMENT
@click.option("--period", default=None, help="Period token YYYY-Qn.")
@click.option("--factory", "factory_id", default=None, help="Only evidence reported for this factory.")
@click.option("--group-by", type=click.Choice(list(GROUP_KEYS), case_sensitive=False), default="sector", show_default=True)
@click.option("--min-n", type=int, default=None, help="Suppress groups smaller than this (default from settings).")
@SCOPE_OPTION
@JSON_OPTION
@EXCEL_OPTION
@click.pass_context
def evidence_command(
    ctx: click.Context,
    workbook: Path,
    period: Optional[str],
    factory_id: Optional[str],
    group_by: str,
    min_n: Optional[int],
    scope_ids: Tuple[str, ...],
    output_json: Optional[Path],
    output_excel: Optional[Path],
) -> None:
    """Grouped evidence statistics with small-group suppression."""
    settings = _settings(ctx)
    repo = _load(workbook, settings)
    result = _run(
        lambda: evidence_summary(
            repo,
            period or settings.default_period,
            _scope(scope_ids),
            factory_id=factory_id,
            group_by=group_by,
            min_n=min_n,
            settings=settings,
        )
    )
    _emit(result.to_dict(), [evidence_comment(result.groups, result.min_n)], output_json, output_excel)


@main_cli.command("factory")
@WORKBOOK_ARGUMENT
@click.option("--factory", "factory_id", required=True, help="Factory id.")
@click.option("--period", default=None, help="Period token YYYY-Qn.")
@SCOPE_OPTION
@JSON_OPTION
@EXCEL_OPTION
@click.pass_context
def factory_command(
    ctx: click.Context,
    workbook: Path,
    factory_id: str,
    period: Optional[str],
    scope_ids: Tuple[str, ...],
    output_json: Optional[Path],
    output_excel: Optional[Path],
) -> None:
    """Current vs. previous quarter performance and theme comparison for one factory."""
    settings = _settings(ctx)
    repo = _load(workbook, settings)
    result = _run(
        lambda: factory_performance(
            repo,
            period or settings.default_period,
            _scope(scope_ids),
            factory_id=factory_id,
            settings=settings,
        )
    )
    _emit(result.to_dict(), [snapshot_comment(result.current), snapshot_comment(result.previous)], output_json, output_excel)


@main_cli.command("weights")
@WORKBOOK_ARGUMENT
@JSON_OPTION
@EXCEL_OPTION
@click.pass_context
def weights_command(
    ctx: click.Context,
    workbook: Path,
    output_json: Optional[Path],
    output_excel: Optional[Path],
) -> None:
    """Recompute KPI and SH weights from descriptions and themes."""
    settings = _settings(ctx)
    repo = _load(workbook, settings)
    result = _run(lambda: recompute_weights(repo))
    summary = {
        "kpis": [
            {
                "id": kpi.id,
                "number": kpi.number,
                "strategicTargetId": kpi.strategic_target_id,
                "themes": ",".join(kpi.themes),
                "rawScore": result.kpi_raw_scores.get(kpi.id),
                "shWeight": kpi.sh_weight,
            }
            for kpi in result.kpis
        ],
        "targets": [
            {
                "id": target.id,
                "code": target.code,
                "strategicGoalId": target.strategic_goal_id,
                "rawScore": result.target_raw_scores.get(target.id),
                "goalWeight": target.goal_weight,
            }
            for target in result.targets
        ],
    }
    _emit(summary, [], output_json, output_excel)
