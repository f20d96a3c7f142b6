"""CLI for the Agent Readiness scoring engine.

Scores wizard answer files, previews progress, and validates scoring
configurations before they are hot-reloaded.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.table import Table

from .catalog import QuestionCatalog, load_catalog, load_default_catalog
from .config import (
    find_settings_file,
    get_settings,
    load_settings,
    read_document,
    reset_settings,
    save_default_settings,
)
from .engine import ScoringEngine
from .exceptions import ConfigValidationError
from .schema import ScoringConfig, ScoringPreview, TotalScore
from .scoring_config import (
    PRESETS,
    get_preset,
    load_scoring_config,
    parse_scoring_config,
    select_scoring_config,
)

console = Console()

PRESET_CHOICES = list(PRESETS) + ["auto"]


@click.group()
@click.version_option(version="1.0.0", prog_name="readiness-scorer")
@click.option("--settings", "settings_path", type=click.Path(exists=True),
              help="Path to a settings YAML file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(settings_path: Optional[str], verbose: bool):
    """Agent Readiness scoring engine.

    Scores audit answers across readiness pillars and validates scoring
    configurations.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    path = Path(settings_path) if settings_path else find_settings_file()
    if path:
        load_settings(path)
    else:
        reset_settings()


def source_options(func):
    """Options selecting the catalog and scoring config."""
    func = click.option(
        "--catalog", "-c",
        type=click.Path(exists=True),
        help="Path to a question catalog (default: bundled catalog)"
    )(func)
    func = click.option(
        "--preset", "-p",
        type=click.Choice(PRESET_CHOICES, case_sensitive=False),
        default=None,
        help="Built-in scoring preset; 'auto' picks one from the answers "
             "(default: settings scoring_config_path, else 'default')"
    )(func)
    func = click.option(
        "--config", "config_path",
        type=click.Path(exists=True),
        help="Path to a scoring config (YAML or JSON); overrides --preset"
    )(func)
    return func


def load_answers(path: str) -> dict[str, Any]:
    """Load an answers mapping from a YAML or JSON file."""
    data = read_document(Path(path))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise click.ClickException(f"Answers file must contain a mapping of question id to value: {path}")
    return data


def build_engine(
    answers: dict[str, Any],
    catalog_path: Optional[str],
    preset: Optional[str],
    config_path: Optional[str],
) -> ScoringEngine:
    """Create an engine for the selected catalog and scoring config.

    Without --config or --preset the engine falls back to the settings
    scoring_config_path, then to the default preset.
    """
    catalog_path = catalog_path or get_settings().sources.catalog_path
    catalog = load_catalog(catalog_path) if catalog_path else load_default_catalog()

    config = None
    if config_path:
        config = load_scoring_config(config_path, catalog)
    elif preset and preset.lower() == "auto":
        config = select_scoring_config(answers)
    elif preset:
        config = get_preset(preset)
    return ScoringEngine(config=config, catalog=catalog)


@main.command("score")
@click.option(
    "--answers", "-a",
    required=True,
    type=click.Path(exists=True),
    help="Path to an answers file (YAML or JSON)"
)
@source_options
@click.option("--out", "-o", type=click.Path(), help="Output file for JSON results")
@click.option("--json-output", "-j", is_flag=True, help="Output raw JSON instead of formatted text")
@click.option("--details", "-d", is_flag=True, help="Show per-question scores")
def score_cmd(
    answers: str,
    catalog: Optional[str],
    preset: Optional[str],
    config_path: Optional[str],
    out: Optional[str],
    json_output: bool,
    details: bool,
):
    """Calculate the readiness score for an answers file.

    Examples:
        readiness-scorer score -a answers.yaml
        readiness-scorer score -a answers.yaml -p auto -d
        readiness-scorer score -a answers.json --config scoring.yaml -j
    """
    try:
        answer_data = load_answers(answers)
        engine = build_engine(answer_data, catalog, preset, config_path)
        result = engine.calculate_total_score(answer_data)

        if json_output:
            output_json(result, out)
        else:
            display_total(result, details)
            if out:
                output_json(result, out)
                console.print(f"\n[green]Results saved to {out}[/green]")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("preview")
@click.option(
    "--answers", "-a",
    required=True,
    type=click.Path(exists=True),
    help="Path to an answers file (YAML or JSON)"
)
@source_options
@click.option("--step", "-s", type=int, help="Current wizard step")
@click.option("--json-output", "-j", is_flag=True, help="Output raw JSON instead of formatted text")
def preview_cmd(
    answers: str,
    catalog: Optional[str],
    preset: Optional[str],
    config_path: Optional[str],
    step: Optional[int],
    json_output: bool,
):
    """Show progress, current score and potential score."""
    try:
        answer_data = load_answers(answers)
        engine = build_engine(answer_data, catalog, preset, config_path)
        preview = engine.generate_scoring_preview(answer_data, current_step=step)

        if json_output:
            output_json(preview, None)
        else:
            display_preview(preview)

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("validate")
@click.option(
    "--config", "config_path",
    required=True,
    type=click.Path(exists=True),
    help="Path to a scoring config (YAML or JSON)"
)
@click.option(
    "--catalog", "-c",
    type=click.Path(exists=True),
    help="Path to a question catalog (default: bundled catalog)"
)
def validate_cmd(config_path: str, catalog: Optional[str]):
    """Validate a scoring config against the question catalog.

    Runs the same checks as a hot-reload, so a config that passes here will
    be accepted by a running engine.

    Examples:
        readiness-scorer validate --config scoring.yaml
        readiness-scorer validate --config scoring.json -c questions.yaml
    """
    try:
        question_catalog = load_catalog(catalog) if catalog else load_default_catalog()
        config = load_scoring_config(config_path, question_catalog)
    except ConfigValidationError as e:
        console.print(f"[red]✗ Scoring config invalid: {config_path}[/red]")
        for issue in e.issues:
            console.print(f"  - {escape(issue)}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(f"[green]✓ Scoring config valid: {config_path} (version {config.version})[/green]")


@main.command("inspect")
@click.option(
    "--preset", "-p",
    type=click.Choice(list(PRESETS), case_sensitive=False),
    default="default",
    show_default=True,
    help="Built-in scoring preset"
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True),
    help="Path to a scoring config (YAML or JSON); overrides --preset"
)
@click.option(
    "--catalog", "-c",
    type=click.Path(exists=True),
    help="Path to a question catalog (default: bundled catalog)"
)
def inspect_cmd(preset: str, config_path: Optional[str], catalog: Optional[str]):
    """Inspect pillar and question weights of a scoring config."""
    try:
        question_catalog = load_catalog(catalog) if catalog else load_default_catalog()
        if config_path:
            config = parse_scoring_config(read_document(Path(config_path)))
        else:
            config = get_preset(preset)
        display_config(config, question_catalog)

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("init-settings")
@click.argument("path", type=click.Path())
def init_settings_cmd(path: str):
    """Write the default settings to a YAML file."""
    save_default_settings(Path(path))
    console.print(f"[green]Default settings written to {path}[/green]")


def display_total(result: TotalScore, details: bool):
    """Display a total score with a pillar breakdown."""
    console.print(Panel(
        f"Total Score: [bold cyan]{result.total_score:.2f}[/bold cyan] / {result.max_total_score:.2f}\n"
        f"Readiness: [bold]{result.percentage:.2f}%[/bold]\n"
        f"Config Version: {result.version}",
        title="Agent Readiness Score",
    ))

    table = Table(show_header=True, header_style="bold")
    table.add_column("Pillar", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("%", justify="right")

    for pillar in result.pillar_scores:
        table.add_row(
            pillar.pillar,
            f"{pillar.score:.2f}",
            f"{pillar.max_score:.2f}",
            f"{pillar.percentage:.1f}",
        )
    console.print(table)

    if details:
        for pillar in result.pillar_scores:
            console.print(f"\n[bold]{pillar.pillar}[/bold]")
            for q in pillar.question_scores:
                answered = q.raw_value is not None
                value = json.dumps(q.raw_value) if answered else "[dim]unanswered[/dim]"
                console.print(f"  • {q.question_id}: {q.score:.2f} / {q.max_score:.2f}  ({value})")


def display_preview(preview: ScoringPreview):
    """Display a scoring preview."""
    current = preview.current_score
    step = f"Step: {preview.current_step}\n" if preview.current_step is not None else ""
    console.print(Panel(
        f"{step}"
        f"Progress: [bold]{preview.completed_questions}/{preview.total_questions}[/bold] "
        f"({preview.progress_percentage}%)\n"
        f"Current Score: [bold cyan]{current.total_score:.2f}[/bold cyan] ({current.percentage:.2f}%)\n"
        f"Potential Score: [bold green]{preview.potential_score:.2f}[/bold green]\n"
        f"Config Version: {current.version}",
        title="Scoring Preview",
    ))

    if preview.missing_critical_questions:
        console.print("\n[bold yellow]Missing critical questions:[/bold yellow]")
        for question_id in preview.missing_critical_questions:
            console.print(f"  • {question_id}")


def display_config(config: ScoringConfig, catalog: QuestionCatalog):
    """Display pillar and question weights."""
    console.print(f"\n[bold blue]Scoring Config[/bold blue] {config.version} "
                  f"(max total score {config.max_total_score:g})\n")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Pillar", style="cyan")
    table.add_column("Question")
    table.add_column("Function")
    table.add_column("Weight", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Required", justify="center")

    for pillar_name, pillar in config.pillars.items():
        first = True
        for question_id, question_config in pillar.questions.items():
            question = catalog.find_question(question_id)
            required = "?" if question is None else ("✓" if question.required else "")
            table.add_row(
                f"{pillar_name} ({pillar.weight:g})" if first else "",
                question_id,
                question_config.scoring_function,
                f"{question_config.weight:g}",
                f"{question_config.max_score:g}",
                required,
            )
            first = False
    console.print(table)


def output_json(result: Any, out: Optional[str]):
    """Output a result model as camelCase JSON."""
    json_str = result.model_dump_json(by_alias=True, indent=2)

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(json_str)
    else:
        print(json_str)


if __name__ == "__main__":
    main()
