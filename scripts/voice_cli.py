from __future__ import annotations

import logging
import random
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import get_settings
from runtime.personalization import PersonalizedResult, WritingRequest
from runtime.service import LearningStats, VoiceProfileService
from voice.models import LearningDelta, MasterProfile
from voice.profile import ProfileQualityReport
from voice.storage.sqlite_store import SQLiteProfileStore

app = typer.Typer(help="Learn a user's writing voice and rewrite drafts in it.")
console = Console()


def _configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def _read_messages(path: Path) -> list[str]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip()]


def _render_learning(stats: LearningStats, delta: LearningDelta) -> None:
    table = Table(title="Learning Summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("User", stats.user_id)
    table.add_row("Messages Learned", str(stats.messages_learned))
    table.add_row("Profile Version", str(stats.version))
    table.add_row("Data Richness", str(stats.data_richness))
    table.add_row("Richness Increase", str(stats.richness_increase))
    table.add_row("Consistency", str(delta.consistency_score))
    table.add_row("New Patterns", str(stats.new_patterns))
    console.print(table)

    if delta.new_vocabulary:
        console.print(f"[bold]New vocabulary:[/bold] {', '.join(delta.new_vocabulary)}")
    shifts = ", ".join(f"{name} {value:+d}" for name, value in delta.tone_shifts.items())
    console.print(f"[bold]Tone shifts:[/bold] {shifts}")


def _render_rewrite(result: PersonalizedResult) -> None:
    console.print(Panel(result.personalized_content, title=f"Rewrite (confidence {result.confidence_score})"))

    table = Table(title="Style Application")
    table.add_column("Stage")
    table.add_column("Applied")
    applied = result.style_application.to_dict()
    for stage, entries in applied.items():
        table.add_row(stage.replace("_", " ").title(), "\n".join(entries) or "-")
    console.print(table)

    for index, alternative in enumerate(result.alternatives, start=1):
        console.print(Panel(alternative, title=f"Alternative {index}"))


def _render_profile(profile: MasterProfile, report: ProfileQualityReport) -> None:
    style = profile.writing_style
    table = Table(title=f"Voice Profile: {profile.user_id} (v{profile.version})")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Messages Analyzed", str(style.total_messages_analyzed))
    table.add_row("Style Confidence", str(style.confidence_score))
    table.add_row("Avg Message Length", str(style.average_message_length))
    table.add_row("Sentence Complexity", style.sentence_complexity)
    for name, value in style.tone.to_dict().items():
        table.add_row(f"Tone: {name}", str(value))
    table.add_row("Interaction Style", profile.learned_patterns.interaction_style)
    table.add_row("Top Words", ", ".join(list(style.frequent_words)[:5]) or "-")
    console.print(table)

    quality = Table(title="Profile Quality")
    quality.add_column("Area")
    quality.add_column("Score", justify="right")
    for area, score in report.to_dict()["breakdown"].items():
        quality.add_row(area.replace("_", " ").title(), str(score))
    quality.add_row("Overall", str(report.overall))
    console.print(quality)
    for recommendation in report.recommendations:
        console.print(f"- {recommendation}")


@app.command("learn")
def learn(
    user_id: str = typer.Argument(..., help="User whose voice is being learned."),
    messages_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="UTF-8 file, one message per line."),
    report: Path = typer.Option(None, dir_okay=False, help="Write the session summary and learning delta as JSON."),
    log_level: str = typer.Option("INFO", help="Logging level (DEBUG, INFO, WARNING)."),
) -> None:
    _configure_logging(log_level)
    service = VoiceProfileService(get_settings())
    messages = _read_messages(messages_file)
    outcome, stats = service.learn_from_messages(user_id, messages)
    _render_learning(stats, outcome.learning_delta)
    if report is not None:
        console.print(f"Session report written to {service.export_session_report(outcome, report)}")


@app.command("rewrite")
def rewrite(
    user_id: str = typer.Argument(..., help="User whose voice to write in."),
    text: str = typer.Argument(..., help="Draft text to rewrite."),
    purpose: str = typer.Option("response", help="response, suggestion, draft or example."),
    tone: str = typer.Option(None, help="match_user, professional, casual or enthusiastic."),
    length: str = typer.Option(None, help="short, medium or long."),
    emojis: bool = typer.Option(True, "--emojis/--no-emojis", help="Allow emoji injection."),
    context: str = typer.Option(None, help="Free-text context, e.g. the project being discussed."),
    alternatives: bool = typer.Option(True, "--alternatives/--no-alternatives", help="Also render tone variants."),
    seed: int = typer.Option(None, help="Seed for reproducible rewrites."),
    log_level: str = typer.Option("WARNING", help="Logging level (DEBUG, INFO, WARNING)."),
) -> None:
    _configure_logging(log_level)
    try:
        request = WritingRequest(
            content=text,
            purpose=purpose,
            tone=tone,
            length=length,
            include_emojis=None if emojis else False,
            context=context,
            generate_alternatives=alternatives,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    rng = random.Random(seed) if seed is not None else None
    service = VoiceProfileService(get_settings(), rng=rng)
    _render_rewrite(service.rewrite(user_id, request))


@app.command("show")
def show(
    user_id: str = typer.Argument(..., help="User to inspect."),
    log_level: str = typer.Option("WARNING", help="Logging level (DEBUG, INFO, WARNING)."),
) -> None:
    _configure_logging(log_level)
    service = VoiceProfileService(get_settings())
    profile = service.load_profile(user_id)
    _render_profile(profile, service.quality_report(user_id))


@app.command("export")
def export(
    user_id: str = typer.Argument(..., help="User to export."),
    output: Path = typer.Option(None, dir_okay=False, help="Target JSON path (defaults to the export dir)."),
    log_level: str = typer.Option("INFO", help="Logging level (DEBUG, INFO, WARNING)."),
) -> None:
    _configure_logging(log_level)
    service = VoiceProfileService(get_settings())
    path = service.export_profile(user_id, output)
    console.print(f"Exported profile for [bold]{user_id}[/bold] to {path}")


@app.command("users")
def users(
    log_level: str = typer.Option("WARNING", help="Logging level (DEBUG, INFO, WARNING)."),
) -> None:
    _configure_logging(log_level)
    store = SQLiteProfileStore(get_settings().sqlite_path)
    table = Table(title="Known Users")
    table.add_column("User")
    for user_id in store.list_user_ids():
        table.add_row(user_id)
    console.print(table)


if __name__ == "__main__":
    app()
