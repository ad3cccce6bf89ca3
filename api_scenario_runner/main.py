"""CLI entrypoint for the clients/orders API scenario."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from .config import load_settings
from .console_reporter import ConsoleReporter
from .http_executor import HttpRequestExecutor
from .logging_utils import configure_logging
from .output_config import select_formats
from .runner import ScenarioRunner
from .transcript import TranscriptLogger

app = typer.Typer(help="Run the fixed clients/orders API scenario and write a transcript.")


@app.command()
def run(
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        help="API root, e.g. http://localhost:8080/api (env: SCENARIO_BASE_URL).",
    ),
    transcript: Optional[Path] = typer.Option(
        None,
        "--transcript",
        "-o",
        help="Transcript file to truncate and write (env: SCENARIO_TRANSCRIPT).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Per-request timeout in seconds (env: SCENARIO_TIMEOUT).",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        exists=True,
        dir_okay=False,
        readable=True,
        help="Optional YAML file with base_url/timeout/transcript_path.",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--output-format",
        help="Console output: auto, rich, plain or json (env: CONSOLE_OUTPUT_FORMAT).",
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level for runner events."),
) -> None:
    """Execute all steps once and record every response."""

    try:
        settings = load_settings(config, base_url=base_url, timeout=timeout, transcript_path=transcript)
    except (ValidationError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    fmt, log_format = select_formats(output_format)
    configure_logging(log_level, log_format)

    runner = ScenarioRunner(
        base_url=settings.base_url,
        executor=HttpRequestExecutor(timeout=settings.timeout),
        transcript=TranscriptLogger(settings.transcript_path),
        reporter=ConsoleReporter(output_format=fmt),
    )
    try:
        outcome = runner.run()
    except OSError as exc:
        typer.secho(f"Cannot write transcript {settings.transcript_path}: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    typer.secho(f"Scenario finished. Results written to {outcome.transcript_path}", fg=typer.colors.GREEN)


def main() -> None:
    """Console_scripts hook."""

    app()


if __name__ == "__main__":  # pragma: no cover
    main()
