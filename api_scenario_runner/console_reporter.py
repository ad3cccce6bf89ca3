"""Console progress display with environment detection."""

import os
import sys
from typing import Optional

from rich.console import Console, Group
from rich.live import Live
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn
from rich.table import Table
from rich.text import Text

from .output_config import OutputFormat


def _status_style(status_code: int) -> str:
    if status_code == 0:
        return "bold red"
    if status_code < 300:
        return "green"
    if status_code < 500:
        return "yellow"
    return "red"


class ConsoleReporter:
    """
    Progress reporter that adapts to the environment.

    Interactive terminals get a rich live table, CI jobs and pipes get plain
    lines, and JSON mode prints nothing. Everything goes to stderr.

    Only the observed HTTP status is shown; the runner has no pass/fail notion.
    """

    def __init__(self, output_format: OutputFormat = OutputFormat.AUTO):
        self.output_format = output_format
        self.quiet = output_format == OutputFormat.JSON
        self._detect_environment()

        self.console: Optional[Console] = Console(stderr=True) if self.use_rich else None
        self.progress: Optional[Progress] = None
        self.progress_task: Optional[TaskID] = None
        self.live: Optional[Live] = None
        self.results_table: Optional[Table] = None

    def _detect_environment(self) -> None:
        """Detect if we should use rich output or plain text."""
        if self.output_format == OutputFormat.RICH:
            self.use_rich = True
        elif self.output_format in (OutputFormat.PLAIN, OutputFormat.JSON):
            self.use_rich = False
        else:  # AUTO
            is_terminal = sys.stderr.isatty()
            is_ci = any(
                name in os.environ
                for name in ("CI", "GITHUB_ACTIONS", "JENKINS_HOME", "GITLAB_CI", "TRAVIS")
            )
            self.use_rich = is_terminal and not is_ci

    def _plain(self, message: str, end: str = "\n") -> None:
        if not self.quiet:
            print(message, end=end, file=sys.stderr, flush=True)

    def start_scenario(self, total_steps: int, base_url: str) -> None:
        if self.use_rich:
            self.progress = Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TextColumn("{task.completed}/{task.total}"),
                console=self.console,
            )
            self.results_table = Table(show_header=True, header_style="bold cyan")
            self.results_table.add_column("#", style="dim", width=4)
            self.results_table.add_column("Step", width=28)
            self.results_table.add_column("Request", width=40)
            self.results_table.add_column("HTTP", width=6)
            self.results_table.add_column("Duration", justify="right", width=10)
            self.progress_task = self.progress.add_task(f"[cyan]{base_url}", total=total_steps)
            self.live = Live(
                Group(self.progress, self.results_table),
                console=self.console,
                refresh_per_second=4,
            )
            self.live.start()
        else:
            self._plain(f"Running API scenario against {base_url}")
            self._plain(f"Total steps: {total_steps}")
            self._plain("-" * 80)

    def report_step_start(self, step_num: int, title: str, method: str, path: str) -> None:
        if not self.use_rich:
            self._plain(f"[{step_num}] {title}: {method} {path} ... ", end="")

    def report_step_result(
        self,
        step_num: int,
        title: str,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        if self.use_rich:
            self.results_table.add_row(
                str(step_num),
                title,
                f"{method} {path}",
                Text(str(status_code), style=_status_style(status_code)),
                f"{duration_ms:.0f}ms",
            )
            self.progress.update(self.progress_task, advance=1)
        else:
            self._plain(f"HTTP {status_code} ({duration_ms:.0f}ms)")

    def close(self) -> None:
        """Stop the live display; safe to call more than once."""
        if self.live is not None:
            self.live.stop()
            self.live = None

    def finish_scenario(self, total: int, duration_ms: float, transcript: str) -> None:
        self.close()
        if self.use_rich:
            self.console.print(
                f"[bold cyan]{total} steps[/] in {duration_ms:.0f}ms, transcript: [bold]{transcript}[/]"
            )
        else:
            self._plain("-" * 80)
            self._plain(f"Total: {total} | Duration: {duration_ms:.0f}ms | Transcript: {transcript}")
