"""Scenario execution engine."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

import structlog

from .console_reporter import ConsoleReporter
from .http_executor import ExecutionResult, HttpRequestExecutor
from .models import ScenarioOutcome, ScenarioStep, TranscriptEntry
from .scenario import build_scenario, parse_entity, resolve_body, resolve_path
from .transcript import TranscriptLogger

LOGGER = structlog.get_logger("api_scenario_runner")


class ScenarioRunner:
    """Runs every step once, in order, and records each outcome in the transcript.

    A failing step never stops the run. Ids captured from earlier responses
    feed later requests, falling back to fixed defaults when a response had
    no usable ``id``.
    """

    def __init__(
        self,
        *,
        base_url: str,
        executor: HttpRequestExecutor,
        transcript: TranscriptLogger,
        steps: Optional[Sequence[ScenarioStep]] = None,
        reporter: Optional[ConsoleReporter] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.steps = tuple(steps) if steps is not None else build_scenario()
        self._executor = executor
        self._transcript = transcript
        self._reporter = reporter

    def run(self) -> ScenarioOutcome:
        self._transcript.initialize()
        started_at = datetime.now(timezone.utc)
        log = LOGGER.bind(base_url=self.base_url)
        log.info("scenario_started", steps=len(self.steps), transcript=str(self._transcript.path))
        if self._reporter:
            self._reporter.start_scenario(total_steps=len(self.steps), base_url=self.base_url)

        captured: dict[str, dict[str, Any]] = {}
        entries: list[TranscriptEntry] = []
        try:
            self._run_steps(captured, entries, log)
        finally:
            if self._reporter:
                self._reporter.close()

        finished_at = datetime.now(timezone.utc)
        duration_ms = (finished_at - started_at).total_seconds() * 1000
        log.info("scenario_finished", steps=len(entries), duration_ms=round(duration_ms, 3))
        if self._reporter:
            self._reporter.finish_scenario(len(entries), duration_ms, str(self._transcript.path))

        return ScenarioOutcome(
            transcript_path=self._transcript.path,
            started_at=started_at,
            finished_at=finished_at,
            entries=entries,
            captured=captured,
        )

    def _run_steps(
        self,
        captured: dict[str, dict[str, Any]],
        entries: list[TranscriptEntry],
        log: Any,
    ) -> None:
        for index, step in enumerate(self.steps, start=1):
            path = resolve_path(step.path, captured)
            if self._reporter:
                self._reporter.report_step_start(index, step.title, step.method, path)

            result = self._execute_step(step, path, captured)
            self._transcript.record(step.title, result.response_body, result.status_code)
            entries.append(
                TranscriptEntry(
                    title=step.title,
                    status_code=result.status_code,
                    body=result.response_body,
                    recorded_at=datetime.now(timezone.utc),
                )
            )
            log.info(
                "step_completed",
                step=index,
                title=step.title,
                method=step.method,
                path=path,
                status=result.status_code,
                elapsed_ms=round(result.elapsed_ms, 3),
            )
            if step.capture_as:
                self._capture(step.capture_as, result, captured, log)

            if self._reporter:
                self._reporter.report_step_result(
                    index, step.title, step.method, path, result.status_code, result.elapsed_ms
                )

    def _execute_step(
        self,
        step: ScenarioStep,
        path: str,
        captured: dict[str, dict[str, Any]],
    ) -> ExecutionResult:
        body = resolve_body(step.body, captured) if step.body is not None else None
        return self._executor.execute(step.method, f"{self.base_url}{path}", body)

    @staticmethod
    def _capture(
        name: str,
        result: ExecutionResult,
        captured: dict[str, dict[str, Any]],
        log: Any,
    ) -> None:
        entity = parse_entity(result.response_body)
        if entity is None:
            captured.pop(name, None)
            log.warning("entity_capture_failed", entity=name, status=result.status_code)
            return
        captured[name] = entity
        log.info("entity_captured", entity=name, entity_id=entity.get("id"))
