"""Console output and log format selection."""

import os
from enum import Enum
from typing import Literal, Optional


class OutputFormat(str, Enum):
    """Console output format options."""
    AUTO = "auto"
    RICH = "rich"
    PLAIN = "plain"
    JSON = "json"


LogFormat = Literal["json", "console", "plain"]

ENV_VAR_NAME = "CONSOLE_OUTPUT_FORMAT"

# auto/rich log with colors, plain without, json as JSON lines
LOG_FORMATS: dict[OutputFormat, LogFormat] = {
    OutputFormat.AUTO: "console",
    OutputFormat.RICH: "console",
    OutputFormat.PLAIN: "plain",
    OutputFormat.JSON: "json",
}


def select_formats(cli_override: Optional[str] = None) -> tuple[OutputFormat, LogFormat]:
    """
    Pick the console format and its matching log format.

    The first recognised value wins: ``--output-format``, then
    ``CONSOLE_OUTPUT_FORMAT``; unknown values are skipped and the
    fallback is auto.
    """
    output_format = OutputFormat.AUTO
    for candidate in (cli_override, os.environ.get(ENV_VAR_NAME)):
        if candidate and candidate.lower() in {fmt.value for fmt in OutputFormat}:
            output_format = OutputFormat(candidate.lower())
            break
    return output_format, LOG_FORMATS[output_format]
