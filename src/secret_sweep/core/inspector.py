"""Detection engine interface and a regex-based implementation.

The executor only needs something it can call ``inspect`` on; findings
travel back on the reporting queue the engine was built with, never as
return values.
"""

from __future__ import annotations

import logging
import re
import tomllib
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, Field, ValidationError, field_validator

from secret_sweep.core.models import DecoderType, Secret, SecretFound
from secret_sweep.errors import ConfigurationError

if TYPE_CHECKING:
    import queue
    from collections.abc import Callable
    from pathlib import Path

    from secret_sweep.core.models import ReportInput

logger = logging.getLogger(__name__)


class Inspector(Protocol):
    """Detection engine shared by all consumer threads of a scan.

    Implementations must be safe for concurrent use.
    """

    def inspect(self, content: str, file_path: str, branch_name: str) -> None: ...


if TYPE_CHECKING:
    InspectorFactory = Callable[[Path, queue.Queue[ReportInput | None]], Inspector]


class DetectorRule(BaseModel):
    """A single named regex detector."""

    name: str = Field(..., min_length=1, description="Detector name reported on findings")
    pattern: str = Field(..., min_length=1, description="Regular expression to search for")
    decoder: DecoderType = Field(
        default=DecoderType.PLAIN, description="Decoder reported on findings"
    )

    @field_validator("pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regex: {e}") from e
        return value


class RuleSet(BaseModel):
    """Contents of a detector rules file."""

    rules: list[DetectorRule] = Field(default_factory=list)


def load_rules(config_path: Path) -> RuleSet:
    """Load detector rules from a TOML file.

    Example file::

        [[rules]]
        name = "AWS"
        pattern = "AKIA[0-9A-Z]{16}"
        decoder = "Plane"  # optional

    Raises:
        ConfigurationError: If the file is missing, not TOML, or invalid.
    """
    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read detector config {config_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

    try:
        return RuleSet.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid detector config {config_path}: {e}") from e


class PatternInspector:
    """Regex detection engine.

    Applies every rule to the content and sends one :class:`SecretFound`
    per match. Compiled patterns are read-only after construction, so one
    instance can serve many threads.
    """

    def __init__(
        self,
        rules: RuleSet,
        report_queue: queue.Queue[ReportInput | None],
    ) -> None:
        self._patterns = [
            (rule.name, rule.decoder, re.compile(rule.pattern)) for rule in rules.rules
        ]
        self._report_queue = report_queue

    @classmethod
    def from_config(
        cls,
        config_path: Path,
        report_queue: queue.Queue[ReportInput | None],
    ) -> PatternInspector:
        """Build an inspector from a rules file."""
        return cls(load_rules(config_path), report_queue)

    @property
    def rule_count(self) -> int:
        return len(self._patterns)

    def inspect(self, content: str, file_path: str, branch_name: str) -> None:
        """Scan ``content`` and report each match on the queue."""
        if not content:
            return

        for name, decoder, pattern in self._patterns:
            for match in pattern.finditer(content):
                raw, start = _reported_span(match)
                secret = Secret(
                    detector_type=name,
                    decoder_type=decoder,
                    raw_result=raw,
                    file=file_path,
                    line=_line_number(content, start),
                )
                logger.debug("%s match in %s (%s)", name, file_path, branch_name)
                self._report_queue.put(SecretFound(secret))


def _reported_span(match: re.Match[str]) -> tuple[str, int]:
    """Text and start of the first group that took part in the match.

    Falls back to the whole match when the pattern has no groups or none
    of them participated (alternations, optional groups).
    """
    for index in range(1, match.re.groups + 1):
        value = match.group(index)
        if value is not None:
            return value, match.start(index)
    return match.group(0), match.start(0)


def _line_number(content: str, pos: int) -> int:
    """1-based line number of a character position."""
    return content.count("\n", 0, pos) + 1
