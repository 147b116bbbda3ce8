"""Core data models for Secret Sweep.

This module defines the finding record produced by detection engines and
the messages carried on the reporting channel between the executor and
a reporter.
"""

from __future__ import annotations

import queue
from dataclasses import dataclass
from enum import Enum
from typing import Union

from pydantic import BaseModel, Field


class DecoderType(str, Enum):
    """How the raw result was decoded before matching."""

    PLAIN = "Plane"
    BASE64 = "Base64"
    JWT = "JWT"


UNVERIFIED_MARKER = "Found unverified result ?"
VERIFIED_MARKER = "Found verified result !"


class Secret(BaseModel):
    """A secret found by a detection engine.

    Ownership passes to the reporter as soon as the record is sent on the
    reporting channel.
    """

    detector_type: str = Field(..., description="Detector that matched (e.g. 'AWS')")
    decoder_type: DecoderType = Field(
        default=DecoderType.PLAIN,
        description="Decoder applied before matching",
    )
    raw_result: str = Field(..., description="The matched text")
    file: str = Field(..., description="Path to the file containing the secret")
    line: int = Field(..., ge=1, description="Line number where the secret was found")
    verified: bool = Field(
        default=False,
        description="Whether a live credential check confirmed the secret",
    )

    def __str__(self) -> str:
        marker = VERIFIED_MARKER if self.verified else UNVERIFIED_MARKER
        return (
            f"{marker}\n"
            f"Detector Type: {self.detector_type}\n"
            f"DecoderType: {self.decoder_type.value}\n"
            f"RawResult: {self.raw_result}\n"
            f"File: {self.file}\n"
            f"Line: {self.line}\n"
        )


@dataclass(frozen=True)
class BytesProcessed:
    """Progress signal: one file of ``size`` bytes was handed to the engine."""

    size: int


@dataclass(frozen=True)
class SecretFound:
    """Finding signal carrying a single secret."""

    secret: Secret


ReportInput = Union[BytesProcessed, SecretFound]


def new_report_queue() -> queue.Queue[ReportInput | None]:
    """Create an unbounded reporting channel.

    ``None`` on this queue marks the end of the whole scan.
    """
    return queue.Queue()
