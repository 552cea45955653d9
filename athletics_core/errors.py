"""Error values returned by the engine.

Public operations never raise for bad input: they return an outcome whose
``error`` field carries an :class:`EngineError`. Building-block helpers raise
:class:`InvalidConfiguration`, which the public operations translate.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ErrorKind = Literal["invalid_configuration", "no_eligible_entries"]


class InvalidConfiguration(ValueError):
    """Raised by helpers when lane/heat counts or rules are out of range."""


@dataclass(frozen=True)
class EngineError:
    """Represents a classified engine failure (no I/O involved)."""

    kind: ErrorKind
    message: str | None = None
    # Entries filtered out as non-startable; meaningful for no_eligible_entries.
    excluded_count: int = 0
