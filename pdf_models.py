from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from pdf_errors import FatalExtractionError


class OperandKind(Enum):
    NUMBER = "number"
    NAME = "name"
    STRING = "string"
    ARRAY = "array"
    OTHER = "other"


@dataclass(frozen=True)
class Operand:
    """A typed operator argument from a content stream."""

    kind: OperandKind
    value: Any


@dataclass(frozen=True)
class Keyword:
    """An operator name from a content stream, e.g. ``Tj`` or ``BT``."""

    name: str


Token = Union[Operand, Keyword]


@dataclass
class TextState:
    inside_text: bool = False
    active_font: Any = None


@dataclass
class Fragment:
    """Decoded text from a single text-showing operator application."""

    text: str
    page_number: int


@dataclass
class Word:
    """A run of fragments between single-space fragments."""

    text: str
    page_number: int


class LineKind(Enum):
    HEADING = "heading"
    BULLET = "bullet"
    PLAIN = "plain"


@dataclass
class StructuredLine:
    """One output line of the structured document."""

    kind: LineKind
    text: str = ""
    marker: str = ""
    words: list[str] = field(default_factory=list)


@dataclass
class TextAccumulator:
    """Fragments and warnings collected over one document run."""

    fragments: list[Fragment] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    page_count: int = 0


@dataclass
class Extraction:
    """Outcome of one document run: structured lines or a fatal error."""

    lines: list[StructuredLine] | None
    error: FatalExtractionError | None = None
    warnings: list[str] = field(default_factory=list)
    page_count: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None
