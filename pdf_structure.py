from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pdf_models import LineKind, StructuredLine, Word

_HEADING_KEYWORDS = ("EDUCATION", "EXPERIENCE", "ACHIEVEMENTS")
_BOUNDARY_KEYWORDS = ("PROFESSIONAL", "Frontend")
_BULLET_MARKERS = ("•", "●")


@dataclass(frozen=True)
class StructureConfig:
    """Vocabulary driving heading and bullet classification.

    All matching is case-sensitive substring containment, so a keyword
    inside a longer word still matches.
    """

    heading_keywords: tuple[str, ...] = _HEADING_KEYWORDS
    boundary_keywords: tuple[str, ...] = _BOUNDARY_KEYWORDS
    bullet_markers: tuple[str, ...] = _BULLET_MARKERS


def _contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(n in text for n in needles)


def _is_heading(text: str, config: StructureConfig) -> bool:
    return _contains_any(text, config.heading_keywords)


def _is_bullet(text: str, config: StructureConfig) -> bool:
    return _contains_any(text, config.bullet_markers)


def _ends_bullet(text: str, config: StructureConfig) -> bool:
    return (
        _is_bullet(text, config)
        or _is_heading(text, config)
        or _contains_any(text, config.boundary_keywords)
    )


def structure_words(words: Sequence[Word], config: StructureConfig | None = None) -> list[StructuredLine]:
    """Classify *words* into heading, bullet and plain-text lines."""
    if config is None:
        config = StructureConfig()

    lines: list[StructuredLine] = []
    plain: StructuredLine | None = None
    i = 0
    n = len(words)

    while i < n:
        term = words[i].text

        if _is_heading(term, config):
            lines.append(StructuredLine(LineKind.HEADING, text=term))
            plain = None
            i += 1
            continue

        if _is_bullet(term, config):
            bullet = StructuredLine(LineKind.BULLET, marker=term)
            lines.append(bullet)
            plain = None
            i += 1
            # Stop on the next construct; the outer loop picks it up from i.
            while i < n and not _ends_bullet(words[i].text, config):
                bullet.words.append(words[i].text)
                i += 1
            continue

        if plain is None:
            plain = StructuredLine(LineKind.PLAIN)
            lines.append(plain)
        plain.words.append(term)
        i += 1

    return lines


def render_line(line: StructuredLine) -> str:
    if line.kind is LineKind.HEADING:
        return f"{line.text}\n"
    if line.kind is LineKind.BULLET:
        body = "".join(f" {w} " for w in line.words)
        return f"\n{line.marker}{body}\n"
    return "".join(f"{w} " for w in line.words)


def render_text(lines: Iterable[StructuredLine]) -> str:
    """Lay out structured lines as terminal text."""
    return "".join(render_line(line) for line in lines)
