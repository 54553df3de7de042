from __future__ import annotations

from collections.abc import Iterable

from pdf_models import Fragment, Word

_WORD_BREAK = " "


def assemble_words(fragments: Iterable[Fragment]) -> list[Word]:
    """Merge decoded fragments into words, splitting on single-space fragments.

    Producers usually emit one show operator per glyph or short run, so a
    fragment that is exactly one space is the only word boundary. Words
    batched into a single show call, or spaced by positioning alone, stay
    merged.
    """
    words: list[Word] = []
    current_text = ""
    current_page = 0

    for frag in fragments:
        if frag.text == _WORD_BREAK:
            if current_text:
                words.append(Word(current_text, current_page))
                current_text = ""
            continue

        if not current_text:
            current_page = frag.page_number
        current_text += frag.text

    if current_text:
        words.append(Word(current_text, current_page))

    return words
