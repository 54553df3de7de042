"""Content-stream interpreter.

Walks the operand/keyword events of a page, keeps an operand stack and the
text-object state, and turns every text-showing operator into decoded
fragments:

  BT / ET        – enter / leave a text object
  l, m           – clear the operand stack
  Tf             – select the active font (text objects only)
  Tj, '          – show one string
  "              – show one string, discarding word and char spacing
  TJ             – show the string elements of an array

Malformed operand counts are reported as warnings and the operator is
skipped. Anything that leaves no way to decode text (unknown font, no font
selected, wrong operand kind, unknown token type) raises a
FatalExtractionError subclass.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from pdf_errors import FontNotFoundError, NoActiveFontError, OperandTypeError, UnexpectedTokenError
from pdf_models import Fragment, Keyword, Operand, OperandKind, TextAccumulator, TextState, Token

log = logging.getLogger(__name__)

Decoder = Callable[[Any, bytes], str]

_STACK_CLEARING = frozenset({"l", "m"})


def decode_fragment(font: Any, raw: bytes, decoder: Decoder, page_number: int | None = None) -> str:
    if font is None:
        raise NoActiveFontError("text shown before any font was selected", page_number)
    return decoder(font, raw)


class ContentInterpreter:
    """Interprets content-stream tokens page by page into an accumulator."""

    def __init__(self, accumulator: TextAccumulator, decoder: Decoder) -> None:
        self.accumulator = accumulator
        self.decoder = decoder
        self.stack: list[Operand] = []
        self.state = TextState()
        self.fonts: Any = None
        self.page_number = 0

    def run_page(self, page_number: int, tokens: Iterable[Token], fonts: Any) -> None:
        # Fonts are scoped to the page resources, so nothing carries over.
        self.stack = []
        self.state = TextState()
        self.fonts = fonts
        self.page_number = page_number
        for token in tokens:
            self.feed(token)

    def feed(self, token: Token) -> None:
        if isinstance(token, Operand):
            self.stack.append(token)
            return
        if not isinstance(token, Keyword):
            raise UnexpectedTokenError(f"unexpected token {token!r}", self.page_number)

        name = token.name
        if name in _STACK_CLEARING:
            self.stack.clear()
        elif name == "BT":
            self.state.inside_text = True
        elif name == "ET":
            if self.state.inside_text:
                self.state.inside_text = False
            else:
                self._warn("Found ET without BT")

        if not self.state.inside_text:
            return

        if name == "Tf":
            self._select_font()
        elif name in ("Tj", "'"):
            self._show_string(name)
        elif name == '"':
            self._show_spaced_string()
        elif name == "TJ":
            self._show_array()

    def _warn(self, message: str) -> None:
        log.warning("page %d: %s", self.page_number, message)
        self.accumulator.warnings.append(f"page {self.page_number}: {message}")

    def _pop(self, kind: OperandKind, operator: str) -> Operand:
        operand = self.stack.pop()
        if operand.kind is not kind:
            raise OperandTypeError(
                f"'{operator}' expects a {kind.value} operand, got {operand.kind.value}",
                self.page_number,
            )
        return operand

    def _emit(self, raw: bytes) -> None:
        text = decode_fragment(self.state.active_font, raw, self.decoder, self.page_number)
        self.accumulator.fragments.append(Fragment(text, self.page_number))

    def _select_font(self) -> None:
        if len(self.stack) < 2:
            self._warn("Expects two arguments for 'Tf', ignoring")
            self.state.active_font = None
            return
        self.stack.pop()  # size
        font_name = self._pop(OperandKind.NAME, "Tf").value
        font = self.fonts.resolve(font_name) if self.fonts is not None else None
        if font is None:
            available = ", ".join(self.fonts.names()) if self.fonts is not None else ""
            raise FontNotFoundError(
                f"cannot create font {font_name!r} (page fonts: {available or 'none'})",
                self.page_number,
            )
        self.state.active_font = font

    def _show_string(self, operator: str) -> None:
        if len(self.stack) < 1:
            self._warn(f"Expects one argument for '{operator}', ignoring")
            return
        self._emit(self._pop(OperandKind.STRING, operator).value)

    def _show_spaced_string(self) -> None:
        if len(self.stack) < 3:
            self._warn("Expects three arguments for '\"', ignoring")
            self.stack.clear()
            return
        log.debug('page %d: showing string with spacing (")', self.page_number)
        self._emit(self._pop(OperandKind.STRING, '"').value)
        del self.stack[-2:]

    def _show_array(self) -> None:
        # Only the top array is consumed, but three operands must be present.
        if len(self.stack) < 3:
            self._warn("Expects three arguments for 'TJ', ignoring")
            return
        for element in self._pop(OperandKind.ARRAY, "TJ").value:
            if element.kind is OperandKind.STRING:
                self._emit(element.value)
