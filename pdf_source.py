"""pdfminer adapters: page token source, font resolver and glyph decoding."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from pdfminer.pdffont import PDFFont, PDFUnicodeNotDefined
from pdfminer.pdfinterp import PDFContentParser, PDFResourceManager
from pdfminer.pdfpage import PDFPage
from pdfminer.pdftypes import PDFObjRef, dict_value, list_value, resolve1
from pdfminer.psparser import PSEOF, PSKeyword, PSLiteral, keyword_name, literal_name

from pdf_models import Keyword, Operand, OperandKind, Token

log = logging.getLogger(__name__)


def to_operand(obj: Any) -> Operand:
    """Wrap a parsed pdfminer object as a typed operand."""
    if isinstance(obj, bool) or obj is None:
        return Operand(OperandKind.OTHER, obj)
    if isinstance(obj, (int, float)):
        return Operand(OperandKind.NUMBER, obj)
    if isinstance(obj, PSLiteral):
        return Operand(OperandKind.NAME, literal_name(obj))
    if isinstance(obj, bytes):
        return Operand(OperandKind.STRING, obj)
    if isinstance(obj, list):
        return Operand(OperandKind.ARRAY, tuple(to_operand(o) for o in obj))
    return Operand(OperandKind.OTHER, obj)


def to_token(obj: Any) -> Token:
    if isinstance(obj, PSKeyword):
        return Keyword(keyword_name(obj))
    return to_operand(obj)


def iter_page_tokens(page: PDFPage) -> Iterator[Token]:
    """Yield the operand/keyword events of *page*'s content streams in order."""
    streams = list_value(page.contents) if page.contents else []
    if not streams:
        return
    try:
        parser = PDFContentParser(streams)
    except PSEOF:
        return
    while True:
        try:
            _, obj = parser.nextobject()
        except PSEOF:
            return
        yield to_token(obj)


class PageFonts:
    """Resolve font names against one page's ``/Font`` resource dictionary."""

    def __init__(self, resources: Any, rsrcmgr: PDFResourceManager | None = None) -> None:
        self.rsrcmgr = rsrcmgr if rsrcmgr is not None else PDFResourceManager()
        self._specs: dict[str, Any] = {}
        self._fonts: dict[str, PDFFont] = {}
        if resources:
            fonts = resolve1(dict_value(resources).get("Font"))
            if fonts:
                self._specs = dict(dict_value(fonts))

    def names(self) -> list[str]:
        return sorted(self._specs)

    def resolve(self, name: str) -> PDFFont | None:
        if name in self._fonts:
            return self._fonts[name]
        spec = self._specs.get(name)
        if spec is None:
            return None
        objid = spec.objid if isinstance(spec, PDFObjRef) else None
        font = self.rsrcmgr.get_font(objid, dict_value(spec))
        log.debug("resolved font %s -> %r", name, font)
        self._fonts[name] = font
        return font


def decode_with_font(font: PDFFont, raw: bytes) -> str:
    """Map the bytes of a string operand to Unicode through *font*'s encoding.

    Character codes without a Unicode mapping come out as ``(cid:N)``, the
    same placeholder pdfminer's own text converters use.
    """
    chars: list[str] = []
    for cid in font.decode(raw):
        try:
            chars.append(font.to_unichr(cid))
        except PDFUnicodeNotDefined:
            chars.append(f"(cid:{cid})")
    return "".join(chars)
