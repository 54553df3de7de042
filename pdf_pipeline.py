"""Extract structured text from a PDF by interpreting its content streams.

Pipeline:
  1. interpret_pages   – run every page's content stream through the
                         interpreter, collecting decoded fragments
  2. assemble_words    – merge fragments into words on single-space fragments
  3. structure_words   – classify words into headings, bullet lines and
                         plain runs
  4. render_text       – lay the lines out as text for an output sink
"""

from __future__ import annotations

import argparse
import logging
import sys
import warnings
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import pdfplumber
from pdfminer.pdfinterp import PDFResourceManager
from pdfminer.pdfparser import PDFSyntaxError
from pdfplumber.utils.exceptions import PdfminerException

from pdf_errors import FatalExtractionError
from pdf_extract import assemble_words
from pdf_interp import ContentInterpreter, Decoder
from pdf_models import Extraction, StructuredLine, TextAccumulator, Token
from pdf_output import FileSink, StreamSink, TextSink
from pdf_source import PageFonts, decode_with_font, iter_page_tokens
from pdf_structure import StructureConfig, render_text, structure_words

logging.getLogger("pdfminer").setLevel(logging.ERROR)
warnings.filterwarnings("ignore", module="pdfminer")

log = logging.getLogger(__name__)

PageInput = tuple[int, Iterable[Token], Any]


def interpret_pages(
    pages: Iterable[PageInput],
    accumulator: TextAccumulator,
    decoder: Decoder = decode_with_font,
) -> None:
    """Interpret ``(page_number, tokens, fonts)`` triples in order into *accumulator*."""
    interp = ContentInterpreter(accumulator, decoder)
    for page_number, tokens, fonts in pages:
        log.debug("interpreting page %d", page_number)
        interp.run_page(page_number, tokens, fonts)
        accumulator.page_count += 1


def extract_pages(
    pages: Iterable[PageInput],
    config: StructureConfig | None = None,
    decoder: Decoder = decode_with_font,
) -> Extraction:
    accumulator = TextAccumulator()
    try:
        interpret_pages(pages, accumulator, decoder)
    except FatalExtractionError as exc:
        log.error("extraction aborted: %s", exc)
        return Extraction(
            lines=None,
            error=exc,
            warnings=accumulator.warnings,
            page_count=accumulator.page_count,
        )

    words = assemble_words(accumulator.fragments)
    log.debug("%d fragments -> %d words", len(accumulator.fragments), len(words))
    return Extraction(
        lines=structure_words(words, config),
        warnings=accumulator.warnings,
        page_count=accumulator.page_count,
    )


def _pdf_pages(pdf: pdfplumber.PDF) -> Iterator[PageInput]:
    rsrcmgr = PDFResourceManager()
    for page in pdf.pages:
        page_obj = page.page_obj
        yield page.page_number, iter_page_tokens(page_obj), PageFonts(page_obj.resources, rsrcmgr)


def extract_document(pdf_path: str | Path, config: StructureConfig | None = None) -> Extraction:
    """Interpret every page of the PDF at *pdf_path* and structure its text."""
    with pdfplumber.open(pdf_path) as pdf:
        return extract_pages(_pdf_pages(pdf), config)


def write_document(lines: Iterable[StructuredLine], sink: TextSink) -> None:
    sink.write(render_text(lines).encode("utf-8"))
    sink.flush()


def _build_config(args: argparse.Namespace) -> StructureConfig:
    overrides: dict[str, tuple[str, ...]] = {}
    if args.heading:
        overrides["heading_keywords"] = tuple(args.heading)
    if args.boundary:
        overrides["boundary_keywords"] = tuple(args.boundary)
    if args.bullet:
        overrides["bullet_markers"] = tuple(args.bullet)
    return StructureConfig(**overrides)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Print the text of a PDF (e.g. a CV) with headings and bullet lists restored.",
    )
    parser.add_argument("pdf", help="Path to the PDF file")
    parser.add_argument(
        "--heading",
        action="append", metavar="WORD",
        help="Heading keyword; repeat to give several (replaces the defaults)",
    )
    parser.add_argument(
        "--boundary",
        action="append", metavar="WORD",
        help="Keyword that ends a bullet line without being a heading (replaces the defaults)",
    )
    parser.add_argument(
        "--bullet",
        action="append", metavar="MARK",
        help="Bullet marker; repeat to give several (replaces the defaults)",
    )
    parser.add_argument(
        "-o", "--output",
        metavar="PATH",
        help="Write the text to PATH instead of stdout",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log interpreter progress",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    path = Path(args.pdf)
    if not path.exists():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    try:
        result = extract_document(path, _build_config(args))
    except (PDFSyntaxError, PdfminerException) as exc:
        print(f"Error: cannot read {path}: {exc}", file=sys.stderr)
        return 1

    if not result.ok:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    if args.output:
        try:
            sink = FileSink(args.output)
        except OSError as exc:
            print(f"Error: cannot write {args.output}: {exc}", file=sys.stderr)
            return 1
        with sink:
            write_document(result.lines, sink)
    else:
        write_document(result.lines, StreamSink(sys.stdout.buffer))
    return 0


if __name__ == "__main__":
    sys.exit(main())
