"""End-to-end tests: token pages and real PDFs through the whole pipeline."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from pdf_errors import FontNotFoundError
from pdf_models import Keyword, LineKind, Operand, OperandKind, Token
from pdf_pipeline import PageInput, extract_document, extract_pages, main


class FakeFonts:
    def __init__(self, *names: str) -> None:
        self.known = set(names)

    def resolve(self, font_name: str) -> str | None:
        return font_name if font_name in self.known else None

    def names(self) -> list[str]:
        return sorted(self.known)


def utf8(font: object, raw: bytes) -> str:
    return raw.decode("utf-8")


def show_page(font: str, *fragments: str) -> list[Token]:
    tokens: list[Token] = [
        Keyword("BT"),
        Operand(OperandKind.NAME, font),
        Operand(OperandKind.NUMBER, 12),
        Keyword("Tf"),
    ]
    for frag in fragments:
        tokens += [Operand(OperandKind.STRING, frag.encode("utf-8")), Keyword("Tj")]
    tokens.append(Keyword("ET"))
    return tokens


def make_pdf(path: Path, contents: list[bytes], font_name: bytes = b"F1") -> Path:
    """Write a minimal PDF with one Helvetica font resource per page."""
    page_ids = [4 + 2 * i for i in range(len(contents))]
    kids = b" ".join(b"%d 0 R" % pid for pid in page_ids)
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [" + kids + b"] /Count %d >>" % len(contents),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for pid, content in zip(page_ids, contents):
        objects.append(
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            b"/Resources << /Font << /" + font_name + b" 3 0 R >> >> "
            b"/Contents %d 0 R >>" % (pid + 1)
        )
        objects.append(b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for num, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % num + body + b"\nendobj\n"
    xref = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for off in offsets:
        out += b"%010d 00000 n \n" % off
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref)
    path.write_bytes(bytes(out))
    return path


CV_PAGE = (
    b"BT /F1 12 Tf 72 700 Td (EDUCATION) Tj ( ) Tj "
    b"(\\267) Tj ( ) Tj (B) Tj (Sc) Tj ( ) Tj [(Phy) -20 (sics)] TJ ET"
)


def test_words_accumulate_across_pages() -> None:
    pages: list[PageInput] = [
        (1, show_page("F1", "H", "i", " ", "EXPERI"), FakeFonts("F1")),
        (2, show_page("F1", "ENCE", " ", "•", " ", "Ran", " ", "tests"), FakeFonts("F1")),
    ]
    result = extract_pages(pages, decoder=utf8)
    assert result.ok
    assert result.page_count == 2
    assert [line.kind for line in result.lines] == [LineKind.PLAIN, LineKind.HEADING, LineKind.BULLET]
    assert result.lines[1].text == "EXPERIENCE"
    assert result.lines[2].words == ["Ran", "tests"]


def test_fatal_font_stops_run_and_yields_no_lines() -> None:
    consumed: list[int] = []

    def pages() -> Iterator[PageInput]:
        for number, font in [(1, "F1"), (2, "F9"), (3, "F1")]:
            consumed.append(number)
            yield number, show_page(font, "text"), FakeFonts("F1")

    result = extract_pages(pages(), decoder=utf8)
    assert not result.ok
    assert result.lines is None
    assert isinstance(result.error, FontNotFoundError)
    assert result.error.page_number == 2
    assert "page 2" in str(result.error)
    assert consumed == [1, 2]
    assert result.page_count == 1


def test_warnings_reported_on_result() -> None:
    tokens: list[Token] = [Keyword("ET"), *show_page("F1", "ok")]
    result = extract_pages([(1, tokens, FakeFonts("F1"))], decoder=utf8)
    assert result.ok
    assert result.warnings == ["page 1: Found ET without BT"]


def test_extract_document_from_pdf(tmp_path: Path) -> None:
    pdf_path = make_pdf(tmp_path / "cv.pdf", [CV_PAGE])
    result = extract_document(pdf_path)
    assert result.ok, result.error
    assert result.page_count == 1
    assert [line.kind for line in result.lines] == [LineKind.HEADING, LineKind.BULLET]
    assert result.lines[1].marker == "•"
    assert result.lines[1].words == ["BSc", "Physics"]


def test_extract_document_unknown_font(tmp_path: Path) -> None:
    pdf_path = make_pdf(tmp_path / "bad.pdf", [CV_PAGE, CV_PAGE], font_name=b"F2")
    result = extract_document(pdf_path)
    assert isinstance(result.error, FontNotFoundError)
    assert result.error.page_number == 1
    assert result.lines is None


def test_cli_writes_output_file(tmp_path: Path) -> None:
    pdf_path = make_pdf(tmp_path / "cv.pdf", [CV_PAGE])
    out = tmp_path / "cv.txt"
    assert main([str(pdf_path), "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8") == "EDUCATION\n\n• BSc  Physics \n"


def test_cli_custom_heading(tmp_path: Path) -> None:
    pdf_path = make_pdf(tmp_path / "cv.pdf", [CV_PAGE])
    out = tmp_path / "cv.txt"
    assert main([str(pdf_path), "--heading", "Physics", "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8") == "EDUCATION \n• BSc \nPhysics\n"


def test_cli_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(tmp_path / "nope.pdf")]) == 1
    assert "file not found" in capsys.readouterr().err


def test_cli_fatal_error_exit_status(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pdf_path = make_pdf(tmp_path / "bad.pdf", [CV_PAGE], font_name=b"F2")
    assert main([str(pdf_path)]) == 1
    err = capsys.readouterr().err
    assert "Error: page 1" in err
    assert "F1" in err


def test_cli_writes_stdout_by_default(tmp_path: Path, capsysbinary: pytest.CaptureFixture[bytes]) -> None:
    pdf_path = make_pdf(tmp_path / "cv.pdf", [CV_PAGE])
    assert main([str(pdf_path)]) == 0
    assert capsysbinary.readouterr().out == "EDUCATION\n\n• BSc  Physics \n".encode("utf-8")


def test_cli_custom_bullet(tmp_path: Path) -> None:
    pdf_path = make_pdf(tmp_path / "cv.pdf", [CV_PAGE])
    out = tmp_path / "cv.txt"
    assert main([str(pdf_path), "--bullet", "BSc", "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8") == "EDUCATION\n• \nBSc Physics \n"


def test_cli_custom_boundary(tmp_path: Path) -> None:
    pdf_path = make_pdf(tmp_path / "cv.pdf", [CV_PAGE])
    out = tmp_path / "cv.txt"
    assert main([str(pdf_path), "--boundary", "Phys", "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8") == "EDUCATION\n\n• BSc \nPhysics "


def test_cli_not_a_pdf(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "notes.pdf"
    path.write_text("just some text, no PDF structure\n")
    assert main([str(path)]) == 1
    assert "Error: cannot read" in capsys.readouterr().err


def test_cli_unwritable_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pdf_path = make_pdf(tmp_path / "cv.pdf", [CV_PAGE])
    out = tmp_path / "missing" / "cv.txt"
    assert main([str(pdf_path), "-o", str(out)]) == 1
    assert "Error: cannot write" in capsys.readouterr().err
    assert not out.exists()
