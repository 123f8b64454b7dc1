"""
Tests for the pdfdeck command-line interface.
"""

import json

from pdfdeck.cli import main


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out.lower()


def test_missing_input(tmp_path, capsys):
    assert main(["convert", str(tmp_path / "missing.pdf")]) == 1
    assert "Input file not found" in capsys.readouterr().err


def test_convert(tmp_path, two_block_pdf):
    pdf_path = tmp_path / "slides.pdf"
    pdf_path.write_bytes(two_block_pdf)

    assert main(["convert", str(pdf_path), "--output", str(tmp_path / "out"), "--no-intermediate"]) == 0
    assert (tmp_path / "out" / "slides.pptx").exists()
    assert not (tmp_path / "out" / "slides.deck.json").exists()


def test_elements_json(tmp_path, two_block_pdf, capsys):
    pdf_path = tmp_path / "slides.pdf"
    pdf_path.write_bytes(two_block_pdf)

    assert main(["elements", str(pdf_path), "--kind", "text"]) == 0
    out = capsys.readouterr().out
    payload = json.loads(out[out.index("[\n") :])
    assert [element["kind"] for element in payload] == ["text", "text"]


def test_export_text(tmp_path):
    source = tmp_path / "notes.txt"
    source.write_text("Meeting notes", encoding="utf-8")
    output = tmp_path / "notes.md"

    assert main(["export-text", str(source), "--format", "markdown", "-o", str(output)]) == 0
    assert "Meeting notes" in output.read_text(encoding="utf-8")


def test_not_a_pdf(tmp_path, capsys):
    fake = tmp_path / "fake.pdf"
    fake.write_bytes(b"hello")
    assert main(["convert", str(fake)]) == 1
    assert "Error" in capsys.readouterr().err
