import pytest
from PIL import Image

from services import text_extractor
from services.text_extractor import extract_text, is_supported, ocr_languages


def test_supported_extensions():
    assert is_supported("policy.PDF")
    assert is_supported("scan.jpeg")
    assert is_supported("notes.txt")
    assert is_supported("policy.docx")
    assert not is_supported("macro.xlsm")
    assert not is_supported("noextension")


def test_plain_text_passthrough(tmp_path):
    path = tmp_path / "upload.tmp"
    path.write_text("Company Name: Acme Corp\nOHS Policy", encoding="utf-8")
    assert extract_text(path, "policy.txt") == "Company Name: Acme Corp\nOHS Policy"


def test_unsupported_type_returns_empty(tmp_path):
    path = tmp_path / "upload.tmp"
    path.write_bytes(b"PK\x03\x04")
    assert extract_text(path, "sheet.xlsx") == ""


def test_broken_pdf_returns_empty(tmp_path):
    path = tmp_path / "upload.tmp"
    path.write_bytes(b"not really a pdf")
    assert extract_text(path, "policy.pdf") == ""


def test_docx(tmp_path):
    from docx import Document

    path = tmp_path / "upload.docx"
    doc = Document()
    doc.add_paragraph("PT Sinar Jaya")
    doc.add_paragraph("Kebijakan K3")
    doc.save(str(path))
    assert extract_text(path, "kebijakan.docx") == "PT Sinar Jaya\nKebijakan K3"


def test_ocr_languages_hint_first():
    langs = ocr_languages("eng")
    assert langs[0] == "eng"
    assert langs.count("eng") == 1
    assert set(langs) == {"tha", "ind", "vie", "eng"}


def test_image_ocr_tries_languages_until_text(tmp_path, monkeypatch):
    path = tmp_path / "scan.png"
    Image.new("RGB", (40, 20), "white").save(path)
    tried = []

    def fake_image_to_string(image, lang):
        tried.append(lang)
        if lang == "tha":
            raise text_extractor.pytesseract.TesseractError(1, "missing traineddata")
        if lang == "ind":
            return "  x "
        return "Incident Reporting Procedure"

    monkeypatch.setattr(text_extractor.pytesseract, "image_to_string", fake_image_to_string)
    assert extract_text(path, "scan.png") == "Incident Reporting Procedure"
    assert tried == ["tha", "ind", "vie"]


def test_image_ocr_nothing_found(tmp_path, monkeypatch):
    path = tmp_path / "scan.png"
    Image.new("RGB", (40, 20), "white").save(path)
    monkeypatch.setattr(text_extractor.pytesseract, "image_to_string", lambda image, lang: "")
    assert extract_text(path, "scan.png") == ""
