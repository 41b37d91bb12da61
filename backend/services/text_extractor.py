"""Text extraction from uploaded documents.

PDF text layer via pdfplumber, OCR via pytesseract for images and for PDFs
without a text layer, DOCX via python-docx, plain text passthrough.
``extract_text`` returns "" when nothing can be read; it never raises for a
document with no text.
"""

import logging
from pathlib import Path

import pdfplumber
import pytesseract
from PIL import Image

from config import settings

logger = logging.getLogger(__name__)

PDF_EXTENSIONS = frozenset({".pdf"})
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".tif", ".tiff", ".bmp"})
TEXT_EXTENSIONS = frozenset({".txt"})
DOCX_EXTENSIONS = frozenset({".docx"})
SUPPORTED_EXTENSIONS = PDF_EXTENSIONS | IMAGE_EXTENSIONS | TEXT_EXTENSIONS | DOCX_EXTENSIONS

# OCR output shorter than this is treated as noise and the next language is tried
_MIN_OCR_CHARS = 10
_OCR_RESOLUTION = 300


def is_supported(filename: str) -> bool:
    return Path(filename).suffix.lower() in SUPPORTED_EXTENSIONS


def ocr_languages(language_hint: str | None = None) -> list[str]:
    """Configured OCR languages with the hint (if any) tried first."""
    languages = list(settings.ocr_languages)
    if language_hint:
        languages = [language_hint] + [lang for lang in languages if lang != language_hint]
    return languages


def _ocr_image(image: Image.Image, languages: list[str]) -> str:
    for lang in languages:
        try:
            text = pytesseract.image_to_string(image, lang=lang)
        except (pytesseract.TesseractError, OSError) as e:
            logger.warning("OCR failed for language %s: %s", lang, e)
            continue
        if text and len(text.strip()) > _MIN_OCR_CHARS:
            return text.strip()
    return ""


def extract_pdf_text(path: Path) -> str:
    """Extract the text layer of a PDF file."""
    with pdfplumber.open(path) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return "\n".join(pages).strip()


def ocr_pdf(path: Path, languages: list[str]) -> str:
    """OCR every page of a scanned PDF."""
    with pdfplumber.open(path) as pdf:
        pages = [
            _ocr_image(page.to_image(resolution=_OCR_RESOLUTION).original, languages)
            for page in pdf.pages
        ]
    return "\n".join(p for p in pages if p).strip()


def ocr_image_file(path: Path, languages: list[str]) -> str:
    with Image.open(path) as image:
        return _ocr_image(image, languages)


def extract_docx_text(path: Path) -> str:
    """Extract all paragraph text from a DOCX file."""
    from docx import Document

    doc = Document(str(path))
    return "\n".join(p.text for p in doc.paragraphs).strip()


def extract_text(path: str | Path, filename: str, language_hint: str | None = None) -> str:
    """Extract text from a stored upload, dispatching on the declared filename."""
    path = Path(path)
    ext = Path(filename).suffix.lower()

    try:
        if ext in PDF_EXTENSIONS:
            text = extract_pdf_text(path)
            if not text:
                logger.info("No PDF text layer in %s, falling back to OCR", filename)
                text = ocr_pdf(path, ocr_languages(language_hint))
        elif ext in IMAGE_EXTENSIONS:
            text = ocr_image_file(path, ocr_languages(language_hint))
        elif ext in TEXT_EXTENSIONS:
            text = path.read_text(encoding="utf-8", errors="replace")
        elif ext in DOCX_EXTENSIONS:
            text = extract_docx_text(path)
        else:
            logger.info("Unsupported file type for %s", filename)
            text = ""
    except Exception:
        logger.exception("Text extraction failed for %s", filename)
        return ""

    logger.info("Extracted %d characters from %s", len(text), filename)
    return text
