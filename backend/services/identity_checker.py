"""Company identity checks for uploaded documents.

Two separate paths:

- Verification (``check_identity``): deterministic normalized comparison of the
  document text against the subject's registered company name. Gates scoring.
- Advisory extraction (``extract_company_name``): best-effort heuristic used at
  onboarding. Its output is only shown to the supplier for confirmation and is
  never stored as an identity by this module.
"""

import logging
import re
from enum import Enum

from models.schemas.identity import IdentityCheckResult

logger = logging.getLogger(__name__)


class IdentityMatchStrategy(str, Enum):
    EXACT_NORMALIZED = "exact_normalized"
    TOKEN_OVERLAP = "token_overlap"


# Legal-entity words that vary between documents of the same company
LEGAL_SUFFIXES = frozenset({
    "limited", "ltd", "inc", "incorporated", "corp", "corporation",
    "company", "co", "plc", "pvt", "private", "pte", "llc", "pt", "cv", "tbk",
})

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")

_LABELLED_NAME_RE = re.compile(r"(?:company name|supplier)\s*[:\-]\s*(.+)$", re.IGNORECASE)
_LEGAL_PREFIX_RE = re.compile(
    r"^(PT|CV|UD|PD|PERUSAHAAN|COMPANY|CORP|CORPORATION|INC|CO\.?|LTD|LLC|S\.A\.|Tbk)"
    r"\s+[A-Z0-9 .,&()'\"\-]{2,}$",
    re.IGNORECASE,
)
_ALPHA_LINE_RE = re.compile(r"^[a-zA-Z\s.]+$")

# Standalone lines up to this many words are treated as possible name lines
_MAX_NAME_LINE_WORDS = 8
_MIN_SIGNIFICANT_WORD_LEN = 3


def normalize_text(text: str) -> str:
    """Lower-case, keep letters/digits/whitespace, collapse whitespace."""
    lowered = _NON_ALNUM_RE.sub("", text.lower())
    return _WHITESPACE_RE.sub(" ", lowered).strip()


def normalize_company_name(name: str) -> str:
    """``normalize_text`` with legal-entity words removed.

    A name made only of legal-entity words keeps its unstripped form.
    """
    normalized = normalize_text(name)
    tokens = [t for t in normalized.split(" ") if t and t not in LEGAL_SUFFIXES]
    return " ".join(tokens) if tokens else normalized


def _document_lines(text: str) -> list[str]:
    lines = (line.strip() for line in text.splitlines())
    return [line for line in lines if len(line) > 2]


def candidate_name_lines(text: str) -> list[str]:
    """Lines of ``text`` that could carry the company name, most explicit first."""
    labelled: list[str] = []
    marked: list[str] = []
    standalone: list[str] = []

    for line in _document_lines(text):
        match = _LABELLED_NAME_RE.search(line)
        if match:
            labelled.append(match.group(1).strip())
            continue
        tokens = normalize_text(line).split(" ")
        if tokens and (tokens[0] in LEGAL_SUFFIXES or tokens[-1] in LEGAL_SUFFIXES):
            marked.append(line)
        elif len(tokens) <= _MAX_NAME_LINE_WORDS:
            standalone.append(line)

    return labelled + marked + standalone


def exact_normalized_match(text: str, registered_name: str) -> bool:
    target = normalize_company_name(registered_name)
    if not target:
        return False
    return any(normalize_company_name(line) == target for line in candidate_name_lines(text))


def token_overlap_match(text: str, registered_name: str) -> bool:
    """At least ``min(2, n)`` significant words of the name appear in the text.

    Legal-entity words are not significant: "Acme Corp Ltd" needs "acme" in
    the document, not "corp".
    """
    name_norm = normalize_company_name(registered_name)
    if not name_norm:
        return False
    doc_norm = normalize_text(text)

    words = [w for w in name_norm.split(" ") if len(w) >= _MIN_SIGNIFICANT_WORD_LEN]
    if not words:
        return name_norm in doc_norm

    match_count = sum(1 for w in words if w in doc_norm)
    logger.debug("Identity token overlap: %d of %d words", match_count, len(words))
    return match_count >= min(2, len(words))


_STRATEGIES = {
    IdentityMatchStrategy.EXACT_NORMALIZED: exact_normalized_match,
    IdentityMatchStrategy.TOKEN_OVERLAP: token_overlap_match,
}


def check_identity(
    text: str,
    registered_name: str,
    strategy: IdentityMatchStrategy | str = IdentityMatchStrategy.TOKEN_OVERLAP,
) -> IdentityCheckResult:
    strategy = IdentityMatchStrategy(strategy)
    matched = _STRATEGIES[strategy](text, registered_name)
    if not matched:
        logger.info("Identity check failed (%s) for registered name %r", strategy.value, registered_name)
    return IdentityCheckResult(
        matched=matched,
        registered_name=registered_name,
        strategy=strategy.value,
    )


def extract_company_name(text: str) -> str:
    """Guess the company name from document text.

    Tries, in order: a "Company Name:"/"Supplier:" label, a line led by a
    legal-entity token, the first purely alphabetic line of two or more words,
    and finally the first non-empty line.
    """
    lines = _document_lines(text)

    for line in lines:
        match = _LABELLED_NAME_RE.search(line)
        if match and match.group(1).strip():
            return match.group(1).strip()

    for line in lines:
        if _LEGAL_PREFIX_RE.match(line):
            return line

    for line in lines:
        if len(line.split()) >= 2 and _ALPHA_LINE_RE.match(line):
            return line

    return lines[0] if lines else ""
