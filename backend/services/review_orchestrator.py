"""Review orchestrator: one uploaded document -> one stored verdict.

Flow per request:
    RECEIVED
      └─ text extraction            → TEXT_EXTRACTED   (empty → REJECTED_UNREADABLE)
           ├─ onboarding question, no identity yet
           │     └─ extract_company_name → AWAITING_IDENTITY_CONFIRMATION
           └─ check_identity            → IDENTITY_CHECKED (fail → REJECTED_NO_IDENTITY)
                └─ prompt + LLM + extract_single_score → SCORED
                      └─ store.upsert_verdict          → PERSISTED

The identity gate always completes before the LLM is called, and nothing is
written until the LLM call and the parse attempt have both returned.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable

from pydantic import BaseModel

from models.schemas.audit import (
    KIND_DISAGREEMENT,
    KIND_MISSING_JUSTIFICATION,
    DisagreementEntry,
    ManualOverrideEntry,
)
from models.schemas.identity import IdentityRecord
from models.schemas.verdict import STATUS_ANSWERED, STATUS_AUDITOR_FINAL, Verdict, utcnow
from models.score_band import ScoreBand, format_band, parse_band_name
from services import prompt_builder, text_extractor
from services.errors import ReviewValidationError
from services.identity_checker import (
    IdentityMatchStrategy,
    check_identity,
    extract_company_name,
)
from services.rubric_registry import RubricRegistry
from services.score_parser import extract_single_score
from services.store import BaseStore

logger = logging.getLogger(__name__)

LLMCall = Callable[[str, str | None], Awaitable[str]]
TextExtractor = Callable[[Path, str, str | None], str]

UNREADABLE_MESSAGE = (
    "Your document could not be read. Please upload a clear, readable file "
    "(PDF, Word, or image) with visible content."
)
NO_IDENTITY_MESSAGE = (
    "No official supplier/company name is on record yet. Please upload your OHS "
    "Policy first, or set your company name manually."
)


class ReviewState(str, Enum):
    RECEIVED = "received"
    TEXT_EXTRACTED = "text_extracted"
    IDENTITY_CHECKED = "identity_checked"
    AWAITING_IDENTITY_CONFIRMATION = "awaiting_identity_confirmation"
    REJECTED_NO_IDENTITY = "rejected_no_identity"
    REJECTED_UNREADABLE = "rejected_unreadable"
    SCORED = "scored"
    PERSISTED = "persisted"


class ReviewOutcome(BaseModel):
    """Result of one document review request."""
    state: ReviewState
    accepted: bool = False
    verdict: Verdict | None = None
    needs_identity_confirmation: bool = False
    detected_name: str | None = None
    message: str = ""


def _require_subject(subject_id: str | None) -> str:
    if not subject_id or not subject_id.strip():
        raise ReviewValidationError("Missing subject id")
    return subject_id.strip()


def _require_question(question_number: int | None) -> int:
    if not isinstance(question_number, int) or isinstance(question_number, bool) or question_number <= 0:
        raise ReviewValidationError("Invalid or missing question number")
    return question_number


def _require_text(value: str | None, field: str) -> str:
    if not value or not value.strip():
        raise ReviewValidationError(f"Missing {field}")
    return value.strip()


class ReviewOrchestrator:
    def __init__(
        self,
        store: BaseStore,
        registry: RubricRegistry,
        llm: LLMCall,
        identity_strategy: IdentityMatchStrategy | str = IdentityMatchStrategy.TOKEN_OVERLAP,
        onboarding_question: int = 1,
        extractor: TextExtractor = text_extractor.extract_text,
    ) -> None:
        self.store = store
        self.registry = registry
        self.llm = llm
        self.identity_strategy = IdentityMatchStrategy(identity_strategy)
        self.onboarding_question = onboarding_question
        self.extractor = extractor

    # ------------------------------------------------------------------
    # Document review
    # ------------------------------------------------------------------

    async def review_upload(
        self,
        subject_id: str,
        question_number: int,
        path: Path,
        filename: str,
        user_explanation: str | None = None,
        language_hint: str | None = None,
    ) -> ReviewOutcome:
        """Extract text from a stored upload, then run ``check_document``."""
        _require_subject(subject_id)
        _require_question(question_number)
        text = self.extractor(path, filename, language_hint)
        return await self.check_document(subject_id, question_number, text, user_explanation)

    async def check_document(
        self,
        subject_id: str,
        question_number: int,
        file_text: str,
        user_explanation: str | None = None,
    ) -> ReviewOutcome:
        subject_id = _require_subject(subject_id)
        question_number = _require_question(question_number)

        if not file_text or not file_text.strip():
            logger.info("Unreadable document for %s Q%d", subject_id, question_number)
            return ReviewOutcome(state=ReviewState.REJECTED_UNREADABLE, message=UNREADABLE_MESSAGE)

        identity = await self.store.get_identity(subject_id)

        if identity is None:
            if question_number == self.onboarding_question:
                detected = extract_company_name(file_text)
                logger.info("Onboarding %s: detected company name %r", subject_id, detected)
                return ReviewOutcome(
                    state=ReviewState.AWAITING_IDENTITY_CONFIRMATION,
                    accepted=True,
                    needs_identity_confirmation=True,
                    detected_name=detected,
                    message=f'Detected company name: "{detected}". Please confirm or correct this.',
                )
            return ReviewOutcome(
                state=ReviewState.REJECTED_NO_IDENTITY,
                needs_identity_confirmation=True,
                message=NO_IDENTITY_MESSAGE,
            )

        check = check_identity(file_text, identity.company_name, self.identity_strategy)
        if not check.matched:
            return ReviewOutcome(
                state=ReviewState.REJECTED_NO_IDENTITY,
                needs_identity_confirmation=True,
                detected_name=identity.company_name,
                message=(
                    "Document does not clearly mention your registered company name: "
                    f'"{identity.company_name}". Please check or correct your company name.'
                ),
            )

        prompt = prompt_builder.build_review_prompt(
            question_text=self.registry.question_text(question_number),
            scoring_guide=self.registry.scoring_guide(question_number),
            document_text=file_text,
            user_explanation=user_explanation,
        )
        if question_number not in self.registry:
            logger.warning("No rubric for question %d, reviewing without guide", question_number)

        feedback = await self.llm(prompt, None)
        parsed = extract_single_score(feedback)
        if parsed is None:
            logger.warning("No score found in LLM reply for %s Q%d", subject_id, question_number)

        existing = await self.store.get_verdict(subject_id, question_number)
        verdict = Verdict(
            subject_id=subject_id,
            question_number=question_number,
            band=parsed.band if parsed else None,
            raw_feedback=feedback,
            answer=existing.answer if existing else None,
        )
        await self.store.upsert_verdict(verdict)
        return ReviewOutcome(
            state=ReviewState.PERSISTED,
            accepted=True,
            verdict=verdict,
            message=feedback,
        )

    # ------------------------------------------------------------------
    # Disputes and missing documents (append-only log)
    # ------------------------------------------------------------------

    async def _log_variant_review(
        self,
        subject_id: str,
        question_number: int,
        kind: str,
        requirement_text: str,
        reason: str,
        prompt: str,
    ) -> Verdict:
        feedback = await self.llm(prompt, None)
        parsed = extract_single_score(feedback)
        band = parsed.band if parsed else None

        await self.store.append_disagreement(DisagreementEntry(
            subject_id=subject_id,
            question_number=question_number,
            kind=kind,
            requirement_text=requirement_text,
            reason=reason,
            band=band,
            ai_feedback=feedback,
        ))
        logger.info("Logged %s for %s Q%d: %s", kind, subject_id, question_number, band)
        return Verdict(
            subject_id=subject_id,
            question_number=question_number,
            band=band,
            raw_feedback=feedback,
        )

    async def record_disagreement(
        self,
        subject_id: str,
        question_number: int,
        requirement_text: str,
        reason: str,
        file_text: str | None = None,
    ) -> Verdict:
        """Re-score a contested verdict. The primary verdict is left unchanged."""
        subject_id = _require_subject(subject_id)
        question_number = _require_question(question_number)
        reason = _require_text(reason, "disagreement reason")
        requirement_text = (requirement_text or "").strip() or self.registry.question_text(question_number)

        prompt = prompt_builder.build_disagreement_prompt(requirement_text, reason, file_text)
        return await self._log_variant_review(
            subject_id, question_number, KIND_DISAGREEMENT, requirement_text, reason, prompt
        )

    async def record_missing_justification(
        self,
        subject_id: str,
        question_number: int,
        requirement_text: str,
        reason: str,
    ) -> Verdict:
        """Score a supplier's explanation for not having a document."""
        subject_id = _require_subject(subject_id)
        question_number = _require_question(question_number)
        requirement_text = _require_text(requirement_text, "requirement text")
        reason = _require_text(reason, "missing reason")

        prompt = prompt_builder.build_missing_justification_prompt(requirement_text, reason)
        return await self._log_variant_review(
            subject_id, question_number, KIND_MISSING_JUSTIFICATION, requirement_text, reason, prompt
        )

    # ------------------------------------------------------------------
    # Identity, answers, overrides
    # ------------------------------------------------------------------

    async def set_identity(self, subject_id: str, company_name: str) -> IdentityRecord:
        record = IdentityRecord(
            subject_id=_require_subject(subject_id),
            company_name=_require_text(company_name, "company name"),
        )
        await self.store.upsert_identity(record)
        logger.info("Identity for %s set to %r", record.subject_id, record.company_name)
        return record

    async def get_identity(self, subject_id: str) -> IdentityRecord | None:
        return await self.store.get_identity(_require_subject(subject_id))

    async def save_answer(self, subject_id: str, question_number: int, answer: str) -> Verdict:
        """Store the supplier's plain answer; band and feedback are kept as they are."""
        subject_id = _require_subject(subject_id)
        question_number = _require_question(question_number)
        answer = _require_text(answer, "answer")

        existing = await self.store.get_verdict(subject_id, question_number)
        if existing is not None:
            verdict = existing.model_copy(update={"answer": answer, "updated_at": utcnow()})
        else:
            verdict = Verdict(
                subject_id=subject_id,
                question_number=question_number,
                answer=answer,
                status=STATUS_ANSWERED,
            )
        return await self.store.upsert_verdict(verdict)

    async def record_manual_override(
        self,
        subject_id: str,
        question_number: int,
        new_band: ScoreBand | str,
        comment: str,
        auditor_id: str,
    ) -> ManualOverrideEntry:
        """Replace a verdict's band with an auditor's decision and log the change."""
        subject_id = _require_subject(subject_id)
        question_number = _require_question(question_number)
        auditor_id = _require_text(auditor_id, "auditor id")
        band = new_band if isinstance(new_band, ScoreBand) else parse_band_name(new_band)
        if band is None:
            raise ReviewValidationError(f"Unknown score band: {new_band!r}")

        existing = await self.store.get_verdict(subject_id, question_number)
        entry = ManualOverrideEntry(
            subject_id=subject_id,
            question_number=question_number,
            old_band=existing.band if existing else None,
            old_feedback=existing.raw_feedback if existing else None,
            new_band=band,
            comment=comment or "",
            auditor_id=auditor_id,
        )

        # Log first: a verdict must never change without its audit entry.
        # The comment stays out of raw_feedback so it is never counted as a score.
        await self.store.append_override(entry)
        await self.store.upsert_verdict(Verdict(
            subject_id=subject_id,
            question_number=question_number,
            band=band,
            raw_feedback=f"Score: {format_band(band)}",
            answer=existing.answer if existing else None,
            status=STATUS_AUDITOR_FINAL,
            auditor_comment=comment or None,
        ))
        logger.info(
            "Manual override by %s for %s Q%d: %s -> %s",
            auditor_id, subject_id, question_number,
            entry.old_band.value if entry.old_band else None, band.value,
        )
        return entry
