import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_aggregator, get_orchestrator, get_store
from config import settings
from models.requests import (
    ManualScoreRequest,
    MissingFeedbackRequest,
    SaveAnswerRequest,
    SessionSummaryRequest,
    SetSupplierNameRequest,
)
from models.responses import (
    AckResponse,
    CheckFileResponse,
    ReviewFeedbackResponse,
    SupplierNameResponse,
)
from models.schemas.session_score import SessionScore
from models.schemas.verdict import Verdict
from services import llm_client, text_extractor
from services.review_orchestrator import ReviewOrchestrator, ReviewOutcome, ReviewState
from services.session_aggregator import SessionAggregator
from services.store import BaseStore
from services.uploads import UploadTooLargeError, spooled_upload

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

MAX_TEXT_FIELD = 5000


def _max_upload_bytes() -> int:
    return settings.max_upload_size_mb * 1024 * 1024


def _validate_upload(upload: UploadFile) -> None:
    if not upload.filename or not text_extractor.is_supported(upload.filename):
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type. Upload a PDF, Word (.docx), text, or image file",
        )


def _to_check_file_response(outcome: ReviewOutcome) -> CheckFileResponse:
    verdict = outcome.verdict
    band = verdict.band if verdict else None
    return CheckFileResponse(
        success=outcome.accepted,
        state=outcome.state.value,
        score=band.weight if band else None,
        band=band,
        feedback=outcome.message,
        require_company_name_confirmation=outcome.needs_identity_confirmation,
        detected_company_name=outcome.detected_name,
    )


def _to_feedback_response(verdict: Verdict) -> ReviewFeedbackResponse:
    return ReviewFeedbackResponse(
        score=verdict.band.weight if verdict.band else None,
        band=verdict.band,
        feedback=verdict.raw_feedback,
    )


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "llm_configured": llm_client.is_configured(),
    }


@router.post("/check-file", response_model=CheckFileResponse)
@limiter.limit(settings.upload_rate_limit)
async def check_file(
    request: Request,
    file: UploadFile = File(...),
    email: str = Form(...),
    question_number: int = Form(...),
    user_explanation: str | None = Form(None),
    language_hint: str | None = Form(None),
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator),
):
    _validate_upload(file)
    if user_explanation and len(user_explanation) > MAX_TEXT_FIELD:
        raise HTTPException(status_code=400, detail=f"Explanation too long (max {MAX_TEXT_FIELD} chars)")

    try:
        async with spooled_upload(file, _max_upload_bytes()) as path:
            outcome = await orchestrator.review_upload(
                subject_id=email,
                question_number=question_number,
                path=path,
                filename=file.filename,
                user_explanation=user_explanation,
                language_hint=language_hint,
            )
    except UploadTooLargeError:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
        )

    if outcome.state != ReviewState.PERSISTED:
        logger.info("check-file for %s Q%d ended in %s", email, question_number, outcome.state.value)
    return _to_check_file_response(outcome)


@router.post("/session-summary", response_model=SessionScore)
@limiter.limit(settings.upload_rate_limit)
async def session_summary(
    request: Request,
    body: SessionSummaryRequest,
    aggregator: SessionAggregator = Depends(get_aggregator),
):
    return await aggregator.summarize(body.email, with_narrative=body.include_narrative)


@router.post("/set-supplier-name", response_model=SupplierNameResponse)
async def set_supplier_name(
    body: SetSupplierNameRequest,
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator),
):
    record = await orchestrator.set_identity(body.email, body.supplier_name)
    return SupplierNameResponse(supplier_name=record.company_name)


@router.get("/supplier-name", response_model=SupplierNameResponse)
async def get_supplier_name(
    email: str,
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator),
):
    record = await orchestrator.get_identity(email)
    return SupplierNameResponse(supplier_name=record.company_name if record else "")


@router.post("/manual-score", response_model=AckResponse)
async def manual_score(
    body: ManualScoreRequest,
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator),
):
    await orchestrator.record_manual_override(
        subject_id=body.email,
        question_number=body.question_number,
        new_band=body.new_score,
        comment=body.comment,
        auditor_id=body.auditor,
    )
    return AckResponse()


@router.post("/disagree-feedback", response_model=ReviewFeedbackResponse)
@limiter.limit(settings.upload_rate_limit)
async def disagree_feedback(
    request: Request,
    email: str = Form(...),
    question_number: int = Form(...),
    requirement: str = Form(""),
    disagree_reason: str = Form(...),
    file: UploadFile | None = File(None),
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator),
):
    if len(disagree_reason) > MAX_TEXT_FIELD:
        raise HTTPException(status_code=400, detail=f"Reason too long (max {MAX_TEXT_FIELD} chars)")

    file_text = None
    if file is not None and file.filename:
        _validate_upload(file)
        try:
            async with spooled_upload(file, _max_upload_bytes()) as path:
                file_text = orchestrator.extractor(path, file.filename, None)
        except UploadTooLargeError:
            raise HTTPException(
                status_code=400,
                detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
            )

    verdict = await orchestrator.record_disagreement(
        subject_id=email,
        question_number=question_number,
        requirement_text=requirement,
        reason=disagree_reason,
        file_text=file_text,
    )
    return _to_feedback_response(verdict)


@router.post("/missing-feedback", response_model=ReviewFeedbackResponse)
@limiter.limit(settings.upload_rate_limit)
async def missing_feedback(
    request: Request,
    body: MissingFeedbackRequest,
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator),
):
    verdict = await orchestrator.record_missing_justification(
        subject_id=body.email,
        question_number=body.question_number,
        requirement_text=body.requirement_text,
        reason=body.missing_reason,
    )
    return _to_feedback_response(verdict)


@router.post("/save-answer", response_model=AckResponse)
async def save_answer(
    body: SaveAnswerRequest,
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator),
):
    await orchestrator.save_answer(body.email, body.question_number, body.answer)
    return AckResponse()


@router.get("/answers", response_model=list[Verdict])
async def answers(email: str, store: BaseStore = Depends(get_store)):
    return await store.list_verdicts(email)


@router.get("/all-answers", response_model=list[Verdict])
async def all_answers(store: BaseStore = Depends(get_store)):
    verdicts = await store.list_verdicts()
    return sorted(verdicts, key=lambda v: v.updated_at, reverse=True)
