"""
Visitor-facing survey routes: gate check and self-service responses
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.core.exceptions import NotFoundError
from app.schemas.survey import GateRequest, SubmissionRequest, VisitorContext
from app.services.gate_service import GateService
from app.services.response_service import ResponseService
from app.services.settings_service import SettingsService
from app.utils.clock import utc_timestamp
from app.utils.responses import error_response, forbidden_error, success_response
from app.utils.security import (
    GATE_SESSION_KEY,
    get_client_ip,
    get_visitor_context,
    make_response_credential,
    read_response_credential,
)

logger = logging.getLogger(__name__)

router = APIRouter()

def _require_credential(visitor: VisitorContext):
    if visitor.credential is None:
        raise NotFoundError("No saved response for this browser.")
    return visitor.credential

def _set_credential_cookie(response, credential: str) -> None:
    response.set_cookie(
        settings.RESPONSE_COOKIE_NAME,
        credential,
        max_age=settings.RESPONSE_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE
    )

@router.post("/gate")
async def check_gate(
    request: Request,
    gate_data: GateRequest,
    db: Session = Depends(get_db)
):
    """Check the gate answers and unlock the survey for this session"""
    survey_settings = SettingsService.get(db)
    passed = GateService.evaluate(
        gate_data.answers,
        survey_settings.gate_questions,
        survey_settings.gate_question_count
    )

    if not passed:
        logger.info(f"Gate check failed from {get_client_ip(request)}")
        request.session.pop(GATE_SESSION_KEY, None)
        return error_response(
            message="Please enter the correct answer.",
            error_code="gate_failed",
            status_code=403
        )

    request.session[GATE_SESSION_KEY] = True
    return success_response(message="You may take part.", data={"gate_passed": True})

@router.post("/responses")
async def submit_response(
    submission: SubmissionRequest,
    visitor: VisitorContext = Depends(get_visitor_context),
    db: Session = Depends(get_db)
):
    """Store a new response and hand back its self-service credential"""
    if not visitor.gate_passed:
        forbidden_error("Please answer the gate question first.")

    result = ResponseService.submit(
        db,
        participant_name=submission.participant_name,
        people_count=submission.people_count,
        food_text=submission.food_text,
        timestamp=utc_timestamp()
    )
    record = ResponseService.fetch_by_token(db, result.response_id, result.token)

    response = success_response(
        message="Thank you! Your answer has been saved.",
        data=record,
        status_code=201
    )
    _set_credential_cookie(response, make_response_credential(result.response_id, result.token))
    return response

@router.get("/responses/me")
async def get_own_response(
    visitor: VisitorContext = Depends(get_visitor_context),
    db: Session = Depends(get_db)
):
    """The response this browser's credential grants access to"""
    response_id, token = _require_credential(visitor)
    record = ResponseService.fetch_by_token(db, response_id, token)
    if record is None:
        raise NotFoundError("No saved response for this browser.")

    return success_response(message="Response found", data=record)

@router.put("/responses/me")
async def update_own_response(
    submission: SubmissionRequest,
    visitor: VisitorContext = Depends(get_visitor_context),
    db: Session = Depends(get_db)
):
    """Edit the response owned by this browser's credential"""
    response_id, token = _require_credential(visitor)
    record = ResponseService.update_by_token(
        db,
        response_id=response_id,
        token=token,
        participant_name=submission.participant_name,
        people_count=submission.people_count,
        food_text=submission.food_text,
        timestamp=utc_timestamp()
    )

    return success_response(message="Your answer has been updated.", data=record)

@router.delete("/responses/me")
async def delete_own_response(
    visitor: VisitorContext = Depends(get_visitor_context),
    db: Session = Depends(get_db)
):
    """Delete the response owned by this browser's credential"""
    response_id, token = _require_credential(visitor)
    ResponseService.delete_by_token(db, response_id, token)

    response = success_response(
        message="Your answer has been deleted.",
        data={"deleted_response_id": response_id}
    )
    response.delete_cookie(settings.RESPONSE_COOKIE_NAME)
    return response

@router.get("/claim")
async def claim_response(
    credential: str,
    db: Session = Depends(get_db)
):
    """Adopt a response from an edit link issued by the admin"""
    parsed = read_response_credential(credential)
    record = ResponseService.fetch_by_token(db, *parsed) if parsed else None
    if record is None:
        raise NotFoundError("This edit link is no longer valid.")

    response = success_response(message="Response found", data=record)
    _set_credential_cookie(response, credential)
    return response
