"""
Public API routes - no authentication required
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.schemas.survey import VisitorContext
from app.services.guest_list_service import GuestListService
from app.services.qr_service import QRService
from app.services.response_service import ResponseService
from app.services.rich_text import render_rich_text
from app.services.settings_service import SettingsService
from app.services.throttle_service import ThrottleService
from app.utils.clock import cutoff_timestamp, utc_timestamp
from app.utils.responses import success_response
from app.utils.security import get_visitor_context

router = APIRouter()

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/qr.png")
async def get_qr_code():
    """QR code image linking to the survey"""
    qr_bytes = QRService.generate_survey_qr()

    return Response(
        content=qr_bytes,
        media_type="image/png",
        headers={"Content-Disposition": "inline; filename=survey_qr.png"}
    )

@router.get("/survey")
async def get_survey(
    request: Request,
    visitor: VisitorContext = Depends(get_visitor_context),
    db: Session = Depends(get_db)
):
    """Everything the survey page needs for one visitor"""
    timestamp = utc_timestamp()

    GuestListService.seed_if_empty(db, settings.DEFAULT_GUEST_NAMES, timestamp)
    SettingsService.seed_if_empty(db)
    ThrottleService.purge_stale(db, cutoff_timestamp(settings.IP_LOG_RETENTION_HOURS))
    ThrottleService.log_visit(db, visitor.ip, request.url.path, timestamp)

    survey_settings = SettingsService.get(db)
    questions = survey_settings.gate_questions[:survey_settings.gate_question_count]

    own_response = None
    if visitor.credential:
        response_id, token = visitor.credential
        own_response = ResponseService.fetch_by_token(db, response_id, token)

    return success_response(
        message="Survey loaded",
        data={
            "survey_title": survey_settings.survey_title,
            "gate_questions": [q.question for q in questions],
            "gate_passed": visitor.gate_passed,
            "guests": GuestListService.list(db),
            "food_entries": ResponseService.list_food(db),
            "hints_html": render_rich_text(survey_settings.hints_content),
            "footer_html": render_rich_text(survey_settings.footer_content),
            "own_response": own_response,
        }
    )
