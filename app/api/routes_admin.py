"""
Admin API routes - requires an authenticated admin session
"""

import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.core.exceptions import ValidationError
from app.schemas.admin import GuestListUpdate, LoginRequest, SettingsUpdate
from app.schemas.survey import SubmissionRequest
from app.services.excel_service import ExcelService
from app.services.guest_list_service import GuestListService
from app.services.response_service import ResponseService
from app.services.settings_service import SettingsService, clamp_question_count
from app.services.throttle_service import ThrottleService
from app.utils.clock import cutoff_timestamp, utc_timestamp
from app.utils.responses import error_response, success_response, xlsx_response
from app.utils.security import (
    ADMIN_SESSION_KEY,
    get_client_ip,
    make_response_credential,
    require_admin,
    verify_admin_credentials,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# -------- session --------

@router.post("/login")
async def login(
    request: Request,
    credentials: LoginRequest,
    db: Session = Depends(get_db)
):
    """Log in with the configured admin account, throttled per IP"""
    client_ip = get_client_ip(request)
    ThrottleService.purge_stale(db, cutoff_timestamp(settings.IP_LOG_RETENTION_HOURS))

    if ThrottleService.is_blocked(db, client_ip):
        logger.warning(f"Blocked admin login from {client_ip}")
        return error_response(
            message="Too many failed login attempts. Please try again in 24 hours.",
            error_code="login_blocked",
            status_code=429
        )

    if verify_admin_credentials(credentials.username, credentials.password):
        ThrottleService.reset(db, client_ip)
        request.session[ADMIN_SESSION_KEY] = True
        logger.info(f"Admin logged in from {client_ip}")
        return success_response(message="Logged in")

    attempts = ThrottleService.record_failure(db, client_ip, utc_timestamp())
    request.session.pop(ADMIN_SESSION_KEY, None)
    return error_response(
        message="Login failed.",
        error_code="login_failed",
        details={"attempts_left": max(0, settings.LOGIN_ATTEMPT_LIMIT - attempts)},
        status_code=401
    )

@router.post("/logout")
async def logout(request: Request):
    request.session.pop(ADMIN_SESSION_KEY, None)
    return success_response(message="Logged out")

# -------- responses --------

@router.get("/responses")
async def list_responses(
    db: Session = Depends(get_db),
    admin: bool = Depends(require_admin)
):
    """All responses, newest first, with the food catalog"""
    return success_response(
        message="Responses retrieved successfully",
        data={
            "responses": ResponseService.list_all(db),
            "food_entries": ResponseService.list_food(db),
        }
    )

@router.get("/responses/export.xlsx")
async def export_responses(
    db: Session = Depends(get_db),
    admin: bool = Depends(require_admin)
):
    """Download all responses as an Excel workbook"""
    return xlsx_response(ExcelService.export_responses(db), "survey_responses.xlsx")

@router.put("/responses/{response_id}")
async def update_response(
    response_id: int,
    update: SubmissionRequest,
    db: Session = Depends(get_db),
    admin: bool = Depends(require_admin)
):
    record = ResponseService.update_by_admin(
        db,
        response_id=response_id,
        participant_name=update.participant_name,
        people_count=update.people_count,
        food_text=update.food_text,
        timestamp=utc_timestamp()
    )
    return success_response(message="Response updated", data=record)

@router.delete("/responses/{response_id}")
async def delete_response(
    response_id: int,
    db: Session = Depends(get_db),
    admin: bool = Depends(require_admin)
):
    ResponseService.delete_by_admin(db, response_id)
    return success_response(
        message="Response deleted",
        data={"deleted_response_id": response_id}
    )

@router.post("/responses/{response_id}/link")
async def issue_edit_link(
    response_id: int,
    db: Session = Depends(get_db),
    admin: bool = Depends(require_admin)
):
    """Re-issue the response's token and return an edit link for the guest"""
    result = ResponseService.reissue_token(db, response_id, utc_timestamp())
    credential = make_response_credential(result.response_id, result.token)

    return success_response(
        message="New edit link created. Earlier links for this response no longer work.",
        data={
            "response_id": response_id,
            "edit_link": f"{settings.BASE_URL.rstrip('/')}/survey/claim?credential={credential}",
        }
    )

# -------- guest list --------

@router.get("/guests")
async def get_guest_list(
    db: Session = Depends(get_db),
    admin: bool = Depends(require_admin)
):
    return success_response(
        message="Guest list retrieved",
        data={"names": GuestListService.list(db)}
    )

@router.put("/guests")
async def replace_guest_list(
    update: GuestListUpdate,
    db: Session = Depends(get_db),
    admin: bool = Depends(require_admin)
):
    """Replace the whole guest list; names are trimmed and blanks dropped"""
    names = GuestListService.parse_names(update.names)
    GuestListService.replace(db, names, utc_timestamp())

    return success_response(
        message=f"Guest list saved with {len(names)} names",
        data={"names": GuestListService.list(db)}
    )

@router.get("/guests/template.xlsx")
async def download_guest_template(admin: bool = Depends(require_admin)):
    """Download an Excel template for the guest list"""
    return xlsx_response(ExcelService.create_template(), "guest_list_template.xlsx")

@router.post("/guests/upload")
async def upload_guest_list(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    admin: bool = Depends(require_admin)
):
    """Replace the guest list from an uploaded Excel file"""
    if not file.filename or not file.filename.endswith(('.xlsx', '.xls')):
        return error_response(
            message="Invalid file format. Please upload an Excel file (.xlsx or .xls)",
            status_code=400
        )

    file_content = await file.read()
    if len(file_content) > settings.MAX_UPLOAD_SIZE:
        return error_response(
            message="File too large",
            status_code=413
        )

    success, errors, processed_count = ExcelService.process_guest_upload(
        file_content=file_content,
        db=db,
        timestamp=utc_timestamp()
    )

    if not success:
        return error_response(
            message="Excel file validation failed",
            details=errors,
            status_code=422
        )

    return success_response(
        message=f"Excel file processed successfully. {processed_count} guests imported.",
        data={
            "processed_count": processed_count,
            "filename": file.filename
        }
    )

# -------- settings --------

@router.get("/settings")
async def get_settings(
    db: Session = Depends(get_db),
    admin: bool = Depends(require_admin)
):
    return success_response(message="Settings retrieved", data=SettingsService.get(db))

@router.put("/settings")
async def update_settings(
    update: SettingsUpdate,
    db: Session = Depends(get_db),
    admin: bool = Depends(require_admin)
):
    """Save title, gate questions, hints and footer"""
    title = update.survey_title.strip()
    if title == "":
        raise ValidationError("Please enter a survey title.")

    question_count = clamp_question_count(update.gate_question_count)
    questions = SettingsService.build_question_list(
        [q.model_dump() for q in update.gate_questions]
    )
    incomplete = any(q.question == "" or q.answer == "" for q in questions[:question_count])
    if len(questions) < question_count or incomplete:
        raise ValidationError("Every active gate question needs a question and an answer.")

    SettingsService.update(
        db,
        title=title,
        question_count=question_count,
        questions=questions,
        hints=update.hints_content.strip(),
        footer=update.footer_content.strip()
    )
    return success_response(message="Settings saved", data=SettingsService.get(db))

# -------- activity --------

@router.get("/activity")
async def get_activity(
    db: Session = Depends(get_db),
    admin: bool = Depends(require_admin)
):
    """Visits and login attempts per IP within the retention window"""
    ThrottleService.purge_stale(db, cutoff_timestamp(settings.IP_LOG_RETENTION_HOURS))
    return success_response(
        message="Activity retrieved",
        data={
            "retention_hours": settings.IP_LOG_RETENTION_HOURS,
            "ips": ThrottleService.activity_summary(db),
        }
    )
