"""
Survey response lifecycle: submission, self-service edits via token, admin edits
"""

import logging
import secrets
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import transaction
from app.core.exceptions import NotFoundError, ValidationError
from app.models import Response
from app.schemas.survey import ResponseRecord, SubmissionResult
from app.services.repositories import FoodRepo, GuestListRepo, ResponseRepo, TokenRepo

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32

def normalize_food(food_text: str) -> str:
    """Trim and capitalize the first letter, leaving the rest untouched"""
    food_text = (food_text or "").strip()
    return food_text[:1].upper() + food_text[1:]

def to_record(response: Response, participant_name: Optional[str] = None) -> ResponseRecord:
    if participant_name is None:
        participant_name = response.participant.name if response.participant else ""
    return ResponseRecord(
        id=response.id,
        participant_name=participant_name,
        people_count=response.people_count,
        food_text=response.food_text,
        created_at=response.created_at,
    )

class ResponseService:
    """Creates, updates and deletes participant + response pairs"""

    # -------- validation --------

    @staticmethod
    def _validate(
        db: Session,
        participant_name: str,
        people_count: int,
        food_text: str,
        require_guest: bool = True
    ) -> Tuple[str, int, str]:
        participant_name = (participant_name or "").strip()
        food_text = normalize_food(food_text)

        if participant_name == "":
            raise ValidationError("Please select a participant.")
        if require_guest and not GuestListRepo.contains(db, participant_name):
            raise ValidationError("Please select a participant from the guest list.")
        if people_count is None or people_count <= 0:
            raise ValidationError("Please enter a valid number of people.")
        if people_count > settings.MAX_PEOPLE_COUNT:
            raise ValidationError(f"Please enter at most {settings.MAX_PEOPLE_COUNT} people.")
        if food_text == "":
            raise ValidationError("Please enter the food you will bring.")

        return participant_name, people_count, food_text

    @staticmethod
    def reconcile_food_catalog(db: Session) -> int:
        """Drop catalog entries no live response references"""
        removed = FoodRepo.prune_unreferenced(db)
        if removed:
            logger.info(f"Pruned {removed} unused food entries")
        return removed

    # -------- visitor operations --------

    @staticmethod
    def submit(
        db: Session,
        participant_name: str,
        people_count: int,
        food_text: str,
        timestamp: str
    ) -> SubmissionResult:
        """Store a new response and issue its self-service token"""
        participant_name, people_count, food_text = ResponseService._validate(
            db, participant_name, people_count, food_text
        )
        token = secrets.token_urlsafe(TOKEN_BYTES)

        with transaction(db):
            FoodRepo.ensure(db, food_text, timestamp)
            response = ResponseRepo.create(db, participant_name, people_count, food_text, timestamp)
            TokenRepo.store(db, response.id, token, timestamp)
            ResponseService.reconcile_food_catalog(db)
            response_id = response.id

        logger.info(f"Stored response {response_id}")
        return SubmissionResult(response_id=response_id, token=token)

    @staticmethod
    def fetch_by_token(db: Session, response_id: int, token: str) -> Optional[ResponseRecord]:
        """The response the token grants access to, or None on any mismatch"""
        if not token:
            return None
        response = ResponseRepo.get_for_token(db, response_id, token)
        if response is None:
            return None
        return to_record(response)

    @staticmethod
    def update_by_token(
        db: Session,
        response_id: int,
        token: str,
        participant_name: str,
        people_count: int,
        food_text: str,
        timestamp: str
    ) -> ResponseRecord:
        if not token or ResponseRepo.get_for_token(db, response_id, token) is None:
            raise NotFoundError("No response matches this token.")

        participant_name, people_count, food_text = ResponseService._validate(
            db, participant_name, people_count, food_text
        )
        return ResponseService._apply_update(
            db, response_id, participant_name, people_count, food_text, timestamp, token=token
        )

    @staticmethod
    def delete_by_token(db: Session, response_id: int, token: str) -> None:
        if not token:
            raise NotFoundError("No response matches this token.")

        with transaction(db):
            response = ResponseRepo.get_for_token(db, response_id, token)
            if response is None:
                raise NotFoundError("No response matches this token.")
            ResponseRepo.delete(db, response)
            ResponseService.reconcile_food_catalog(db)

        logger.info(f"Response {response_id} deleted by its owner")

    # -------- admin operations --------

    @staticmethod
    def list_all(db: Session) -> List[ResponseRecord]:
        """All responses, newest first"""
        return [to_record(response, name) for response, name in ResponseRepo.list_with_names(db)]

    @staticmethod
    def list_food(db: Session) -> List[str]:
        return FoodRepo.list_texts(db)

    @staticmethod
    def update_by_admin(
        db: Session,
        response_id: int,
        participant_name: str,
        people_count: int,
        food_text: str,
        timestamp: str
    ) -> ResponseRecord:
        """Admin edit; the name does not have to be on the current guest list"""
        if ResponseRepo.get(db, response_id) is None:
            raise NotFoundError(f"Response {response_id} not found.")

        participant_name, people_count, food_text = ResponseService._validate(
            db, participant_name, people_count, food_text, require_guest=False
        )
        return ResponseService._apply_update(
            db, response_id, participant_name, people_count, food_text, timestamp
        )

    @staticmethod
    def delete_by_admin(db: Session, response_id: int) -> None:
        with transaction(db):
            response = ResponseRepo.get(db, response_id)
            if response is None:
                raise NotFoundError(f"Response {response_id} not found.")
            ResponseRepo.delete(db, response)
            ResponseService.reconcile_food_catalog(db)

        logger.info(f"Response {response_id} deleted by admin")

    @staticmethod
    def reissue_token(db: Session, response_id: int, timestamp: str) -> SubmissionResult:
        """Replace a response's self-service token; the previous one stops working"""
        token = secrets.token_urlsafe(TOKEN_BYTES)

        with transaction(db):
            if ResponseRepo.get(db, response_id) is None:
                raise NotFoundError(f"Response {response_id} not found.")
            TokenRepo.store(db, response_id, token, timestamp)

        logger.info(f"Self-service token for response {response_id} re-issued")
        return SubmissionResult(response_id=response_id, token=token)

    # -------- shared --------

    @staticmethod
    def _apply_update(
        db: Session,
        response_id: int,
        participant_name: str,
        people_count: int,
        food_text: str,
        timestamp: str,
        token: Optional[str] = None
    ) -> ResponseRecord:
        with transaction(db):
            if token is None:
                response = ResponseRepo.get(db, response_id)
            else:
                response = ResponseRepo.get_for_token(db, response_id, token)
            if response is None:
                raise NotFoundError(f"Response {response_id} not found.")
            FoodRepo.ensure(db, food_text, timestamp)
            ResponseRepo.update(db, response, participant_name, people_count, food_text)
            ResponseService.reconcile_food_catalog(db)
            record = to_record(response)

        logger.info(f"Response {response_id} updated")
        return record
