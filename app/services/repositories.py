"""
Repository layer wrapping the SQLAlchemy queries for each table.

Repositories never commit; the calling service owns the transaction.
Upserts report whether the key already existed.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models import (
    FoodEntry,
    GuestListEntry,
    LoginAttempt,
    PageVisit,
    Participant,
    Response,
    ResponseToken,
    SettingEntry,
)


# -------- Guest list repository --------

class GuestListRepo:
    @staticmethod
    def count(db: Session) -> int:
        return db.query(func.count(GuestListEntry.id)).scalar() or 0

    @staticmethod
    def list_names(db: Session) -> List[str]:
        rows = db.query(GuestListEntry.name).order_by(GuestListEntry.name).all()
        return [row.name for row in rows]

    @staticmethod
    def contains(db: Session, name: str) -> bool:
        return db.query(GuestListEntry.id).filter(GuestListEntry.name == name).first() is not None

    @staticmethod
    def delete_all(db: Session) -> None:
        db.query(GuestListEntry).delete()

    @staticmethod
    def insert_many(db: Session, names: Iterable[str], timestamp: str) -> None:
        db.add_all([GuestListEntry(name=name, created_at=timestamp) for name in names])


# -------- Settings repository --------

class SettingsRepo:
    @staticmethod
    def count(db: Session) -> int:
        return db.query(func.count(SettingEntry.key)).scalar() or 0

    @staticmethod
    def all_pairs(db: Session) -> Dict[str, str]:
        return {row.key: row.value for row in db.query(SettingEntry).all()}

    @staticmethod
    def upsert(db: Session, key: str, value: str) -> bool:
        entry = db.get(SettingEntry, key)
        if entry is None:
            db.add(SettingEntry(key=key, value=value))
            db.flush()
            return False
        entry.value = value
        return True


# -------- Food catalog repository --------

class FoodRepo:
    @staticmethod
    def list_texts(db: Session) -> List[str]:
        rows = db.query(FoodEntry.food_text).order_by(FoodEntry.food_text).all()
        return [row.food_text for row in rows]

    @staticmethod
    def ensure(db: Session, food_text: str, timestamp: str) -> bool:
        exists = db.query(FoodEntry.id).filter(FoodEntry.food_text == food_text).first() is not None
        if not exists:
            db.add(FoodEntry(food_text=food_text, created_at=timestamp))
            db.flush()
        return exists

    @staticmethod
    def prune_unreferenced(db: Session) -> int:
        db.flush()
        in_use = select(Response.food_text)
        return db.query(FoodEntry).filter(
            FoodEntry.food_text.not_in(in_use)
        ).delete(synchronize_session="fetch")


# -------- Response repository --------

class ResponseRepo:
    @staticmethod
    def create(db: Session, participant_name: str, people_count: int, food_text: str, timestamp: str) -> Response:
        participant = Participant(name=participant_name, selected_at=timestamp)
        db.add(participant)
        db.flush()

        response = Response(
            participant_id=participant.id,
            people_count=people_count,
            food_text=food_text,
            created_at=timestamp,
        )
        db.add(response)
        db.flush()
        return response

    @staticmethod
    def get(db: Session, response_id: int) -> Optional[Response]:
        return db.get(Response, response_id)

    @staticmethod
    def get_for_token(db: Session, response_id: int, token: str) -> Optional[Response]:
        return db.query(Response).join(
            ResponseToken, ResponseToken.response_id == Response.id
        ).filter(
            Response.id == response_id,
            ResponseToken.token == token
        ).first()

    @staticmethod
    def list_with_names(db: Session) -> List[Tuple[Response, str]]:
        return db.query(Response, Participant.name).join(
            Participant, Participant.id == Response.participant_id
        ).order_by(Response.created_at.desc(), Response.id.desc()).all()

    @staticmethod
    def update(db: Session, response: Response, participant_name: str, people_count: int, food_text: str) -> None:
        if response.participant is not None:
            response.participant.name = participant_name
        response.people_count = people_count
        response.food_text = food_text
        db.flush()

    @staticmethod
    def delete(db: Session, response: Response) -> None:
        participant = response.participant
        if response.token is not None:
            db.delete(response.token)
        db.delete(response)
        if participant is not None:
            db.delete(participant)
        db.flush()


# -------- Token repository --------

class TokenRepo:
    @staticmethod
    def store(db: Session, response_id: int, token: str, timestamp: str) -> bool:
        entry = db.get(ResponseToken, response_id)
        if entry is None:
            db.add(ResponseToken(response_id=response_id, token=token, created_at=timestamp))
            db.flush()
            return False
        entry.token = token
        entry.created_at = timestamp
        return True


# -------- Access log repository --------

class AccessLogRepo:
    @staticmethod
    def add_visit(db: Session, ip_address: str, page_path: str, timestamp: str) -> None:
        db.add(PageVisit(ip_address=ip_address, page_path=page_path, visited_at=timestamp))

    @staticmethod
    def visit_counts(db: Session) -> List[Tuple[str, int, str]]:
        return db.query(
            PageVisit.ip_address,
            func.count(PageVisit.id),
            func.max(PageVisit.visited_at)
        ).group_by(PageVisit.ip_address).all()

    @staticmethod
    def get_attempt(db: Session, ip_address: str) -> Optional[LoginAttempt]:
        return db.get(LoginAttempt, ip_address)

    @staticmethod
    def list_attempts(db: Session) -> List[LoginAttempt]:
        return db.query(LoginAttempt).order_by(LoginAttempt.ip_address).all()

    @staticmethod
    def upsert_attempt(db: Session, ip_address: str, attempt_count: int, timestamp: str) -> bool:
        entry = db.get(LoginAttempt, ip_address)
        if entry is None:
            db.add(LoginAttempt(ip_address=ip_address, attempt_count=attempt_count, last_attempt_at=timestamp))
            db.flush()
            return False
        entry.attempt_count = attempt_count
        entry.last_attempt_at = timestamp
        return True

    @staticmethod
    def delete_attempt(db: Session, ip_address: str) -> None:
        db.query(LoginAttempt).filter(
            LoginAttempt.ip_address == ip_address
        ).delete()

    @staticmethod
    def purge_before(db: Session, cutoff: str) -> Tuple[int, int]:
        visits = db.query(PageVisit).filter(
            PageVisit.visited_at < cutoff
        ).delete()
        attempts = db.query(LoginAttempt).filter(
            LoginAttempt.last_attempt_at < cutoff
        ).delete()
        return visits, attempts
