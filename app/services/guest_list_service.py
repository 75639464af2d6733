"""
Guest list management service
"""

import logging
from typing import Iterable, List

from sqlalchemy.orm import Session

from app.core.db import transaction
from app.core.exceptions import ValidationError
from app.services.repositories import GuestListRepo

logger = logging.getLogger(__name__)

class GuestListService:
    """Maintains the roster of names allowed to respond"""

    @staticmethod
    def list(db: Session) -> List[str]:
        """Guest names, alphabetically sorted"""
        return GuestListRepo.list_names(db)

    @staticmethod
    def contains(db: Session, name: str) -> bool:
        return GuestListRepo.contains(db, name)

    @staticmethod
    def seed_if_empty(db: Session, default_names: Iterable[str], timestamp: str) -> bool:
        """Insert the default roster when the list has no rows. Returns True if seeded."""
        names = list(default_names)
        with transaction(db):
            if GuestListRepo.count(db) > 0 or not names:
                return False
            GuestListRepo.insert_many(db, names, timestamp)

        logger.info(f"Seeded guest list with {len(names)} names")
        return True

    @staticmethod
    def replace(db: Session, names: Iterable[str], timestamp: str) -> None:
        """Atomically swap the whole guest list for `names`.

        Names are stored as given; callers trim and drop blanks first.
        """
        names = list(names)
        if not names:
            raise ValidationError("The guest list must contain at least one name.")

        with transaction(db):
            GuestListRepo.delete_all(db)
            GuestListRepo.insert_many(db, names, timestamp)

        logger.info(f"Guest list replaced with {len(names)} names")

    @staticmethod
    def parse_names(raw: Iterable[str]) -> List[str]:
        """Trim names and drop blanks, keeping order"""
        return [name.strip() for name in raw if name and name.strip()]
