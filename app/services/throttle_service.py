"""
Per-IP admin login throttling and visit logging
"""

import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import transaction
from app.schemas.admin import IpActivity
from app.services.repositories import AccessLogRepo

logger = logging.getLogger(__name__)

class ThrottleService:
    """Counts failed logins per IP and keeps a 24h visit log"""

    @staticmethod
    def record_failure(db: Session, ip: str, timestamp: str) -> int:
        """Bump the failure counter for `ip`; returns the new count"""
        with transaction(db):
            current = AccessLogRepo.get_attempt(db, ip)
            attempts = (current.attempt_count if current else 0) + 1
            AccessLogRepo.upsert_attempt(db, ip, attempts, timestamp)

        logger.warning(f"Failed admin login from {ip} (attempt {attempts})")
        return attempts

    @staticmethod
    def reset(db: Session, ip: str) -> None:
        with transaction(db):
            AccessLogRepo.delete_attempt(db, ip)

    @staticmethod
    def is_blocked(db: Session, ip: str) -> bool:
        current = AccessLogRepo.get_attempt(db, ip)
        return current is not None and current.attempt_count >= settings.LOGIN_ATTEMPT_LIMIT

    @staticmethod
    def attempts_left(db: Session, ip: str) -> int:
        current = AccessLogRepo.get_attempt(db, ip)
        used = current.attempt_count if current else 0
        return max(0, settings.LOGIN_ATTEMPT_LIMIT - used)

    @staticmethod
    def purge_stale(db: Session, cutoff: str) -> None:
        """Drop visits and login attempts older than `cutoff`"""
        with transaction(db):
            visits, attempts = AccessLogRepo.purge_before(db, cutoff)

        if visits or attempts:
            logger.info(f"Purged {visits} page visits and {attempts} login attempts before {cutoff}")

    @staticmethod
    def log_visit(db: Session, ip: str, page_path: str, timestamp: str) -> None:
        with transaction(db):
            AccessLogRepo.add_visit(db, ip, page_path, timestamp)

    @staticmethod
    def activity_summary(db: Session) -> List[IpActivity]:
        """Visit counts and login attempts per IP, sorted by IP"""
        summary: Dict[str, IpActivity] = {}

        for ip, visit_count, last_visit_at in AccessLogRepo.visit_counts(db):
            summary[ip] = IpActivity(
                ip_address=ip,
                visit_count=visit_count,
                last_visit_at=last_visit_at,
            )

        for attempt in AccessLogRepo.list_attempts(db):
            entry = summary.setdefault(attempt.ip_address, IpActivity(ip_address=attempt.ip_address))
            entry.attempt_count = attempt.attempt_count
            entry.last_attempt_at = attempt.last_attempt_at
            entry.blocked = attempt.attempt_count >= settings.LOGIN_ATTEMPT_LIMIT

        return [summary[ip] for ip in sorted(summary)]
