"""
Per-IP visit log and login attempt models
"""

from sqlalchemy import Column, Integer, String

from app.core.db import Base

class PageVisit(Base):
    __tablename__ = "page_visits"

    id = Column(Integer, primary_key=True, index=True)
    ip_address = Column(String(64), nullable=False, index=True)
    page_path = Column(String(255), nullable=False)
    visited_at = Column(String(40), nullable=False, index=True)


class LoginAttempt(Base):
    __tablename__ = "login_attempts"

    ip_address = Column(String(64), primary_key=True)
    attempt_count = Column(Integer, nullable=False)
    last_attempt_at = Column(String(40), nullable=False)
