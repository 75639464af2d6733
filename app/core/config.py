"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./event_survey.db")

    # Security
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-survey-secret")
    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD_HASH: str = os.getenv("ADMIN_PASSWORD_HASH", "")  # bcrypt
    LOGIN_ATTEMPT_LIMIT: int = 3
    IP_LOG_RETENTION_HOURS: int = 24
    # Reverse proxies whose X-Forwarded-For / X-Real-IP headers are honoured
    TRUSTED_PROXIES: List[str] = []

    # Self-service credential cookie
    RESPONSE_COOKIE_NAME: str = "survey_response"
    RESPONSE_COOKIE_MAX_AGE: int = 365 * 24 * 60 * 60
    COOKIE_SECURE: bool = os.getenv("COOKIE_SECURE", "false").lower() in ("1", "true", "yes")

    # Application
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5000",
        "http://localhost:8000",
    ]

    # File limits
    MAX_UPLOAD_SIZE: int = 2 * 1024 * 1024  # 2MB

    # Largest party a single response may announce
    MAX_PEOPLE_COUNT: int = 100

    # Survey defaults used when nothing is stored yet
    DEFAULT_SURVEY_TITLE: str = "Survey"
    DEFAULT_GATE_QUESTION: str = "What is the first name of the guest of honour?"
    DEFAULT_GATE_ANSWER: str = "ilse"
    DEFAULT_GUEST_NAMES: List[str] = [
        "Andreas mit Familie",
        "Maria",
        "Lena",
        "Thomas",
        "Sabine",
    ]

    class Config:
        env_file = ".env"

settings = Settings()
