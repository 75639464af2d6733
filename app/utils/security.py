"""
Security utilities and authentication
"""

import hmac
import logging
from typing import Optional, Tuple

import bcrypt
from fastapi import Request
from itsdangerous import BadSignature, URLSafeSerializer

from app.core.config import settings
from app.schemas.survey import VisitorContext
from app.utils.responses import unauthorized_error

logger = logging.getLogger(__name__)

GATE_SESSION_KEY = "gate_passed"
ADMIN_SESSION_KEY = "admin_authenticated"

def _credential_serializer() -> URLSafeSerializer:
    return URLSafeSerializer(settings.SECRET_KEY, salt="survey-response-v1")

def make_response_credential(response_id: int, token: str) -> str:
    """Signed cookie value binding a response id to its self-service token"""
    return _credential_serializer().dumps({"rid": int(response_id), "tok": token})

def read_response_credential(value: Optional[str]) -> Optional[Tuple[int, str]]:
    """Decode a credential cookie; None when missing, tampered or malformed"""
    if not value:
        return None
    try:
        data = _credential_serializer().loads(value)
    except BadSignature:
        logger.info("Ignoring response credential with a bad signature")
        return None
    try:
        return int(data["rid"]), str(data["tok"])
    except (KeyError, TypeError, ValueError):
        return None

BCRYPT_MAX_BYTES = 72

def _password_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes and newer releases reject longer input
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

def verify_admin_credentials(username: str, password: str) -> bool:
    """Check the single configured admin account"""
    if not settings.ADMIN_PASSWORD_HASH:
        logger.warning("Admin login attempted but ADMIN_PASSWORD_HASH is not configured")
        return False
    if not hmac.compare_digest(username.strip().encode("utf-8"), settings.ADMIN_USERNAME.encode("utf-8")):
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), settings.ADMIN_PASSWORD_HASH.encode("utf-8"))
    except ValueError:
        logger.error("ADMIN_PASSWORD_HASH is not a valid bcrypt hash")
        return False

def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")

def require_admin(request: Request) -> bool:
    """Dependency guarding admin routes with the session flag"""
    if not request.session.get(ADMIN_SESSION_KEY):
        unauthorized_error("Admin login required")
    return True

def get_client_ip(request) -> str:
    """Extract client IP from request"""
    direct_ip = request.client.host if request.client else "0.0.0.0"

    # Forwarded headers are only believed when they come from a configured proxy
    if direct_ip not in settings.TRUSTED_PROXIES:
        return direct_ip

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return direct_ip

def get_visitor_context(request: Request) -> VisitorContext:
    """Dependency collecting the visitor's session and cookie state"""
    return VisitorContext(
        ip=get_client_ip(request),
        gate_passed=bool(request.session.get(GATE_SESSION_KEY)),
        credential=read_response_credential(request.cookies.get(settings.RESPONSE_COOKIE_NAME)),
    )
