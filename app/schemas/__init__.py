"""
Pydantic schemas package
"""

from .common import *
from .survey import *
from .admin import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "GateQuestion",
    "SurveySettings",
    "GateRequest",
    "SubmissionRequest",
    "ResponseRecord",
    "SubmissionResult",
    "VisitorContext",
    "LoginRequest",
    "GuestListUpdate",
    "SettingsUpdate",
    "IpActivity",
]
