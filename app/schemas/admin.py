"""
Admin-panel Pydantic schemas
"""

from typing import List
from pydantic import BaseModel

from .survey import GateQuestion

class LoginRequest(BaseModel):
    """Admin login form"""
    username: str
    password: str

class GuestListUpdate(BaseModel):
    """Full replacement of the guest list"""
    names: List[str]

class SettingsUpdate(BaseModel):
    """Admin edit of the survey settings"""
    survey_title: str
    gate_question_count: int = 1
    gate_questions: List[GateQuestion]
    hints_content: str = ""
    footer_content: str = ""

class IpActivity(BaseModel):
    """Visit and login-attempt figures for one IP"""
    ip_address: str
    visit_count: int = 0
    last_visit_at: str | None = None
    attempt_count: int = 0
    last_attempt_at: str | None = None
    blocked: bool = False
