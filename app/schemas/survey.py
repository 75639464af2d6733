"""
Survey-related Pydantic schemas
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field

from app.core.config import settings

class GateQuestion(BaseModel):
    """A gate question with its expected answer"""
    question: str
    answer: str

class SurveySettings(BaseModel):
    """Survey configuration singleton"""
    survey_title: str
    gate_question_count: int
    gate_questions: List[GateQuestion]
    hints_content: str = ""
    footer_content: str = ""

class GateRequest(BaseModel):
    """Visitor answers to the gate questions, in order"""
    answers: List[str]

class SubmissionRequest(BaseModel):
    """Schema for submitting or updating a survey response"""
    participant_name: str
    people_count: int = Field(gt=0, le=settings.MAX_PEOPLE_COUNT)
    food_text: str

class ResponseRecord(BaseModel):
    """A stored response joined with its participant"""
    id: int
    participant_name: str
    people_count: int
    food_text: str
    created_at: str

class SubmissionResult(BaseModel):
    """Identifiers issued on a new submission"""
    response_id: int
    token: str = Field(repr=False)

@dataclass
class VisitorContext:
    """Per-request visitor state read from the session and cookies"""
    ip: str
    gate_passed: bool = False
    credential: Optional[Tuple[int, str]] = None
