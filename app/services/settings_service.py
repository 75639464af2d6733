"""
Survey settings service
"""

import json
import logging
from typing import Dict, List, Sequence

from sqlalchemy.orm import Session

from app.core.config import settings as app_settings
from app.core.db import transaction
from app.schemas.survey import GateQuestion, SurveySettings
from app.services.repositories import SettingsRepo

logger = logging.getLogger(__name__)

MIN_GATE_QUESTIONS = 1
MAX_GATE_QUESTIONS = 3

def default_gate_question() -> GateQuestion:
    return GateQuestion(
        question=app_settings.DEFAULT_GATE_QUESTION,
        answer=app_settings.DEFAULT_GATE_ANSWER,
    )

def clamp_question_count(count: int) -> int:
    return max(MIN_GATE_QUESTIONS, min(MAX_GATE_QUESTIONS, count))

class SettingsService:
    """Reads and writes the survey configuration stored as key/value rows"""

    @staticmethod
    def get(db: Session) -> SurveySettings:
        """Stored settings merged over the defaults.

        The question list is padded with the default pair until it has at
        least `gate_question_count` entries.
        """
        rows = SettingsRepo.all_pairs(db)

        title = rows.get("survey_title", app_settings.DEFAULT_SURVEY_TITLE)

        count = MIN_GATE_QUESTIONS
        if "gate_question_count" in rows:
            try:
                count = clamp_question_count(int(rows["gate_question_count"]))
            except ValueError:
                logger.warning(f"Ignoring invalid gate_question_count {rows['gate_question_count']!r}")

        questions = SettingsService._decode_questions(rows.get("gate_questions"))
        if not questions:
            questions = [default_gate_question()]
        while len(questions) < count:
            questions.append(default_gate_question())

        return SurveySettings(
            survey_title=title,
            gate_question_count=count,
            gate_questions=questions,
            hints_content=rows.get("hints_content", ""),
            footer_content=rows.get("footer_content", ""),
        )

    @staticmethod
    def update(
        db: Session,
        title: str,
        question_count: int,
        questions: Sequence[GateQuestion],
        hints: str,
        footer: str
    ) -> None:
        """Persist all five settings in one transaction.

        `question_count` is expected to be clamped by the caller.
        """
        encoded = json.dumps(
            [{"question": q.question, "answer": q.answer} for q in questions],
            ensure_ascii=False,
        )
        with transaction(db):
            SettingsRepo.upsert(db, "survey_title", title)
            SettingsRepo.upsert(db, "gate_question_count", str(question_count))
            SettingsRepo.upsert(db, "gate_questions", encoded)
            SettingsRepo.upsert(db, "hints_content", hints)
            SettingsRepo.upsert(db, "footer_content", footer)

        logger.info(f"Survey settings updated ({question_count} gate questions)")

    @staticmethod
    def seed_if_empty(db: Session) -> bool:
        """Write the default settings when no rows exist. Returns True if seeded."""
        if SettingsRepo.count(db) > 0:
            return False

        SettingsService.update(
            db,
            title=app_settings.DEFAULT_SURVEY_TITLE,
            question_count=1,
            questions=[default_gate_question()],
            hints="",
            footer="",
        )
        return True

    @staticmethod
    def _decode_questions(raw) -> List[GateQuestion]:
        if not raw:
            return []
        try:
            decoded = json.loads(raw)
        except ValueError:
            logger.warning("Stored gate_questions is not valid JSON; using defaults")
            return []
        if not isinstance(decoded, list):
            return []

        questions = []
        for item in decoded:
            if isinstance(item, dict):
                questions.append(GateQuestion(
                    question=str(item.get("question", "")),
                    answer=str(item.get("answer", "")),
                ))
        return questions

    @staticmethod
    def build_question_list(items: Sequence[Dict[str, str]]) -> List[GateQuestion]:
        """Trim submitted question/answer pairs, keeping at most three"""
        return [
            GateQuestion(
                question=(item.get("question") or "").strip(),
                answer=(item.get("answer") or "").strip(),
            )
            for item in list(items)[:MAX_GATE_QUESTIONS]
        ]
