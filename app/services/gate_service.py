"""
Gate question evaluation
"""

from typing import Optional, Sequence

from app.schemas.survey import GateQuestion

def _normalize(value: Optional[str]) -> str:
    return (value or "").lower().strip()

class GateService:
    """Checks visitor answers against the configured gate questions"""

    @staticmethod
    def evaluate(
        answers: Sequence[str],
        configured_questions: Sequence[GateQuestion],
        question_count: Optional[int] = None
    ) -> bool:
        """True only if every one of the first `question_count` answers matches.

        Comparison is case-insensitive and ignores surrounding whitespace.
        A blank expected answer never matches.
        """
        if question_count is None:
            question_count = len(configured_questions)
        if question_count <= 0 or len(configured_questions) < question_count:
            return False

        for index in range(question_count):
            expected = _normalize(configured_questions[index].answer)
            given = _normalize(answers[index]) if index < len(answers) else ""
            if expected == "" or given != expected:
                return False

        return True
