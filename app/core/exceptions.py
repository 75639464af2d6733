"""
Domain exceptions raised by the survey services
"""


class SurveyError(Exception):
    """Base class for survey errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SurveyError):
    """Bad user input: empty field, unknown guest, blocked IP"""


class NotFoundError(SurveyError):
    """No record matches the given id/token"""


class StoreError(SurveyError):
    """Connection or transaction failure in the persistent store"""
