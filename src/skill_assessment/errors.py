"""Exceptions raised by the assessment engine and sessions."""


class AssessmentError(Exception):
    """Base class for assessment errors."""


class InvalidAssessment(AssessmentError):
    """The question set cannot be scored (empty, or non-positive points)."""


class UnscorableAnswer(AssessmentError):
    """A question kind or credit rule the engine does not recognize."""

    def __init__(self, question_id: str, reason: str) -> None:
        super().__init__(f"Question '{question_id}': {reason}")
        self.question_id = question_id
        self.reason = reason


class SessionClosed(AssessmentError):
    """The session was already submitted or cancelled."""


class AttemptsExhausted(AssessmentError):
    """No attempts left for an assessment with an attempt limit."""
