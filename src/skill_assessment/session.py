"""Session-scoped answer state, countdown timer and attempt history."""

import logging
import threading
import time
from collections.abc import Callable, Mapping

from pydantic import BaseModel, Field

from .catalog import AssessmentDefinition
from .errors import AttemptsExhausted, SessionClosed
from .models import Answer, AssessmentResult, FreeTextRule
from .scoring import DEFAULT_FREE_TEXT_RULES, get_tier_scheme, score_assessment

logger = logging.getLogger("skill_assessment.session")

CERTIFICATION_SCORE = 80


class AttemptRecord(BaseModel):
    """One submitted attempt at an assessment."""

    assessment_id: str
    result: AssessmentResult
    answers: dict[str, Answer] = Field(default_factory=dict)
    time_spent_seconds: int = Field(ge=0)
    timed_out: bool = Field(
        default=False,
        description="Submitted by the countdown rather than the user",
    )
    passed: bool | None = Field(
        default=None,
        description="None when the assessment has no passing score",
    )
    certified: bool = False


class AssessmentSession:
    """
    In-progress attempt at one assessment.

    Answers live here until submission; submit() scores them exactly once,
    whether the user submits or the countdown expires.
    """

    def __init__(
        self,
        assessment: AssessmentDefinition,
        free_text_rules: Mapping[str, FreeTextRule] = DEFAULT_FREE_TEXT_RULES,
        clock: Callable[[], float] = time.monotonic,
        on_submit: Callable[[AttemptRecord], None] | None = None,
    ) -> None:
        self.assessment = assessment
        self._free_text_rules = free_text_rules
        self._clock = clock
        self._on_submit = on_submit
        self._question_ids = {q.id for q in assessment.questions}
        self._answers: dict[str, Answer] = {}
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._started_at: float | None = None
        self._record: AttemptRecord | None = None
        self._cancelled = False

    @property
    def closed(self) -> bool:
        return self._record is not None or self._cancelled

    @property
    def record(self) -> AttemptRecord | None:
        return self._record

    @property
    def answers(self) -> dict[str, Answer]:
        return dict(self._answers)

    def start(self) -> None:
        """Start the clock and, for timed assessments, the countdown."""
        with self._lock:
            if self.closed:
                raise SessionClosed(f"Session for '{self.assessment.id}' is closed")
            if self._started_at is not None:
                return
            self._started_at = self._clock()
            if self.assessment.duration_minutes:
                self._timer = threading.Timer(
                    self.assessment.duration_minutes * 60, self._expire
                )
                self._timer.daemon = True
                self._timer.start()
        logger.debug(
            "Started '%s' (time limit: %s min)",
            self.assessment.id,
            self.assessment.duration_minutes,
        )

    def time_remaining(self) -> float | None:
        """Seconds left before forced submission, or None when untimed."""
        if not self.assessment.duration_minutes:
            return None
        limit = self.assessment.duration_minutes * 60
        if self._started_at is None:
            return float(limit)
        return max(0.0, limit - (self._clock() - self._started_at))

    def record_answer(self, question_id: str, value: int | str) -> None:
        if question_id not in self._question_ids:
            raise KeyError(f"Unknown question '{question_id}' in '{self.assessment.id}'")
        with self._lock:
            if self.closed:
                raise SessionClosed(f"Session for '{self.assessment.id}' is closed")
            self._answers[question_id] = Answer(question_id=question_id, value=value)

    def _expire(self) -> None:
        logger.info("Time is up for '%s', submitting answers", self.assessment.id)
        try:
            self.submit(timed_out=True)
        except SessionClosed:
            logger.debug("Session already closed when the timer fired")

    def submit(self, timed_out: bool = False) -> AttemptRecord:
        """
        Score the recorded answers.

        The first call scores; later calls return the same record.

        Raises:
            SessionClosed: The session was cancelled
            InvalidAssessment: The assessment cannot be scored
        """
        with self._lock:
            if self._record is not None:
                return self._record
            if self._cancelled:
                raise SessionClosed(f"Session for '{self.assessment.id}' was cancelled")
            if self._timer is not None:
                self._timer.cancel()

            now = self._clock()
            started_at = self._started_at if self._started_at is not None else now
            result = score_assessment(
                self.assessment.questions,
                self._answers,
                tier_scheme=get_tier_scheme(self.assessment.tier_scheme),
                free_text_rules=self._free_text_rules,
            )
            passing = self.assessment.passing_score
            self._record = AttemptRecord(
                assessment_id=self.assessment.id,
                result=result,
                answers=dict(self._answers),
                time_spent_seconds=int(now - started_at),
                timed_out=timed_out,
                passed=None if passing is None else result.overall_score >= passing,
                certified=self.assessment.certification
                and result.overall_score >= CERTIFICATION_SCORE,
            )
            record = self._record

        logger.debug(
            "Submitted '%s': score=%d timed_out=%s",
            self.assessment.id,
            record.result.overall_score,
            timed_out,
        )
        if self._on_submit is not None:
            self._on_submit(record)
        return record

    def cancel(self) -> None:
        """Abandon the attempt; nothing is scored."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            if self._record is None:
                self._cancelled = True


class AttemptLog:
    """Submitted attempts per assessment for the current process."""

    def __init__(self) -> None:
        self._attempts: dict[str, list[AttemptRecord]] = {}

    def _add(self, record: AttemptRecord) -> None:
        self._attempts.setdefault(record.assessment_id, []).append(record)

    def attempts(self, assessment_id: str) -> list[AttemptRecord]:
        return list(self._attempts.get(assessment_id, []))

    def attempts_left(self, assessment: AssessmentDefinition) -> int | None:
        """Remaining attempts, or None when the assessment has no limit."""
        if assessment.max_attempts is None:
            return None
        return max(0, assessment.max_attempts - len(self.attempts(assessment.id)))

    def best_score(self, assessment_id: str) -> int | None:
        scores = [a.result.overall_score for a in self.attempts(assessment_id)]
        return max(scores) if scores else None

    def new_session(
        self,
        assessment: AssessmentDefinition,
        free_text_rules: Mapping[str, FreeTextRule] = DEFAULT_FREE_TEXT_RULES,
        clock: Callable[[], float] = time.monotonic,
    ) -> AssessmentSession:
        """
        Open a session (first attempt or retake) whose submission is logged here.

        Raises:
            AttemptsExhausted: The assessment's attempt limit is reached
        """
        if self.attempts_left(assessment) == 0:
            raise AttemptsExhausted(
                f"No attempts left for '{assessment.id}' "
                f"({assessment.max_attempts} allowed)"
            )
        return AssessmentSession(
            assessment,
            free_text_rules=free_text_rules,
            clock=clock,
            on_submit=self._add,
        )
