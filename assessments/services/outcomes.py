# assessments/services/outcomes.py
"""
Values returned by the attempt lifecycle.

Business outcomes the caller has to react to (already submitted, time is
over, not every question answered, ...) come back as a ``Rejection`` instead
of being raised, so views can branch on ``Rejection.code``.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional


class AttemptOutcome(str, Enum):
    ALREADY_COMPLETED = "already_completed"
    INCOMPLETE_ATTEMPT = "incomplete_attempt"
    ATTEMPT_NOT_ACTIVE = "attempt_not_active"
    NOT_AVAILABLE_YET = "not_available_yet"
    EXAM_CLOSED = "exam_closed"
    EXPIRED = "expired"
    NOT_VISIBLE = "not_visible"
    TRACK_INVALID = "track_invalid"
    SUBTEST_REQUIRED = "subtest_required"
    QUESTION_LOCKED = "question_locked"


@dataclass(frozen=True)
class Rejection:
    code: AttemptOutcome
    message: str
    details: Dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class NavigationView:
    reachable_indices: List[int]
    next_required_index: int


@dataclass(frozen=True)
class AttemptView:
    attempt_id: int
    exam_id: int
    state: str
    started_at: datetime
    ends_at: datetime
    remaining_seconds: int
    last_seen_question: Optional[int]
    answered_question_ids: List[int]
    reachable_indices: List[int]
    next_required_index: int
    resume_index: int
    saved_answers: Dict[int, int]
    question_ids: List[int]
    # True when this read is the one that noticed the deadline had passed
    expired: bool = False
    resumed: bool = False


@dataclass(frozen=True)
class SaveResult:
    saved: bool
    expired: bool
    navigation: NavigationView
    question_id: Optional[int] = None
    selected_option_id: Optional[int] = None


@dataclass(frozen=True)
class NavigationCheck:
    allowed: bool
    index: int
    navigation: NavigationView


@dataclass(frozen=True)
class SubTestResultView:
    subtest_id: int
    subtest_name: str
    score_obtained: Decimal
    minimum_required: Optional[Decimal]
    is_approved: bool
    correct_count: int
    total_questions: int


@dataclass(frozen=True)
class ResultView:
    attempt_id: int
    total_score: Decimal
    is_approved: bool
    submitted_at: Optional[datetime]
    submission_reason: str
    per_subtest: List[SubTestResultView]
