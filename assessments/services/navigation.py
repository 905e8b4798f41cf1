# assessments/services/navigation.py
"""
Navigation gate: which question positions an attempt may open.

Rules
-----
- Position 0 is always open.
- Position i opens once position i-1 has an answer.
- A position that already has an answer stays open even when an earlier
  position is blank, so saved work from older sessions is never locked away.
"""
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Sequence


@dataclass(frozen=True)
class NavigationState:
    reachable: FrozenSet[int]
    next_required_index: int

    def can_navigate_to(self, index: int) -> bool:
        return index in self.reachable

    @property
    def reachable_indices(self) -> List[int]:
        return sorted(self.reachable)


def compute_navigation(question_ids: Sequence[int], answered_ids: Iterable[int]) -> NavigationState:
    """
    Args:
        question_ids: the exam's question ids in answering order.
        answered_ids: ids of questions holding a non-blank answer.
    """
    answered = set(answered_ids)
    reachable = set()
    next_required = None

    for index, question_id in enumerate(question_ids):
        has_answer = question_id in answered
        if index == 0 or question_ids[index - 1] in answered or has_answer:
            reachable.add(index)
        if next_required is None and not has_answer:
            next_required = index

    if next_required is None:
        # Everything answered (or no questions at all): point at the last one
        next_required = max(len(question_ids) - 1, 0)

    return NavigationState(reachable=frozenset(reachable), next_required_index=next_required)


def resume_index(question_ids: Sequence[int], navigation: NavigationState, last_seen_question_id=None) -> int:
    """Where a returning user lands: the last question they touched, if still open."""
    if last_seen_question_id is not None and last_seen_question_id in question_ids:
        index = list(question_ids).index(last_seen_question_id)
        if navigation.can_navigate_to(index):
            return index
    return navigation.next_required_index
