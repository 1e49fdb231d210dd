"""Typed results for hunt actions.

A rejected action is a normal result, not an error: services return
``Outcome.rejected(Reason.X)`` and perform no writes. Only missing records
raise (``NotFoundError``).
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Reason(str, Enum):
    NOT_STARTED = 'not-started'
    ALREADY_ARMED = 'already-armed'
    NOT_ARMED = 'not-armed'
    TIME_EXPIRED = 'time-expired'
    PATH_COMPLETE = 'path-complete'
    WRONG_PUZZLE = 'wrong-puzzle'
    NO_HINT = 'no-hint'
    ALREADY_REVEALED = 'already-revealed'
    TOO_EARLY = 'too-early'
    SUBMISSION_PENDING = 'submission-pending'
    SUBMISSION_ALREADY_PENDING = 'submission-already-pending'
    ALREADY_RESOLVED = 'already-resolved'
    REGISTRATION_CLOSED = 'registration-closed'


MESSAGES = {
    Reason.NOT_STARTED: 'The hunt has not started yet.',
    Reason.ALREADY_ARMED: 'Your team clock is already running.',
    Reason.NOT_ARMED: 'Your team clock has not been started.',
    Reason.TIME_EXPIRED: "Time's up! No more actions are accepted.",
    Reason.PATH_COMPLETE: 'Your team has finished every puzzle on its path.',
    Reason.WRONG_PUZZLE: 'That is not your current puzzle.',
    Reason.NO_HINT: 'This puzzle has no hint.',
    Reason.ALREADY_REVEALED: 'The hint for this puzzle is already revealed.',
    Reason.TOO_EARLY: 'Not available yet, keep trying!',
    Reason.SUBMISSION_PENDING: 'Cannot skip while a submission is under review.',
    Reason.SUBMISSION_ALREADY_PENDING: 'Your team already has a submission under review.',
    Reason.ALREADY_RESOLVED: 'This submission was already graded.',
    Reason.REGISTRATION_CLOSED: 'Registration is closed.',
}


class NotFoundError(LookupError):
    """An unknown team, puzzle, submission or member was referenced."""


@dataclass
class Outcome:
    ok: bool
    reason: Optional[Reason] = None
    value: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, **value) -> 'Outcome':
        return cls(ok=True, value=value)

    @classmethod
    def rejected(cls, reason: Reason) -> 'Outcome':
        return cls(ok=False, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return dict(self.value, ok=True)
        return {'ok': False, 'error': self.reason.value, 'message': MESSAGES.get(self.reason, self.reason.value)}
