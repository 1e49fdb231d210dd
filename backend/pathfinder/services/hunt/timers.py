"""Countdown arithmetic and derived session state.

Nothing here writes to the store. Every client can recompute the same
values from the two stored timestamps, the pause marker and the server time
carried in a snapshot.
"""
from dataclasses import dataclass
from typing import Optional

NOT_ARMED = 'not_armed'
ACTIVE = 'active'
PAUSED_FOR_REVIEW = 'paused_for_review'
PATH_COMPLETE = 'path_complete'
TIME_EXPIRED = 'time_expired'


@dataclass(frozen=True)
class TimerDurations:
    overall: float
    hint_delay: float
    skip_delay: float

    @classmethod
    def from_config(cls, config) -> 'TimerDurations':
        return cls(
            overall=float(config.get('HUNT_DURATION_SEC', 3600)),
            hint_delay=float(config.get('HINT_DELAY_SEC', 300)),
            skip_delay=float(config.get('SKIP_DELAY_SEC', 600)),
        )


@dataclass(frozen=True)
class Timers:
    overall_remaining: float
    hint_remaining: float
    skip_remaining: float
    puzzle_elapsed: float
    paused: bool

    @property
    def expired(self) -> bool:
        return self.overall_remaining <= 0

    def to_dict(self):
        return {
            'overall_remaining': round(self.overall_remaining, 3),
            'hint_remaining': round(self.hint_remaining, 3),
            'skip_remaining': round(self.skip_remaining, 3),
            'puzzle_elapsed': round(self.puzzle_elapsed, 3),
            'paused': self.paused,
        }


def puzzle_elapsed(now: float, puzzle_start: Optional[float], paused_at: Optional[float]) -> float:
    """Time spent on the current puzzle, frozen at ``paused_at`` while a
    submission is pending."""
    if puzzle_start is None:
        return 0.0
    reference = paused_at if paused_at is not None else now
    return max(0.0, reference - puzzle_start)


def compute_timers(now: float,
                   game_start: Optional[float],
                   puzzle_start: Optional[float],
                   paused_at: Optional[float],
                   durations: TimerDurations) -> Timers:
    if game_start is None:
        return Timers(durations.overall, durations.hint_delay, durations.skip_delay, 0.0, False)
    elapsed = puzzle_elapsed(now, puzzle_start, paused_at)
    return Timers(
        overall_remaining=max(0.0, durations.overall - (now - game_start)),
        hint_remaining=max(0.0, durations.hint_delay - elapsed),
        skip_remaining=max(0.0, durations.skip_delay - elapsed),
        puzzle_elapsed=elapsed,
        paused=paused_at is not None,
    )


def timers_for_team(team, now: float, durations: TimerDurations) -> Timers:
    return compute_timers(now, team.game_start_time, team.current_puzzle_start_time, team.paused_at, durations)


def session_state(team, path_length: int, timers: Timers) -> str:
    if team.game_start_time is None:
        return NOT_ARMED
    if team.current_puzzle_index >= path_length:
        return PATH_COMPLETE
    if timers.expired:
        return TIME_EXPIRED
    if team.current_submission_id is not None:
        return PAUSED_FOR_REVIEW
    return ACTIVE
