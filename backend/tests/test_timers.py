from types import SimpleNamespace

from pathfinder.services.hunt.timers import (
    ACTIVE, NOT_ARMED, PATH_COMPLETE, PAUSED_FOR_REVIEW, TIME_EXPIRED,
    TimerDurations, compute_timers, session_state,
)

DURATIONS = TimerDurations(overall=3600, hint_delay=300, skip_delay=600)
START = 10_000.0


def _team(**overrides):
    fields = dict(game_start_time=START, current_puzzle_start_time=START, paused_at=None,
                  current_puzzle_index=0, current_submission_id=None)
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_unarmed_team_reports_full_durations():
    timers = compute_timers(START + 50, None, None, None, DURATIONS)
    assert timers.overall_remaining == 3600
    assert timers.hint_remaining == 300
    assert timers.skip_remaining == 600
    assert not timers.expired


def test_countdowns_follow_elapsed_time():
    timers = compute_timers(START + 120, START, START + 60, None, DURATIONS)
    assert timers.overall_remaining == 3480
    assert timers.puzzle_elapsed == 60
    assert timers.hint_remaining == 240
    assert timers.skip_remaining == 540


def test_countdowns_never_go_negative():
    timers = compute_timers(START + 5000, START, START, None, DURATIONS)
    assert timers.overall_remaining == 0
    assert timers.hint_remaining == 0
    assert timers.skip_remaining == 0
    assert timers.expired


def test_paused_puzzle_clock_is_frozen_but_hunt_clock_runs():
    paused_at = START + 100
    early = compute_timers(START + 150, START, START, paused_at, DURATIONS)
    late = compute_timers(START + 900, START, START, paused_at, DURATIONS)
    assert early.skip_remaining == late.skip_remaining == 500
    assert early.hint_remaining == late.hint_remaining == 200
    assert late.overall_remaining == 2700
    assert late.paused


def test_durations_read_from_config():
    durations = TimerDurations.from_config({'HUNT_DURATION_SEC': 60, 'HINT_DELAY_SEC': 5, 'SKIP_DELAY_SEC': 10})
    assert durations == TimerDurations(overall=60.0, hint_delay=5.0, skip_delay=10.0)


def test_session_state_ordering():
    fresh = compute_timers(START + 10, START, START, None, DURATIONS)
    expired = compute_timers(START + 4000, START, START, None, DURATIONS)

    assert session_state(_team(game_start_time=None), 4, fresh) == NOT_ARMED
    assert session_state(_team(), 4, fresh) == ACTIVE
    assert session_state(_team(current_submission_id=7, paused_at=START + 5), 4, fresh) == PAUSED_FOR_REVIEW
    assert session_state(_team(current_submission_id=7), 4, expired) == TIME_EXPIRED
    # Finishing the path wins over the clock running out afterwards
    assert session_state(_team(current_puzzle_index=4), 4, expired) == PATH_COMPLETE
