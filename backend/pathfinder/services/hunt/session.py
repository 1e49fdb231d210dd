"""Team session state machine: arming, hints, skips and admin overrides.

Every transition is one transaction made of conditional UPDATEs and
SQL-side increments. A failed precondition returns a rejected ``Outcome``
and writes nothing.
"""
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from pathfinder import db
from pathfinder.models import GameSettings, Puzzle, RevealedHint, Team
from pathfinder.services.hunt import clock, paths, presence
from pathfinder.services.hunt.outcomes import NotFoundError, Outcome, Reason
from pathfinder.services.hunt.scoring import hint_penalty, score_change, skip_penalty
from pathfinder.services.hunt.timers import Timers, TimerDurations, timers_for_team

# Attempts at a conditional write before giving up on a hot record
MAX_WRITE_ATTEMPTS = 5


def durations() -> TimerDurations:
    return TimerDurations.from_config(current_app.config)


def load_team(team_id: str) -> Team:
    team = db.session.get(Team, team_id)
    if team is None:
        raise NotFoundError(f'Team {team_id} not found')
    return team


def action_rejection(team: Team, length: int, timers: Timers) -> Optional[Reason]:
    """Reasons shared by every player action on the current puzzle."""
    if team.game_start_time is None:
        return Reason.NOT_ARMED
    if timers.expired:
        return Reason.TIME_EXPIRED
    if team.current_puzzle_index >= length:
        return Reason.PATH_COMPLETE
    return None


def arm(team_id: str, member: str) -> Outcome:
    """Start the team's hunt clock exactly once.

    The write only matches while ``game_start_time`` is unset, so concurrent
    first logins from several devices arm the clock once.
    """
    team = presence.load_member_team(team_id, member)
    # An armed clock keeps running even if organizers stop the hunt
    if team.game_start_time is None and not GameSettings.current().is_started:
        return Outcome.rejected(Reason.NOT_STARTED)
    now = clock.now()
    armed = Team.query.filter(Team.id == team.id, Team.game_start_time.is_(None)).update({
        Team.game_start_time: now,
        Team.current_puzzle_start_time: now,
        Team.armed_by: member,
        Team.revision: Team.revision + 1,
    }, synchronize_session=False)
    db.session.commit()
    # Calling arm is itself evidence that the member is present
    presence.touch(team_id, member, now)
    if not armed:
        return Outcome.rejected(Reason.ALREADY_ARMED)
    current_app.logger.info(f"[arm] team={team_id} member={member} at={now}")
    return Outcome.success(game_start_time=now, armed_by=member)


def request_hint(team_id: str, puzzle_id: int, immediate: bool = False) -> Outcome:
    """Reveal the hint of the current puzzle and charge for it once.

    The charge only applies to the team revision the preconditions were
    checked against; if the team moved on meanwhile the hint row is rolled
    back and the request is judged again on a fresh read.
    """
    puzzle = db.session.get(Puzzle, puzzle_id)
    if puzzle is None:
        raise NotFoundError(f'Puzzle {puzzle_id} not found')

    for _ in range(MAX_WRITE_ATTEMPTS):
        team = load_team(team_id)
        seen_revision = team.revision
        if RevealedHint.query.filter_by(team_id=team.id, puzzle_id=puzzle.id).first() is not None:
            return Outcome.rejected(Reason.ALREADY_REVEALED)

        now = clock.now()
        length = paths.path_length(team.path_id)
        timers = timers_for_team(team, now, durations())
        reason = action_rejection(team, length, timers)
        if reason:
            return Outcome.rejected(reason)
        current = paths.get_puzzle(team.path_id, team.current_puzzle_index)
        if current is None or current.id != puzzle.id:
            return Outcome.rejected(Reason.WRONG_PUZZLE)
        if not puzzle.hint:
            return Outcome.rejected(Reason.NO_HINT)
        if not immediate and timers.hint_remaining > 0:
            return Outcome.rejected(Reason.TOO_EARLY)

        penalty = hint_penalty(immediate)
        try:
            db.session.add(RevealedHint(team_id=team.id, puzzle_id=puzzle.id, immediate=bool(immediate),
                                        charged=penalty, revealed_at=now))
            charged = Team.query.filter(Team.id == team.id, Team.revision == seen_revision).update(
                score_change(-penalty, now), synchronize_session=False
            )
            if not charged:
                db.session.rollback()
                current_app.logger.warning(f"[hint-retry] team={team_id} revision={seen_revision} changed underneath")
                continue
            db.session.commit()
        except IntegrityError:
            # Another device revealed the same hint first; the unique row wins
            db.session.rollback()
            return Outcome.rejected(Reason.ALREADY_REVEALED)

        current_app.logger.info(
            f"[hint] team={team_id} puzzle={puzzle.id} immediate={bool(immediate)} charged={penalty} score={team.score}"
        )
        return Outcome.success(score=team.score, puzzle_id=puzzle.id, hint=puzzle.hint, charged=penalty)
    raise RuntimeError(f'Could not reveal hint for team {team_id}: record kept changing')


def skip_puzzle(team_id: str) -> Outcome:
    for _ in range(MAX_WRITE_ATTEMPTS):
        team = load_team(team_id)
        seen_revision = team.revision
        now = clock.now()
        length = paths.path_length(team.path_id)
        timers = timers_for_team(team, now, durations())
        reason = action_rejection(team, length, timers)
        if reason:
            return Outcome.rejected(reason)
        if team.current_submission_id is not None:
            return Outcome.rejected(Reason.SUBMISSION_PENDING)
        if timers.skip_remaining > 0:
            return Outcome.rejected(Reason.TOO_EARLY)

        penalty = skip_penalty()
        values = score_change(-penalty, now)
        values.update({
            Team.current_puzzle_index: Team.current_puzzle_index + 1,
            Team.current_puzzle_start_time: now,
        })
        advanced = Team.query.filter(
            Team.id == team.id,
            Team.revision == seen_revision,
            Team.current_submission_id.is_(None),
            Team.current_puzzle_index < length,
        ).update(values, synchronize_session=False)
        db.session.commit()
        if advanced:
            current_app.logger.info(
                f"[skip] team={team_id} index={team.current_puzzle_index} charged={penalty} path_length={length}"
            )
            return Outcome.success(
                index=team.current_puzzle_index,
                score=team.score,
                path_complete=team.current_puzzle_index >= length,
            )
        current_app.logger.warning(f"[skip-retry] team={team_id} revision={seen_revision} changed underneath")
    raise RuntimeError(f'Could not apply skip for team {team_id}: record kept changing')


def override_puzzle_index(team_id: str, index: int, actor: Optional[str] = None) -> Outcome:
    """Organizer correction of a team's position; the only way to move backwards."""
    team = load_team(team_id)
    length = paths.path_length(team.path_id)
    if index < 0 or index > length:
        raise ValueError(f'index must be between 0 and {length}')
    if team.current_submission_id is not None:
        return Outcome.rejected(Reason.SUBMISSION_PENDING)
    now = clock.now()
    values = {
        Team.current_puzzle_index: index,
        Team.revision: Team.revision + 1,
    }
    if team.game_start_time is not None:
        values[Team.current_puzzle_start_time] = now
    previous = team.current_puzzle_index
    updated = Team.query.filter(Team.id == team.id, Team.current_submission_id.is_(None)).update(
        values, synchronize_session=False
    )
    db.session.commit()
    if not updated:
        return Outcome.rejected(Reason.SUBMISSION_PENDING)
    current_app.logger.info(f"[override] team={team_id} index {previous} -> {index} by={actor}")
    return Outcome.success(index=index)
