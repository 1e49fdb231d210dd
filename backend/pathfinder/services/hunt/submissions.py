"""Submission gate: one pending answer per team, graded exactly once.

While ``Team.current_submission_id`` is set the per-puzzle clock is frozen
at ``Team.paused_at``. A rejection shifts ``current_puzzle_start_time``
forward by the paused interval so review time never counts as elapsed.
"""
from typing import List, Optional

from flask import current_app
from sqlalchemy import case, func

from pathfinder import db
from pathfinder.models import (
    Puzzle, Submission, Team,
    SUBMISSION_APPROVED, SUBMISSION_PENDING, SUBMISSION_REJECTED,
)
from pathfinder.services.hunt import clock, paths
from pathfinder.services.hunt.outcomes import NotFoundError, Outcome, Reason
from pathfinder.services.hunt.scoring import puzzle_reward, score_change
from pathfinder.services.hunt.session import MAX_WRITE_ATTEMPTS, action_rejection, durations, load_team
from pathfinder.services.hunt.timers import timers_for_team

VERDICTS = (SUBMISSION_APPROVED, SUBMISSION_REJECTED)


def submit(team_id: str, puzzle_id: int, answer_text: str,
           image_ref: Optional[str] = None, member: Optional[str] = None) -> Outcome:
    """Queue an answer for grading and pause the team's puzzle clock.

    The claim on the team is guarded by the revision the preconditions were
    read at, so a skip or another submission committed in between sends
    the request back through the checks instead of attaching the answer to
    a puzzle the team has left.
    """
    puzzle = db.session.get(Puzzle, puzzle_id)
    if puzzle is None:
        raise NotFoundError(f'Puzzle {puzzle_id} not found')

    for _ in range(MAX_WRITE_ATTEMPTS):
        team = load_team(team_id)
        seen_revision = team.revision
        if member is not None and member not in team.member_names:
            raise NotFoundError(f'{member} is not a member of team {team_id}')

        if team.current_submission_id is not None:
            return Outcome.rejected(Reason.SUBMISSION_ALREADY_PENDING)
        now = clock.now()
        length = paths.path_length(team.path_id)
        reason = action_rejection(team, length, timers_for_team(team, now, durations()))
        if reason:
            return Outcome.rejected(reason)
        current = paths.get_puzzle(team.path_id, team.current_puzzle_index)
        if current is None or current.id != puzzle.id:
            return Outcome.rejected(Reason.WRONG_PUZZLE)

        submission = Submission(
            team_id=team.id,
            puzzle_id=puzzle.id,
            answer_text=answer_text,
            image_ref=image_ref,
            status=SUBMISSION_PENDING,
            submitted_by=member,
            created_at=now,
        )
        db.session.add(submission)
        db.session.flush()
        claimed = Team.query.filter(
            Team.id == team.id,
            Team.revision == seen_revision,
            Team.current_submission_id.is_(None),
        ).update({
            Team.current_submission_id: submission.id,
            Team.paused_at: now,
            Team.revision: Team.revision + 1,
        }, synchronize_session=False)
        if not claimed:
            # The new row is discarded with the transaction
            db.session.rollback()
            current_app.logger.warning(f"[submit-retry] team={team_id} revision={seen_revision} changed underneath")
            continue
        db.session.commit()
        current_app.logger.info(f"[submit] team={team_id} puzzle={puzzle.id} submission={submission.id} by={member}")
        return Outcome.success(submission_id=submission.id, status=SUBMISSION_PENDING)
    raise RuntimeError(f'Could not queue submission for team {team_id}: record kept changing')


def gallery(limit: int = 100) -> List[dict]:
    """Submitted photos, newest first, labelled by team name and puzzle title."""
    rows = (
        db.session.query(Submission, Team.name)
        .join(Team, Team.id == Submission.team_id)
        .filter(Submission.image_ref.isnot(None))
        .order_by(Submission.created_at.desc(), Submission.id.desc())
        .limit(limit)
        .all()
    )
    # Team ids are login secrets and stay out of the public listing
    return [{
        'submission_id': submission.id,
        'image_ref': submission.image_ref,
        'team_name': team_name,
        'puzzle_title': submission.puzzle.title if submission.puzzle else None,
        'created_at': submission.created_at,
    } for submission, team_name in rows]


def resolve_submission(submission_id: int, verdict: str, grader: Optional[str] = None) -> Outcome:
    """Apply the grader's verdict and release the team's review pause."""
    if verdict not in VERDICTS:
        raise ValueError(f'verdict must be one of {", ".join(VERDICTS)}')
    submission = db.session.get(Submission, submission_id)
    if submission is None:
        raise NotFoundError(f'Submission {submission_id} not found')

    now = clock.now()
    resolved = Submission.query.filter(
        Submission.id == submission.id, Submission.status == SUBMISSION_PENDING
    ).update({
        Submission.status: verdict,
        Submission.resolved_at: now,
        Submission.resolved_by: grader,
    }, synchronize_session=False)
    if not resolved:
        db.session.rollback()
        return Outcome.rejected(Reason.ALREADY_RESOLVED)

    team_id = submission.team_id
    team = db.session.get(Team, team_id)
    values = {
        Team.current_submission_id: None,
        Team.paused_at: None,
    }
    if verdict == SUBMISSION_APPROVED:
        length = paths.path_length(team.path_id) if team is not None else 0
        values.update(score_change(puzzle_reward(), now))
        values.update({
            Team.current_puzzle_index: case(
                (Team.current_puzzle_index < length, Team.current_puzzle_index + 1),
                else_=Team.current_puzzle_index,
            ),
            Team.riddles_solved: Team.riddles_solved + 1,
            Team.current_puzzle_start_time: now,
        })
    else:
        values.update({
            Team.current_puzzle_start_time: Team.current_puzzle_start_time + func.coalesce(now - Team.paused_at, 0.0),
            Team.revision: Team.revision + 1,
        })
    released = Team.query.filter(
        Team.id == team_id, Team.current_submission_id == submission.id
    ).update(values, synchronize_session=False)
    db.session.commit()

    if not released:
        current_app.logger.warning(
            f"[resolve] submission={submission_id} team={team_id} was no longer waiting on it; team unchanged"
        )
    current_app.logger.info(f"[resolve] submission={submission_id} team={team_id} verdict={verdict} by={grader}")
    return Outcome.success(submission_id=submission_id, team_id=team_id, verdict=verdict)


def list_submissions(status: Optional[str] = None) -> List[Submission]:
    query = Submission.query
    if status:
        query = query.filter_by(status=status)
    return query.order_by(Submission.created_at.asc(), Submission.id.asc()).all()
