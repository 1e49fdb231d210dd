"""Per-team liveness: member name -> last heartbeat.

Each member only ever writes its own row, so concurrent heartbeats from
different devices never conflict.
"""
from typing import List

from flask import current_app
from sqlalchemy.exc import IntegrityError

from pathfinder import db
from pathfinder.models import PresenceEntry, Team
from pathfinder.services.hunt import clock
from pathfinder.services.hunt.outcomes import NotFoundError


def load_member_team(team_id: str, member: str) -> Team:
    team = db.session.get(Team, team_id)
    if team is None:
        raise NotFoundError(f'Team {team_id} not found')
    if member not in team.member_names:
        raise NotFoundError(f'{member} is not a member of team {team_id}')
    return team


def _update_heartbeat(team_id: str, member: str, now: float) -> int:
    return PresenceEntry.query.filter_by(team_id=team_id, member_name=member).update(
        {'last_heartbeat': now}, synchronize_session=False
    )


def touch(team_id: str, member: str, now: float) -> None:
    """Upsert and commit the member's heartbeat."""
    if not _update_heartbeat(team_id, member, now):
        db.session.add(PresenceEntry(team_id=team_id, member_name=member, last_heartbeat=now))
    try:
        db.session.commit()
    except IntegrityError:
        # Another device of the same member inserted first
        db.session.rollback()
        _update_heartbeat(team_id, member, now)
        db.session.commit()


def heartbeat(team_id: str, member: str) -> float:
    load_member_team(team_id, member)
    now = clock.now()
    touch(team_id, member, now)
    return now


def leave(team_id: str, member: str) -> None:
    load_member_team(team_id, member)
    removed = PresenceEntry.query.filter_by(team_id=team_id, member_name=member).delete(synchronize_session=False)
    db.session.commit()
    if removed:
        current_app.logger.info(f"[leave] team={team_id} member={member}")


def online_members(team: Team, now: float, ttl: float = None) -> List[str]:
    if ttl is None:
        ttl = float(current_app.config.get('PRESENCE_TTL_SEC', 30))
    return sorted(p.member_name for p in team.presence if now - p.last_heartbeat < ttl)
