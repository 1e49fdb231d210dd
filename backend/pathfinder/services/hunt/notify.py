"""Team snapshots and their push to every connected device of the team."""
from typing import Any, Dict, Optional

from pathfinder import db, socketio
from pathfinder.models import Team
from pathfinder.services.hunt import clock, paths, presence
from pathfinder.services.hunt.session import durations
from pathfinder.services.hunt.timers import session_state, timers_for_team

NAMESPACE = '/ws'


def team_room(team_id: str) -> str:
    return f"team:{team_id}"


def team_snapshot(team: Team, now: Optional[float] = None) -> Dict[str, Any]:
    """Stored team fields plus the values derived from them at ``now``.

    ``server_time`` lets clients keep recomputing countdowns locally between
    pushes without trusting their own clock.
    """
    if now is None:
        now = clock.now()
    length = paths.path_length(team.path_id)
    timers = timers_for_team(team, now, durations())
    payload = team.to_dict()
    puzzle = paths.get_puzzle(team.path_id, team.current_puzzle_index)
    payload.update({
        'path_length': length,
        'state': session_state(team, length, timers),
        'timers': timers.to_dict(),
        'online': presence.online_members(team, now),
        'current_puzzle': puzzle.to_dict(include_hint=puzzle.id in payload['revealed_hints']) if puzzle else None,
        'server_time': now,
    })
    return payload


def publish_team(team_id: str) -> None:
    team = db.session.get(Team, team_id)
    if team is None:
        return
    socketio.emit('team_update', team_snapshot(team), to=team_room(team_id), namespace=NAMESPACE)


def publish_team_removed(team_id: str) -> None:
    socketio.emit('team_removed', {'team_id': team_id}, to=team_room(team_id), namespace=NAMESPACE)
