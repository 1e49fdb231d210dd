from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from pathfinder import socketio
from pathfinder.services.hunt import presence, session
from pathfinder.services.hunt.notify import NAMESPACE, publish_team, team_room, team_snapshot
from pathfinder.services.hunt.outcomes import NotFoundError
from typing import Dict, Any, Tuple


# Socket id -> {'team_id', 'member'} and live socket count per (team, member)
_sid_to_ctx: Dict[str, Dict[str, Any]] = {}
_member_sockets: Dict[Tuple[str, str], int] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _release_member(ctx: Dict[str, Any]) -> None:
    """Drop one socket of a member; the last one out removes its presence."""
    member = ctx.get('member')
    team_id = ctx.get('team_id')
    if not member or not team_id:
        return
    key = (team_id, member)
    remaining = max(0, _member_sockets.get(key, 0) - 1)
    if remaining:
        _member_sockets[key] = remaining
        return
    _member_sockets.pop(key, None)
    try:
        presence.leave(team_id, member)
    except NotFoundError:
        # Team was removed while the socket was open
        return
    publish_team(team_id)


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    if ctx:
        _release_member(ctx)


def handle_join_team(data):
    team_id = (data or {}).get('team_id')
    member = (data or {}).get('member')
    if not team_id:
        emit('error', {'message': 'team_id is required'})
        return
    try:
        team = session.load_team(team_id)
        if member:
            presence.heartbeat(team_id, member)
    except NotFoundError as exc:
        emit('error', {'message': str(exc)})
        return
    room = team_room(team_id)
    join_room(room)
    previous = _sid_to_ctx.get(_get_sid())
    if previous and (previous.get('team_id'), previous.get('member')) != (team_id, member):
        _release_member(previous)
    if member and previous != {'team_id': team_id, 'member': member}:
        _member_sockets[(team_id, member)] = _member_sockets.get((team_id, member), 0) + 1
    _sid_to_ctx[_get_sid()] = {'team_id': team_id, 'member': member}
    current_app.logger.info(f"[join] team={team_id} member={member}")
    emit('joined', {'room': room})
    emit('team_update', team_snapshot(team))
    if member:
        publish_team(team_id)


def handle_leave_team(data):
    team_id = (data or {}).get('team_id')
    if not team_id:
        emit('error', {'message': 'team_id is required'})
        return
    room = team_room(team_id)
    leave_room(room)
    emit('left', {'room': room})
    ctx = _sid_to_ctx.get(_get_sid())
    if ctx and ctx.get('team_id') == team_id:
        _sid_to_ctx.pop(_get_sid(), None)
        _release_member(ctx)


def handle_heartbeat(data):
    team_id = (data or {}).get('team_id')
    member = (data or {}).get('member')
    if not team_id or not member:
        emit('error', {'message': 'team_id and member are required'})
        return
    try:
        at = presence.heartbeat(team_id, member)
    except NotFoundError as exc:
        emit('error', {'message': str(exc)})
        return
    emit('heartbeat_ack', {'last_heartbeat': at})
    publish_team(team_id)


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('join_team', handle_join_team, namespace=NAMESPACE)
    socketio.on_event('leave_team', handle_leave_team, namespace=NAMESPACE)
    socketio.on_event('heartbeat', handle_heartbeat, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
