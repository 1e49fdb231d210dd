from flask import jsonify

from pathfinder.services.hunt.notify import publish_team
from pathfinder.services.hunt.outcomes import Reason

REJECTION_STATUS = {
    Reason.REGISTRATION_CLOSED: 403,
}


def respond(outcome, team_id=None, status=200):
    """JSON response for an action outcome; pushes the team snapshot on success."""
    if not outcome.ok:
        return jsonify(outcome.to_dict()), REJECTION_STATUS.get(outcome.reason, 409)
    if team_id:
        publish_team(team_id)
    return jsonify(outcome.to_dict()), status
