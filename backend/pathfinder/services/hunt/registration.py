import json
import random
import string
from typing import List

from flask import current_app

from pathfinder import db
from pathfinder.models import GameSettings, PresenceEntry, RevealedHint, Submission, Team
from pathfinder.services.hunt import clock
from pathfinder.services.hunt.outcomes import NotFoundError, Outcome, Reason


def generate_team_id(house: str, length: int = 6) -> str:
    """Generate a unique team id; it doubles as the team's secret code."""
    while True:
        suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))
        team_id = f"{house.lower()}-{suffix}"
        if db.session.get(Team, team_id) is None:
            return team_id


def assign_path(house: str) -> int:
    """Pick a path not yet used by another team of the same house, if any is left."""
    all_paths = list(current_app.config.get('PATH_IDS') or [1])
    used = {t.path_id for t in Team.query.filter_by(house=house).all()}
    available = [p for p in all_paths if p not in used]
    return random.choice(available or all_paths)


def early_bird_bonus(team_count: int) -> int:
    for limit, points in current_app.config.get('EARLY_BIRD_BONUSES', []):
        if team_count < limit:
            return points
    return 0


def register_team(name: str, house: str, members: List[str]) -> Outcome:
    if not GameSettings.current().registration_open:
        return Outcome.rejected(Reason.REGISTRATION_CLOSED)

    bonus = early_bird_bonus(Team.query.count())
    team = Team(
        id=generate_team_id(house),
        name=name,
        house=house,
        members=json.dumps(members),
        path_id=assign_path(house),
        score=bonus,
        created_at=clock.now(),
    )
    db.session.add(team)
    db.session.commit()
    current_app.logger.info(f"[register] team={team.id} house={house} path={team.path_id} bonus={bonus}")
    return Outcome.success(team=team.to_dict(), secret_code=team.id, bonus=bonus)


def remove_team(team_id: str) -> None:
    """Delete a team and everything that references it."""
    team = db.session.get(Team, team_id)
    if team is None:
        raise NotFoundError(f'Team {team_id} not found')
    # Break FK from team to submission before deleting submissions
    team.current_submission_id = None
    db.session.add(team)
    db.session.flush()
    RevealedHint.query.filter_by(team_id=team_id).delete(synchronize_session=False)
    PresenceEntry.query.filter_by(team_id=team_id).delete(synchronize_session=False)
    Submission.query.filter_by(team_id=team_id).delete(synchronize_session=False)
    db.session.delete(team)
    db.session.commit()
    current_app.logger.info(f"[remove] team={team_id}")
