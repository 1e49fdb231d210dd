from typing import Any, Dict, List

from flask import current_app

from pathfinder.models import HOUSES, Team


def hint_penalty(immediate: bool) -> int:
    """Points charged for a hint: the immediate hint costs a premium over
    waiting out the hint delay."""
    key = 'HINT_PENALTY_IMMEDIATE' if immediate else 'HINT_PENALTY_DELAYED'
    return int(current_app.config.get(key, 10 if immediate else 5))


def skip_penalty() -> int:
    return int(current_app.config.get('SKIP_PENALTY', 0))


def puzzle_reward() -> int:
    return int(current_app.config.get('PUZZLE_REWARD', 20))


def score_change(delta: int, now: float) -> Dict[Any, Any]:
    """UPDATE values applying ``delta`` server-side.

    The score is never read-modify-written by the application so concurrent
    charges and rewards cannot lose an update.
    """
    values = {Team.revision: Team.revision + 1}
    if delta:
        values[Team.score] = Team.score + delta
        values[Team.last_score_change_at] = now
    return values


def _reached_at(team: Team) -> float:
    if team.last_score_change_at is not None:
        return team.last_score_change_at
    return team.created_at or 0.0


def rank_teams(teams: List[Team]) -> List[Team]:
    """Highest score first; ties go to the team that reached its score first."""
    return sorted(teams, key=lambda t: (-t.score, _reached_at(t), t.created_at or 0.0, t.id))


def scoreboard() -> Dict[str, Any]:
    ranked = rank_teams(Team.query.all())
    rows = []
    house_points = {house: 0 for house in HOUSES}
    for rank, team in enumerate(ranked, start=1):
        rows.append({
            # team.id is the login secret and is never published here
            'rank': rank,
            'name': team.name,
            'house': team.house,
            'score': team.score,
            'riddles_solved': team.riddles_solved,
        })
        house_points[team.house] = house_points.get(team.house, 0) + team.score
    return {'teams': rows, 'house_points': house_points}
