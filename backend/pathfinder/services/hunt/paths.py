"""Read-only access to the ordered puzzle list of a path."""
from typing import Optional

from pathfinder.models import Puzzle


def _ordered(path_id: int):
    return Puzzle.query.filter_by(path_id=path_id).order_by(Puzzle.order.asc(), Puzzle.id.asc())


def path_length(path_id: int) -> int:
    return Puzzle.query.filter_by(path_id=path_id).count()


def get_puzzle(path_id: int, index: int) -> Optional[Puzzle]:
    """Puzzle at ``index`` on the path, or None past the end."""
    if index < 0:
        return None
    return _ordered(path_id).offset(index).first()
