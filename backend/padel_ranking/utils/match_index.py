"""
Id -> position index over a list of divisions.

Bracket pointers (next_match_id, consolation_match_id) stay string ids on the
wire; engines build one MatchIndex per operation so every pointer hop is a
dict lookup instead of a scan of every division.
"""
from typing import Dict, List, Optional, Tuple

from padel_ranking.models.domain import Division, Match


class MatchIndex:
    def __init__(self, divisions: List[Division]):
        self.divisions = divisions
        self._positions: Dict[str, Tuple[int, int]] = {}
        self.rebuild()

    def rebuild(self) -> None:
        self._positions.clear()
        for div_pos, division in enumerate(self.divisions):
            for match_pos, match in enumerate(division.matches):
                self._positions[match.id] = (div_pos, match_pos)

    def get(self, match_id: Optional[str]) -> Optional[Match]:
        if not match_id:
            return None
        position = self._positions.get(match_id)
        if position is None:
            return None
        div_pos, match_pos = position
        return self.divisions[div_pos].matches[match_pos]

    def division_of(self, match_id: str) -> Optional[Division]:
        position = self._positions.get(match_id)
        if position is None:
            return None
        return self.divisions[position[0]]

    def __contains__(self, match_id: str) -> bool:
        return match_id in self._positions


def copy_divisions(divisions: List[Division]) -> List[Division]:
    """Deep copy so engine operations never touch the caller's objects."""
    return [division.model_copy(deep=True) for division in divisions]
