# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Game aggregate holding the running score."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Tuple

from discline.models.event import Side, validate_side

if TYPE_CHECKING:
    from discline.engine.possession import ScoringTransition


@dataclass
class Game:
    """A game between our team and an opponent.

    The game owns the list of its point identifiers and the score, but never
    mutates points itself; score changes arrive as scoring transitions
    reported by the possession engine.

    Parameters
    ----------
    game_id : str
        Unique identifier for the game.
    our_team_id : str
        Identifier of the tracked team.
    opponent_team_id : str
        Identifier of the opponent.
    date : str
        ISO-8601 creation date.
    our_score : int, optional
        Points scored by the tracked team.
    opponent_score : int, optional
        Points scored by the opponent.
    point_ids : List[str], optional
        Identifiers of the game's points in the order they were played.
    """

    game_id: str
    our_team_id: str
    opponent_team_id: str
    date: str
    our_score: int = 0
    opponent_score: int = 0
    point_ids: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Ensure scores start non-negative."""
        if self.our_score < 0 or self.opponent_score < 0:
            raise ValueError("Scores cannot be negative")

    def score_for(self, side: Side) -> int:
        """Return the score of ``side``.

        Parameters
        ----------
        side : Side
            ``"us"`` or ``"them"``.

        Returns
        -------
        int
            Current score of that side.
        """
        return self.our_score if validate_side(side) == "us" else self.opponent_score

    def next_point_number(self) -> int:
        """Return the number the next point of this game will carry.

        Returns
        -------
        int
            One more than the number of points played so far.
        """
        return len(self.point_ids) + 1

    def scores_after(self, transition: "ScoringTransition") -> Tuple[int, int]:
        """Return the scores ``transition`` would produce, without applying it.

        Parameters
        ----------
        transition : ScoringTransition
            Change in a point's scoring team reported by the engine.

        Returns
        -------
        Tuple[int, int]
            ``(our_score, opponent_score)`` after the transition.

        Raises
        ------
        ValueError
            If the adjustment would make a score negative.
        """
        deltas = transition.score_deltas()
        our = self.our_score + deltas.get("us", 0)
        theirs = self.opponent_score + deltas.get("them", 0)
        if our < 0 or theirs < 0:
            raise ValueError(f"Scoring transition {transition} would make a score negative")
        return our, theirs

    def apply_scoring_transition(self, transition: "ScoringTransition") -> None:
        """Adjust the score for a point becoming or ceasing to be terminal.

        Parameters
        ----------
        transition : ScoringTransition
            Change in a point's scoring team reported by the engine.

        Raises
        ------
        ValueError
            If the adjustment would make a score negative; the score is left untouched.
        """
        self.our_score, self.opponent_score = self.scores_after(transition)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the game.

        Returns
        -------
        Dict[str, Any]
            JSON-compatible mapping using camelCase keys.
        """
        return {
            "id": self.game_id,
            "date": self.date,
            "ourTeamId": self.our_team_id,
            "opponentTeamId": self.opponent_team_id,
            "ourScore": self.our_score,
            "opponentScore": self.opponent_score,
            "points": list(self.point_ids),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Game":
        """Rebuild a game from :meth:`to_dict` output.

        Parameters
        ----------
        data : Mapping[str, Any]
            Serialised game payload.

        Returns
        -------
        Game
            The reconstructed game.
        """
        return cls(
            game_id=data["id"],
            our_team_id=data["ourTeamId"],
            opponent_team_id=data["opponentTeamId"],
            date=data["date"],
            our_score=int(data.get("ourScore", 0)),
            opponent_score=int(data.get("opponentScore", 0)),
            point_ids=list(data.get("points", [])),
        )
