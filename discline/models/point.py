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
"""Point aggregate: the unit over which possession is tracked."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from discline.models.event import Event, Side, validate_side


@dataclass
class Point:
    """One point of a game and its ordered event log.

    Parameters
    ----------
    point_id : str
        Unique identifier of the point.
    game_id : str
        Identifier of the owning game.
    point_number : int
        Sequential number of the point within its game, starting at 1.
    starting_team : Side
        Side in possession before any event is recorded.
    events : List[Event], optional
        Ordered event log; insertion order is the order of record.
    scoring_team : Side | None, optional
        Side credited with the point, ``None`` while the point is live.
    forced_possession : Side | None, optional
        Possession forced by an operator override, dominating the event fold.
    """

    point_id: str
    game_id: str
    point_number: int
    starting_team: Side
    events: List[Event] = field(default_factory=list)
    scoring_team: Optional[Side] = None
    forced_possession: Optional[Side] = None

    def __post_init__(self) -> None:
        """Reject impossible sides and point numbers."""
        validate_side(self.starting_team)
        if self.scoring_team is not None:
            validate_side(self.scoring_team)
        if self.forced_possession is not None:
            validate_side(self.forced_possession)
        if self.point_number < 1:
            raise ValueError("Point numbers start at 1")

    @property
    def is_over(self) -> bool:
        """Return ``True`` once a scoring team has been recorded."""
        return self.scoring_team is not None

    @property
    def event_count(self) -> int:
        """Return the number of events in the log."""
        return len(self.events)

    @property
    def last_event(self) -> Optional[Event]:
        """Return the most recently appended event, if any."""
        return self.events[-1] if self.events else None

    @property
    def is_possession_forced(self) -> bool:
        """Return ``True`` while an override dominates the event fold."""
        return self.forced_possession is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the point with its events in append order.

        Returns
        -------
        Dict[str, Any]
            JSON-compatible mapping using camelCase keys.
        """
        return {
            "id": self.point_id,
            "gameId": self.game_id,
            "pointNumber": self.point_number,
            "startingTeam": self.starting_team,
            "events": [event.to_dict() for event in self.events],
            "scoringTeam": self.scoring_team,
            "forcedPossession": self.forced_possession,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Point":
        """Rebuild a point from :meth:`to_dict` output.

        Parameters
        ----------
        data : Mapping[str, Any]
            Serialised point payload.

        Returns
        -------
        Point
            Point with its event log restored in the stored order.
        """
        return cls(
            point_id=data["id"],
            game_id=data["gameId"],
            point_number=int(data["pointNumber"]),
            starting_team=validate_side(data["startingTeam"]),
            events=[Event.from_dict(item) for item in data.get("events", [])],
            scoring_team=data.get("scoringTeam"),
            forced_possession=data.get("forcedPossession"),
        )
