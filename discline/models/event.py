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
"""Event domain models and the possession classification of each event type.

Every action recorded during a point is an immutable :class:`Event`. The
closed :class:`EventType` enumeration is classified exhaustively by
:data:`POSSESSION_EFFECTS`; the module refuses to import if a member is left
without a possession effect, so adding an event type forces a decision about
how it affects the disc.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

from discline.engine.errors import InvalidSideError, UnknownEventTypeError

Side = Literal["us", "them"]
SIDES: Tuple[str, str] = ("us", "them")


class EventType(str, Enum):
    """Closed set of actions that can be recorded during a point."""

    PULL = "pull"
    PULL_OUT = "pull-out"
    BRICK = "brick"
    COMPLETION = "completion"
    THROWAWAY = "throwaway"
    DROP = "drop"
    STALL_OUT = "stall-out"
    BLOCK = "block"
    GOAL = "goal"
    CALLAHAN = "callahan"
    FOUL = "foul"
    VIOLATION = "violation"
    CONTEST = "contest"
    TIMEOUT = "timeout"
    INJURY = "injury"
    SUBSTITUTION = "substitution"
    CORRECTION = "correction"


class PossessionEffect(str, Enum):
    """How an event type participates in the possession fold."""

    FLIP = "flip"
    NEUTRAL = "neutral"
    SCORE = "score"
    CORRECTION = "correction"


POSSESSION_EFFECTS: Dict[EventType, PossessionEffect] = {
    EventType.PULL: PossessionEffect.NEUTRAL,
    EventType.PULL_OUT: PossessionEffect.NEUTRAL,
    EventType.BRICK: PossessionEffect.NEUTRAL,
    EventType.COMPLETION: PossessionEffect.NEUTRAL,
    EventType.THROWAWAY: PossessionEffect.FLIP,
    EventType.DROP: PossessionEffect.FLIP,
    EventType.STALL_OUT: PossessionEffect.FLIP,
    EventType.BLOCK: PossessionEffect.FLIP,
    EventType.GOAL: PossessionEffect.SCORE,
    EventType.CALLAHAN: PossessionEffect.SCORE,
    EventType.FOUL: PossessionEffect.NEUTRAL,
    EventType.VIOLATION: PossessionEffect.NEUTRAL,
    EventType.CONTEST: PossessionEffect.NEUTRAL,
    EventType.TIMEOUT: PossessionEffect.NEUTRAL,
    EventType.INJURY: PossessionEffect.NEUTRAL,
    EventType.SUBSTITUTION: PossessionEffect.NEUTRAL,
    EventType.CORRECTION: PossessionEffect.CORRECTION,
}


def _check_exhaustive(effects: Mapping[EventType, PossessionEffect]) -> None:
    """Fail loudly when an event type has no possession effect.

    Parameters
    ----------
    effects : Mapping[EventType, PossessionEffect]
        Classification table to validate.

    Raises
    ------
    RuntimeError
        If any :class:`EventType` member is missing from ``effects``.
    """
    missing = [member.value for member in EventType if member not in effects]
    if missing:
        raise RuntimeError(f"Event types without a possession effect: {', '.join(missing)}")


_check_exhaustive(POSSESSION_EFFECTS)

TURNOVER_TYPES = frozenset(t for t, effect in POSSESSION_EFFECTS.items() if effect is PossessionEffect.FLIP)
SCORING_TYPES = frozenset(t for t, effect in POSSESSION_EFFECTS.items() if effect is PossessionEffect.SCORE)

# Button groups offered by the live tracker for the side with and without the disc.
OFFENSE_EVENTS: Tuple[EventType, ...] = (EventType.COMPLETION, EventType.THROWAWAY, EventType.GOAL)
DEFENSE_EVENTS: Tuple[EventType, ...] = (EventType.BLOCK, EventType.CALLAHAN)
COMMON_EVENTS: Tuple[EventType, ...] = (EventType.TIMEOUT, EventType.FOUL)


def parse_event_type(value: EventType | str) -> EventType:
    """Coerce a wire string or enum member into an :class:`EventType`.

    Parameters
    ----------
    value : EventType | str
        Member or its string value (for example ``"stall-out"``).

    Returns
    -------
    EventType
        The matching enumeration member.

    Raises
    ------
    UnknownEventTypeError
        If ``value`` does not name an event type.
    """
    if isinstance(value, EventType):
        return value
    try:
        return EventType(value)
    except ValueError:
        raise UnknownEventTypeError(value) from None


def possession_effect(event_type: EventType | str) -> PossessionEffect:
    """Return the possession effect of ``event_type``.

    Parameters
    ----------
    event_type : EventType | str
        Event type to classify.

    Returns
    -------
    PossessionEffect
        Effect recorded in :data:`POSSESSION_EFFECTS`.
    """
    return POSSESSION_EFFECTS[parse_event_type(event_type)]


def is_turnover(event_type: EventType | str) -> bool:
    """Return ``True`` when the event hands the disc to the other side.

    Parameters
    ----------
    event_type : EventType | str
        Event type to classify.

    Returns
    -------
    bool
        Whether the event flips possession in the fold.
    """
    return possession_effect(event_type) is PossessionEffect.FLIP


def is_scoring(event_type: EventType | str) -> bool:
    """Return ``True`` when the event ends the point with a score.

    Parameters
    ----------
    event_type : EventType | str
        Event type to classify.

    Returns
    -------
    bool
        Whether the event terminates the point.
    """
    return possession_effect(event_type) is PossessionEffect.SCORE


def validate_side(value: object) -> Side:
    """Return ``value`` unchanged when it names a side.

    Parameters
    ----------
    value : object
        Candidate side, expected to be ``"us"`` or ``"them"``.

    Returns
    -------
    Side
        The validated side.

    Raises
    ------
    InvalidSideError
        If ``value`` is anything else.
    """
    if value not in SIDES:
        raise InvalidSideError(value)
    return value  # type: ignore[return-value]


def other_side(side: Side) -> Side:
    """Return the opposing side.

    Parameters
    ----------
    side : Side
        Either ``"us"`` or ``"them"``.

    Returns
    -------
    Side
        The side that is not ``side``.
    """
    return "them" if validate_side(side) == "us" else "us"


def suggested_event_types(has_disc: bool) -> Tuple[EventType, ...]:
    """Return the event types worth offering to an operator.

    Parameters
    ----------
    has_disc : bool
        Whether the tracked team currently holds possession.

    Returns
    -------
    Tuple[EventType, ...]
        Offense or defense actions followed by the always-available ones.
    """
    primary = OFFENSE_EVENTS if has_disc else DEFENSE_EVENTS
    return primary + COMMON_EVENTS


@dataclass(frozen=True)
class Event:
    """Immutable record of one action within a point.

    Parameters
    ----------
    event_id : str
        Unique identifier of the event.
    point_id : str
        Identifier of the owning point.
    timestamp : datetime
        Wall-clock time of recording. Display only; append order is authoritative.
    event_type : EventType
        What happened.
    actor_id : str | None, optional
        Player performing the action (thrower, puller, defender on a block).
    receiver_id : str | None, optional
        Intended receiver for throws.
    defender_id : str | None, optional
        Defender involved in the action.
    notes : str | None, optional
        Free-form operator note, used by possession overrides.
    forced_possession : Side | None, optional
        Side forced by an override. Only set on override ``correction`` events.
    """

    event_id: str
    point_id: str
    timestamp: datetime
    event_type: EventType
    actor_id: Optional[str] = None
    receiver_id: Optional[str] = None
    defender_id: Optional[str] = None
    notes: Optional[str] = None
    forced_possession: Optional[Side] = None

    @property
    def is_override(self) -> bool:
        """Return ``True`` for correction events produced by a possession override."""
        return self.event_type is EventType.CORRECTION and self.forced_possession is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the event using the camelCase storage keys.

        Returns
        -------
        Dict[str, Any]
            JSON-compatible mapping; ``None`` fields are omitted.
        """
        payload: Dict[str, Any] = {
            "id": self.event_id,
            "pointId": self.point_id,
            "timestamp": self.timestamp.isoformat(),
            "type": self.event_type.value,
        }
        optional = {
            "actorId": self.actor_id,
            "receiverId": self.receiver_id,
            "defenderId": self.defender_id,
            "notes": self.notes,
            "forcedPossession": self.forced_possession,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Event":
        """Rebuild an event from :meth:`to_dict` output.

        Parameters
        ----------
        data : Mapping[str, Any]
            Serialised event payload.

        Returns
        -------
        Event
            The reconstructed event.
        """
        forced = data.get("forcedPossession")
        return cls(
            event_id=data["id"],
            point_id=data["pointId"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            event_type=parse_event_type(data["type"]),
            actor_id=data.get("actorId"),
            receiver_id=data.get("receiverId"),
            defender_id=data.get("defenderId"),
            notes=data.get("notes"),
            forced_possession=validate_side(forced) if forced is not None else None,
        )
