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
"""Possession and scoring inference over a point's append-only event log.

Possession is never stored; it is folded from the point's starting team and
its events every time it is asked for. An operator override pins possession
to one side until the ``correction`` event that carries it is undone.

Every mutating operation validates first and commits second, so a rejected
call leaves the point exactly as it was. The engine owns no game state:
score changes are reported as :class:`ScoringTransition` values for the
caller to apply. One logical writer per point is assumed; callers sharing a
point across threads must serialise mutations themselves.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from discline.engine.errors import PointAlreadyEndedError
from discline.models.event import (
    Event,
    EventType,
    Side,
    is_turnover,
    other_side,
    parse_event_type,
    validate_side,
)
from discline.models.point import Point
from discline.utils.debug import PointDebugger


@dataclass(frozen=True)
class ScoringTransition:
    """Change of a point's scoring team caused by one engine operation.

    Parameters
    ----------
    point_id : str
        Identifier of the point whose scoring team changed.
    from_team : Side | None
        Scoring team before the operation.
    to_team : Side | None
        Scoring team after the operation.
    """

    point_id: str
    from_team: Optional[Side]
    to_team: Optional[Side]

    def score_deltas(self) -> Dict[str, int]:
        """Return the per-side score adjustment implied by the transition.

        Returns
        -------
        Dict[str, int]
            ``+1`` for a side that gained the point, ``-1`` for a side that
            lost it. Sides that are unaffected are absent.
        """
        deltas: Dict[str, int] = {}
        if self.from_team is not None:
            deltas[self.from_team] = deltas.get(self.from_team, 0) - 1
        if self.to_team is not None:
            deltas[self.to_team] = deltas.get(self.to_team, 0) + 1
        return {side: delta for side, delta in deltas.items() if delta}


@dataclass(frozen=True)
class EventOutcome:
    """Result of appending, overriding, or undoing.

    Parameters
    ----------
    event : Event
        Event that was appended or removed.
    possession : Side
        Possession once the operation has been applied.
    scoring_transition : ScoringTransition | None, optional
        Scoring change to apply to the owning game, if any.
    """

    event: Event
    possession: Side
    scoring_transition: Optional[ScoringTransition] = None


@dataclass(frozen=True)
class ReplayState:
    """Derived state of a point obtained by replaying its log from scratch.

    Parameters
    ----------
    possession : Side
        Possession after the final event.
    scoring_team : Side | None
        Side credited by a terminal scoring event, if the log ends with one.
    forced_possession : Side | None
        Possession forced by the latest override still in the log.
    """

    possession: Side
    scoring_team: Optional[Side]
    forced_possession: Optional[Side]


def fold_possession(starting_team: Side, events: Sequence[Event]) -> Side:
    """Fold turnovers over the log, ignoring any override.

    Parameters
    ----------
    starting_team : Side
        Side in possession before the first event.
    events : Sequence[Event]
        Events in append order.

    Returns
    -------
    Side
        ``starting_team`` flipped once per turnover-type event.
    """
    possession = validate_side(starting_team)
    for event in events:
        if is_turnover(event.event_type):
            possession = other_side(possession)
    return possession


def derive_possession(
    starting_team: Side,
    events: Sequence[Event],
    forced_possession: Optional[Side] = None,
) -> Side:
    """Return who holds the disc.

    Parameters
    ----------
    starting_team : Side
        Side in possession before the first event.
    events : Sequence[Event]
        Events in append order.
    forced_possession : Side | None, optional
        Operator override; when set it wins over the fold unconditionally.

    Returns
    -------
    Side
        The forced side if any, otherwise the folded possession.
    """
    if forced_possession is not None:
        return validate_side(forced_possession)
    return fold_possession(starting_team, events)


def possession_trail(starting_team: Side, events: Sequence[Event]) -> List[Side]:
    """Return the possession after each event, honouring overrides in the log.

    Parameters
    ----------
    starting_team : Side
        Side in possession before the first event.
    events : Sequence[Event]
        Events in append order.

    Returns
    -------
    List[Side]
        One entry per event.
    """
    trail: List[Side] = []
    folded = validate_side(starting_team)
    forced: Optional[Side] = None
    for event in events:
        if is_turnover(event.event_type):
            folded = other_side(folded)
        if event.is_override:
            forced = event.forced_possession
        trail.append(forced if forced is not None else folded)
    return trail


def latest_forced_possession(events: Sequence[Event]) -> Optional[Side]:
    """Return the side forced by the most recent override in ``events``.

    Parameters
    ----------
    events : Sequence[Event]
        Events in append order.

    Returns
    -------
    Side | None
        Forced side, or ``None`` when no override remains in the log.
    """
    for event in reversed(events):
        if event.is_override:
            return event.forced_possession
    return None


def possession_before(point: Point, index: int) -> Side:
    """Return who held the disc just before the event at ``index``.

    Parameters
    ----------
    point : Point
        Point whose log is inspected.
    index : int
        Position in the log; ``len(point.events)`` asks for the present.

    Returns
    -------
    Side
        Possession derived from the log prefix, including any override in it.

    Raises
    ------
    IndexError
        If ``index`` is outside ``0..len(point.events)``.
    """
    if not 0 <= index <= len(point.events):
        raise IndexError(f"Event index {index} out of range for point {point.point_id}")
    prefix = point.events[:index]
    return derive_possession(point.starting_team, prefix, latest_forced_possession(prefix))


def scoring_team_for(event_type: EventType, holder: Side) -> Optional[Side]:
    """Return the side credited by a scoring event.

    A goal is credited to the side holding the disc. A callahan is an
    interception in the end zone, so the side that did not hold the disc
    immediately before it scores.

    Parameters
    ----------
    event_type : EventType
        Type of the event being appended.
    holder : Side
        Side holding the disc immediately before the event.

    Returns
    -------
    Side | None
        Credited side, or ``None`` for non-scoring events.
    """
    if event_type is EventType.GOAL:
        return holder
    if event_type is EventType.CALLAHAN:
        return other_side(holder)
    return None


def replay_point(point: Point) -> ReplayState:
    """Recompute a point's derived state from its starting team and log alone.

    Parameters
    ----------
    point : Point
        Point whose log should be replayed.

    Returns
    -------
    ReplayState
        State the engine would hold after recording the log from scratch.

    Raises
    ------
    ValueError
        If a scoring event is followed by further events.
    """
    scoring: Optional[Side] = None
    folded = validate_side(point.starting_team)
    forced: Optional[Side] = None
    for index, event in enumerate(point.events):
        if scoring is not None:
            raise ValueError(f"Point {point.point_id} has event #{index} recorded after the point ended")
        credited = scoring_team_for(event.event_type, forced if forced is not None else folded)
        if credited is not None:
            scoring = credited
        if is_turnover(event.event_type):
            folded = other_side(folded)
        if event.is_override:
            forced = event.forced_possession
    return ReplayState(
        possession=forced if forced is not None else folded,
        scoring_team=scoring,
        forced_possession=forced,
    )


def _new_event_id() -> str:
    """Return a fresh random event identifier.

    Returns
    -------
    str
        Hex-encoded UUID4.
    """
    return uuid.uuid4().hex


def _utc_now() -> datetime:
    """Return the current UTC time.

    Returns
    -------
    datetime
        Timezone-aware timestamp.
    """
    return datetime.now(timezone.utc)


class PossessionEngine:
    """Append, undo, and override operations over a single point's log.

    The engine is stateless with respect to points; it mutates the point
    passed to each call.

    Parameters
    ----------
    id_factory : Callable[[], str] | None, optional
        Supplier of unique event identifiers. Defaults to random UUIDs.
    clock : Callable[[], datetime] | None, optional
        Supplier of event timestamps. Defaults to the current UTC time.
    debugger : PointDebugger | None, optional
        Optional logging helper used to trace every mutation.
    """

    def __init__(
        self,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        debugger: Optional[PointDebugger] = None,
    ) -> None:
        """Wire the identifier and clock collaborators.

        Parameters
        ----------
        id_factory : Callable[[], str] | None, optional
            Supplier of unique event identifiers.
        clock : Callable[[], datetime] | None, optional
            Supplier of event timestamps.
        debugger : PointDebugger | None, optional
            Optional logging helper used to trace every mutation.
        """
        self.id_factory = id_factory or _new_event_id
        self.clock = clock or _utc_now
        self.debugger = debugger

    def current_possession(self, point: Point) -> Side:
        """Return who holds the disc in ``point``.

        Parameters
        ----------
        point : Point
            Point to inspect.

        Returns
        -------
        Side
            Forced possession when an override is active, otherwise the fold.
        """
        return derive_possession(point.starting_team, point.events, point.forced_possession)

    def is_point_over(self, point: Point) -> bool:
        """Return ``True`` when ``point`` has a scoring team.

        Parameters
        ----------
        point : Point
            Point to inspect.

        Returns
        -------
        bool
            Whether the point is terminal.
        """
        return point.scoring_team is not None

    def scoring_team(self, point: Point) -> Optional[Side]:
        """Return the side credited with ``point``.

        Parameters
        ----------
        point : Point
            Point to inspect.

        Returns
        -------
        Side | None
            Scoring side, or ``None`` while the point is live.
        """
        return point.scoring_team

    def append_event(
        self,
        point: Point,
        event_type: EventType | str,
        actor_id: Optional[str] = None,
        receiver_id: Optional[str] = None,
        defender_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> EventOutcome:
        """Record a new event at the end of the point's log.

        Parameters
        ----------
        point : Point
            Live point receiving the event.
        event_type : EventType | str
            Type of the event, as a member or its wire value.
        actor_id : str | None, optional
            Player performing the action.
        receiver_id : str | None, optional
            Intended receiver.
        defender_id : str | None, optional
            Defender involved.
        notes : str | None, optional
            Free-form note stored on the event.

        Returns
        -------
        EventOutcome
            The created event, resulting possession, and a scoring transition
            when the event ended the point.

        Raises
        ------
        PointAlreadyEndedError
            If the point already has a scoring team. Nothing is recorded.
        UnknownEventTypeError
            If ``event_type`` is not a known event type.
        """
        resolved = parse_event_type(event_type)
        self._ensure_live(point)
        event = self._build_event(point, resolved, actor_id, receiver_id, defender_id, notes)
        return self._record(point, event)

    def override_possession(self, point: Point, new_possession: Side, notes: Optional[str] = None) -> EventOutcome:
        """Force possession to ``new_possession`` and log it as a correction.

        Parameters
        ----------
        point : Point
            Live point to correct.
        new_possession : Side
            Side that should hold the disc from now on.
        notes : str | None, optional
            Operator note explaining the correction.

        Returns
        -------
        EventOutcome
            The recorded ``correction`` event and the forced possession.

        Raises
        ------
        PointAlreadyEndedError
            If the point already has a scoring team. Nothing changes.
        InvalidSideError
            If ``new_possession`` is not ``"us"`` or ``"them"``.
        """
        side = validate_side(new_possession)
        self._ensure_live(point)
        event = self._build_event(point, EventType.CORRECTION, notes=notes, forced_possession=side)
        point.forced_possession = side
        if self.debugger:
            self.debugger.log_override(point.point_id, side, notes)
        return self._record(point, event)

    def undo_last_event(self, point: Point) -> Optional[EventOutcome]:
        """Remove the most recently appended event.

        Undoing any event while the point is terminal reopens it. Undoing a
        ``correction`` restores the override of the latest correction still
        in the log, or plain fold possession when none remains. Other undos
        leave an active override in place.

        Parameters
        ----------
        point : Point
            Point whose last event should be removed.

        Returns
        -------
        EventOutcome | None
            The removed event and the resulting state, or ``None`` when the
            log is empty.
        """
        if not point.events:
            return None

        event = point.events.pop()
        transition: Optional[ScoringTransition] = None
        if point.scoring_team is not None:
            transition = ScoringTransition(point.point_id, point.scoring_team, None)
            point.scoring_team = None
        if event.event_type is EventType.CORRECTION:
            point.forced_possession = latest_forced_possession(point.events)

        possession = self.current_possession(point)
        if self.debugger:
            self.debugger.log_undo(point.point_id, event.event_type.value, possession)
            if transition is not None:
                self.debugger.log_score(point.point_id, transition.from_team, transition.to_team)
        return EventOutcome(event=event, possession=possession, scoring_transition=transition)

    def _ensure_live(self, point: Point) -> None:
        """Raise when ``point`` no longer accepts events.

        Parameters
        ----------
        point : Point
            Point about to be mutated.

        Raises
        ------
        PointAlreadyEndedError
            If the point has a scoring team.
        """
        if point.scoring_team is not None:
            if self.debugger:
                self.debugger.log_error("point_ended", f"Rejected mutation of ended point {point.point_id}")
            raise PointAlreadyEndedError(point.point_id, point.scoring_team)

    def _build_event(
        self,
        point: Point,
        event_type: EventType,
        actor_id: Optional[str] = None,
        receiver_id: Optional[str] = None,
        defender_id: Optional[str] = None,
        notes: Optional[str] = None,
        forced_possession: Optional[Side] = None,
    ) -> Event:
        """Create an event stamped by the identifier and clock collaborators.

        Parameters
        ----------
        point : Point
            Owning point.
        event_type : EventType
            Type of the event.
        actor_id : str | None, optional
            Player performing the action.
        receiver_id : str | None, optional
            Intended receiver.
        defender_id : str | None, optional
            Defender involved.
        notes : str | None, optional
            Free-form note.
        forced_possession : Side | None, optional
            Side forced by an override.

        Returns
        -------
        Event
            The new, not yet recorded, event.
        """
        return Event(
            event_id=self.id_factory(),
            point_id=point.point_id,
            timestamp=self.clock(),
            event_type=event_type,
            actor_id=actor_id,
            receiver_id=receiver_id,
            defender_id=defender_id,
            notes=notes,
            forced_possession=forced_possession,
        )

    def _record(self, point: Point, event: Event) -> EventOutcome:
        """Append ``event`` and settle the scoring team.

        Parameters
        ----------
        point : Point
            Live point receiving the event.
        event : Event
            Event to append.

        Returns
        -------
        EventOutcome
            The appended event, resulting possession, and scoring transition.
        """
        credited = scoring_team_for(event.event_type, self.current_possession(point))
        point.events.append(event)

        transition: Optional[ScoringTransition] = None
        if credited is not None:
            point.scoring_team = credited
            transition = ScoringTransition(point.point_id, None, credited)

        possession = self.current_possession(point)
        if self.debugger:
            self.debugger.log_event(point.point_id, len(point.events) - 1, event.event_type.value, possession)
            if transition is not None:
                self.debugger.log_score(point.point_id, None, credited)
        return EventOutcome(event=event, possession=possession, scoring_transition=transition)
