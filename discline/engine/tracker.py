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
"""Game bookkeeping around the possession engine.

:class:`GameRepository` is an explicit in-memory home for games and points;
each tracker (and each test) owns its own. :class:`GameTracker` resolves
points by identifier, forwards operations to :class:`PossessionEngine`, and
applies every reported scoring transition to the owning game so the running
score follows appends and undos.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from discline.engine.errors import GameNotFoundError, PointNotFoundError
from discline.engine.possession import EventOutcome, PossessionEngine, ScoringTransition, scoring_team_for
from discline.models.event import EventType, Side, parse_event_type, validate_side
from discline.models.game import Game
from discline.models.point import Point
from discline.utils.debug import PointDebugger


class GameRepository:
    """In-memory store of games and their points."""

    def __init__(self) -> None:
        """Create an empty repository."""
        self._games: Dict[str, Game] = {}
        self._points: Dict[str, Point] = {}

    def add_game(self, game: Game) -> Game:
        """Store ``game``, replacing any game with the same identifier.

        Parameters
        ----------
        game : Game
            Game to store.

        Returns
        -------
        Game
            The stored game.
        """
        self._games[game.game_id] = game
        return game

    def get_game(self, game_id: str) -> Game:
        """Return the game called ``game_id``.

        Parameters
        ----------
        game_id : str
            Identifier to resolve.

        Returns
        -------
        Game
            The stored game.

        Raises
        ------
        GameNotFoundError
            If no such game exists.
        """
        try:
            return self._games[game_id]
        except KeyError:
            raise GameNotFoundError(game_id) from None

    def games(self) -> List[Game]:
        """Return every stored game in insertion order.

        Returns
        -------
        List[Game]
            Stored games.
        """
        return list(self._games.values())

    def add_point(self, point: Point) -> Point:
        """Store ``point`` and register it with its game.

        Parameters
        ----------
        point : Point
            Point to store. Its game must already be stored.

        Returns
        -------
        Point
            The stored point.

        Raises
        ------
        GameNotFoundError
            If the point's game is unknown.
        """
        game = self.get_game(point.game_id)
        self._points[point.point_id] = point
        if point.point_id not in game.point_ids:
            game.point_ids.append(point.point_id)
        return point

    def get_point(self, point_id: str) -> Point:
        """Return the point called ``point_id``.

        Parameters
        ----------
        point_id : str
            Identifier to resolve.

        Returns
        -------
        Point
            The stored point.

        Raises
        ------
        PointNotFoundError
            If no such point exists.
        """
        try:
            return self._points[point_id]
        except KeyError:
            raise PointNotFoundError(point_id) from None

    def points_for_game(self, game_id: str) -> List[Point]:
        """Return the points of a game in the order they were played.

        Parameters
        ----------
        game_id : str
            Identifier of the game.

        Returns
        -------
        List[Point]
            The game's points.
        """
        game = self.get_game(game_id)
        return [self._points[point_id] for point_id in game.point_ids if point_id in self._points]


class GameTracker:
    """Front door for recording live games.

    Parameters
    ----------
    repository : GameRepository | None, optional
        Store of games and points. A fresh repository is created when omitted.
    engine : PossessionEngine | None, optional
        Engine used for point mutations. Defaults to one sharing ``debugger``.
    debugger : PointDebugger | None, optional
        Optional logging helper used to trace score changes.
    """

    def __init__(
        self,
        repository: Optional[GameRepository] = None,
        engine: Optional[PossessionEngine] = None,
        debugger: Optional[PointDebugger] = None,
    ) -> None:
        """Wire the tracker to its repository and engine.

        Parameters
        ----------
        repository : GameRepository | None, optional
            Store of games and points.
        engine : PossessionEngine | None, optional
            Engine used for point mutations.
        debugger : PointDebugger | None, optional
            Optional logging helper.
        """
        self.repository = repository or GameRepository()
        self.engine = engine or PossessionEngine(debugger=debugger)
        self.debugger = debugger

    def create_game(self, our_team_id: str, opponent_team_id: str) -> Game:
        """Create and store a new game with a 0-0 score.

        Parameters
        ----------
        our_team_id : str
            Identifier of the tracked team.
        opponent_team_id : str
            Identifier of the opponent.

        Returns
        -------
        Game
            The new game.
        """
        game = Game(
            game_id=uuid.uuid4().hex,
            our_team_id=our_team_id,
            opponent_team_id=opponent_team_id,
            date=datetime.now(timezone.utc).isoformat(),
        )
        return self.repository.add_game(game)

    def start_point(self, game_id: str, starting_team: Side) -> Point:
        """Open the next point of a game.

        Parameters
        ----------
        game_id : str
            Identifier of the game.
        starting_team : Side
            Side receiving the pull, i.e. in possession before any event.

        Returns
        -------
        Point
            The new live point, numbered after the game's existing points.

        Raises
        ------
        GameNotFoundError
            If the game is unknown.
        """
        game = self.repository.get_game(game_id)
        point = Point(
            point_id=uuid.uuid4().hex,
            game_id=game.game_id,
            point_number=game.next_point_number(),
            starting_team=validate_side(starting_team),
        )
        return self.repository.add_point(point)

    def current_point(self, game_id: str) -> Optional[Point]:
        """Return the most recently started point of a game.

        Parameters
        ----------
        game_id : str
            Identifier of the game.

        Returns
        -------
        Point | None
            Latest point, or ``None`` before the first point starts.
        """
        points = self.repository.points_for_game(game_id)
        return points[-1] if points else None

    def record_event(
        self,
        point_id: str,
        event_type: EventType | str,
        actor_id: Optional[str] = None,
        receiver_id: Optional[str] = None,
        defender_id: Optional[str] = None,
    ) -> EventOutcome:
        """Append an event to a point and settle the game score.

        Parameters
        ----------
        point_id : str
            Identifier of the point.
        event_type : EventType | str
            Type of the event.
        actor_id : str | None, optional
            Player performing the action.
        receiver_id : str | None, optional
            Intended receiver.
        defender_id : str | None, optional
            Defender involved.

        Returns
        -------
        EventOutcome
            Outcome reported by the engine.
        """
        point = self.repository.get_point(point_id)
        if point.scoring_team is None:
            credited = scoring_team_for(parse_event_type(event_type), self.engine.current_possession(point))
            if credited is not None:
                self._check_settle(point, ScoringTransition(point.point_id, None, credited))
        outcome = self.engine.append_event(point, event_type, actor_id, receiver_id, defender_id)
        self._settle(point, outcome)
        return outcome

    def override(self, point_id: str, side: Side, notes: Optional[str] = None) -> EventOutcome:
        """Force possession in a point.

        Parameters
        ----------
        point_id : str
            Identifier of the point.
        side : Side
            Side that should hold the disc.
        notes : str | None, optional
            Operator note explaining the correction.

        Returns
        -------
        EventOutcome
            Outcome reported by the engine.
        """
        point = self.repository.get_point(point_id)
        return self.engine.override_possession(point, side, notes)

    def undo(self, point_id: str) -> Optional[EventOutcome]:
        """Remove the last event of a point and revert any score it implied.

        Parameters
        ----------
        point_id : str
            Identifier of the point.

        Returns
        -------
        EventOutcome | None
            Outcome reported by the engine, ``None`` when there was nothing to undo.

        Raises
        ------
        ValueError
            If the game cannot take back the point being reopened; the point
            is left untouched.
        """
        point = self.repository.get_point(point_id)
        if point.events and point.scoring_team is not None:
            self._check_settle(point, ScoringTransition(point.point_id, point.scoring_team, None))
        outcome = self.engine.undo_last_event(point)
        if outcome is not None:
            self._settle(point, outcome)
        return outcome

    def scoreline(self, game_id: str) -> Tuple[int, int]:
        """Return ``(our_score, opponent_score)`` for a game.

        Parameters
        ----------
        game_id : str
            Identifier of the game.

        Returns
        -------
        Tuple[int, int]
            Current score from the tracked team's perspective.
        """
        game = self.repository.get_game(game_id)
        return game.our_score, game.opponent_score

    def _check_settle(self, point: Point, transition: ScoringTransition) -> None:
        """Refuse an operation whose scoring transition the game cannot absorb.

        Parameters
        ----------
        point : Point
            Point about to be mutated.
        transition : ScoringTransition
            Transition the operation will report.

        Raises
        ------
        ValueError
            If applying ``transition`` would make a score negative. The point
            has not been touched yet.
        """
        game = self.repository.get_game(point.game_id)
        try:
            game.scores_after(transition)
        except ValueError as exc:
            if self.debugger:
                self.debugger.log_error("score_mismatch", str(exc))
            raise

    def _settle(self, point: Point, outcome: EventOutcome) -> None:
        """Apply the outcome's scoring transition to the point's game.

        Parameters
        ----------
        point : Point
            Point the outcome belongs to.
        outcome : EventOutcome
            Engine result that may carry a scoring transition.
        """
        if outcome.scoring_transition is None:
            return
        game = self.repository.get_game(point.game_id)
        game.apply_scoring_transition(outcome.scoring_transition)
        if self.debugger:
            self.debugger.log_scoreline(game.game_id, game.our_score, game.opponent_score)
