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
"""Domain errors raised by the possession engine and its collaborators."""

from __future__ import annotations

from typing import Optional


class DisclineError(Exception):
    """Base class for every domain error raised by the package.

    Parameters
    ----------
    message : str
        Human-readable description surfaced to the operator.
    """

    def __init__(self, message: str) -> None:
        """Store the message on the exception.

        Parameters
        ----------
        message : str
            Human-readable description surfaced to the operator.
        """
        super().__init__(message)
        self.message = message


class PointAlreadyEndedError(DisclineError):
    """Raised when a point that already has a scoring team is mutated.

    Parameters
    ----------
    point_id : str
        Identifier of the terminal point.
    scoring_team : str | None, optional
        Side credited with the point, included in the message when known.
    """

    def __init__(self, point_id: str, scoring_team: Optional[str] = None) -> None:
        """Build the error message from the point identifier.

        Parameters
        ----------
        point_id : str
            Identifier of the terminal point.
        scoring_team : str | None, optional
            Side credited with the point.
        """
        self.point_id = point_id
        self.scoring_team = scoring_team
        suffix = f" (scored by {scoring_team})" if scoring_team else ""
        super().__init__(f"Point {point_id} has already ended{suffix}; undo the last event to reopen it")


class PointNotFoundError(DisclineError, LookupError):
    """Raised when a point identifier cannot be resolved.

    Parameters
    ----------
    point_id : str
        Identifier that failed to resolve.
    """

    def __init__(self, point_id: str) -> None:
        """Record the missing identifier.

        Parameters
        ----------
        point_id : str
            Identifier that failed to resolve.
        """
        self.point_id = point_id
        super().__init__(f"Point not found: {point_id}")


class GameNotFoundError(DisclineError, LookupError):
    """Raised when a game identifier cannot be resolved.

    Parameters
    ----------
    game_id : str
        Identifier that failed to resolve.
    """

    def __init__(self, game_id: str) -> None:
        """Record the missing identifier.

        Parameters
        ----------
        game_id : str
            Identifier that failed to resolve.
        """
        self.game_id = game_id
        super().__init__(f"Game not found: {game_id}")


class InvalidSideError(DisclineError, ValueError):
    """Raised when a value is neither ``"us"`` nor ``"them"``.

    Parameters
    ----------
    value : object
        The rejected value.
    """

    def __init__(self, value: object) -> None:
        """Record the rejected value.

        Parameters
        ----------
        value : object
            The rejected value.
        """
        self.value = value
        super().__init__(f"Side must be 'us' or 'them', got {value!r}")


class UnknownEventTypeError(DisclineError, ValueError):
    """Raised when a string does not name a known event type.

    Parameters
    ----------
    value : object
        The rejected value.
    """

    def __init__(self, value: object) -> None:
        """Record the rejected value.

        Parameters
        ----------
        value : object
            The rejected value.
        """
        self.value = value
        super().__init__(f"Unknown event type: {value!r}")
