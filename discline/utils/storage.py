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
"""JSON persistence for games, their points, and replay scripts.

Games are stored as one document holding the game itself under ``"game"``
and its points, each with its full event log, under ``"points"``. Event
order inside a point is written and read back unchanged, since append order
drives possession. Loading replays every point's log and refuses documents
whose stored scoring team or forced possession disagree with the log, and
games whose score or point list disagree with the points stored alongside.
"""
import json
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from discline.engine.config import ENGINE_CONFIG
from discline.engine.possession import replay_point
from discline.models.game import Game
from discline.models.point import Point

ScriptStep = Dict[str, Any]


def game_to_dict(game: Game, points: Sequence[Point]) -> Dict[str, Any]:
    """Build the storage document for a game.

    Parameters
    ----------
    game : Game
        Game to serialise.
    points : Sequence[Point]
        The game's points in play order.

    Returns
    -------
    Dict[str, Any]
        JSON-compatible document.
    """
    return {"game": game.to_dict(), "points": [point.to_dict() for point in points]}


def point_from_dict(d: Mapping[str, Any]) -> Point:
    """Rebuild a point and check it against its own log.

    Parameters
    ----------
    d : Mapping[str, Any]
        Serialised point payload.

    Returns
    -------
    Point
        The restored point.

    Raises
    ------
    ValueError
        If the stored scoring team or forced possession cannot be derived from
        the stored events.
    """
    point = Point.from_dict(d)
    replayed = replay_point(point)
    if replayed.scoring_team != point.scoring_team:
        raise ValueError(
            f"Point {point.point_id} stores scoring team {point.scoring_team!r} "
            f"but its events give {replayed.scoring_team!r}"
        )
    if replayed.forced_possession != point.forced_possession:
        raise ValueError(
            f"Point {point.point_id} stores forced possession {point.forced_possession!r} "
            f"but its corrections give {replayed.forced_possession!r}"
        )
    return point


def game_from_dict(data: Mapping[str, Any]) -> Tuple[Game, List[Point]]:
    """Rebuild a game and its points from a storage document.

    Parameters
    ----------
    data : Mapping[str, Any]
        Document produced by :func:`game_to_dict`.

    Returns
    -------
    tuple[Game, List[Point]]
        The game and its points in play order.

    Raises
    ------
    KeyError
        When the document lacks the ``"game"`` section.
    ValueError
        When the points do not belong to the game, or the stored score differs
        from the tally of the points' scoring teams.
    """
    game = Game.from_dict(data["game"])
    points = [point_from_dict(item) for item in data.get("points", [])]

    point_ids = [point.point_id for point in points]
    if point_ids != game.point_ids:
        raise ValueError(f"Game {game.game_id} lists points {game.point_ids} but the document holds {point_ids}")
    strays = [point.point_id for point in points if point.game_id != game.game_id]
    if strays:
        raise ValueError(f"Points {strays} belong to another game than {game.game_id}")

    tally = Counter(point.scoring_team for point in points if point.scoring_team is not None)
    if (game.our_score, game.opponent_score) != (tally["us"], tally["them"]):
        raise ValueError(
            f"Game {game.game_id} stores score {game.our_score} - {game.opponent_score} "
            f"but its points give {tally['us']} - {tally['them']}"
        )
    return game, points


def save_game(path: Union[str, Path], game: Game, points: Sequence[Point]) -> Path:
    """Write a game and its points to ``path``.

    Parameters
    ----------
    path : str | Path
        Destination file; parent directories are created when missing.
    game : Game
        Game to persist.
    points : Sequence[Point]
        The game's points in play order.

    Returns
    -------
    Path
        The written file.
    """
    config = ENGINE_CONFIG.storage
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding=config.encoding) as fh:
        json.dump(game_to_dict(game, points), fh, indent=config.indent)
    return p


def load_game(path: Union[str, Path]) -> Tuple[Game, List[Point]]:
    """Load a game written by :func:`save_game`.

    Parameters
    ----------
    path : str | Path
        File to read.

    Returns
    -------
    tuple[Game, List[Point]]
        The game and its points in play order.

    Raises
    ------
    FileNotFoundError
        Raised when ``path`` does not exist.
    KeyError
        Raised when the JSON payload is missing required sections.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Game file not found: {path}")

    with p.open("r", encoding=ENGINE_CONFIG.storage.encoding) as fh:
        data = json.load(fh)
    return game_from_dict(data)


def _normalise_step(raw: Any) -> ScriptStep:
    """Turn one replay-script entry into a step mapping.

    Parameters
    ----------
    raw : Any
        A bare event type string or a mapping with ``"type"``, ``"override"``
        or ``"undo"``.

    Returns
    -------
    ScriptStep
        Mapping with an ``"action"`` key of ``"event"``, ``"override"`` or ``"undo"``.

    Raises
    ------
    ValueError
        If the entry matches none of the supported shapes.
    """
    if isinstance(raw, str):
        return {"action": "event", "type": raw}
    if isinstance(raw, dict):
        if raw.get("undo"):
            return {"action": "undo"}
        if "override" in raw:
            return {"action": "override", "side": raw["override"], "notes": raw.get("notes")}
        if "type" in raw:
            return {
                "action": "event",
                "type": raw["type"],
                "actorId": raw.get("actorId"),
                "receiverId": raw.get("receiverId"),
                "defenderId": raw.get("defenderId"),
            }
    raise ValueError(f"Unrecognised script step: {raw!r}")


def load_event_script(path: Union[str, Path]) -> List[ScriptStep]:
    """Read a replay script.

    The script is a JSON list whose entries are event type strings
    (``"throwaway"``), event objects (``{"type": "goal", "actorId": "p7"}``),
    overrides (``{"override": "them", "notes": "missed block"}``) or undos
    (``{"undo": true}``).

    Parameters
    ----------
    path : str | Path
        Script file to read.

    Returns
    -------
    List[ScriptStep]
        Normalised steps in file order.

    Raises
    ------
    FileNotFoundError
        Raised when ``path`` does not exist.
    ValueError
        Raised when the document is not a list or contains an unknown entry.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Event script not found: {path}")

    with p.open("r", encoding=ENGINE_CONFIG.storage.encoding) as fh:
        data = json.load(fh)
    if not isinstance(data, list):
        raise ValueError("Event script must be a JSON list")
    return [_normalise_step(item) for item in data]
