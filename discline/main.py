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
"""Entry point for replaying a scripted point through the possession engine."""
import argparse
from typing import List, Optional, Sequence

from discline.engine.config import ENGINE_CONFIG
from discline.engine.errors import DisclineError
from discline.engine.possession import EventOutcome
from discline.engine.tracker import GameTracker
from discline.models.game import Game
from discline.models.point import Point
from discline.utils.debug import PointDebugger
from discline.utils.storage import ScriptStep, load_event_script

# Walks every event type, an override pair, a goal and a callahan with their
# undos, then a goal followed by an attempt to keep playing.
DEMO_SCRIPT: List[ScriptStep] = [
    {"action": "event", "type": "pull"},
    {"action": "event", "type": "completion"},
    {"action": "event", "type": "throwaway"},
    {"action": "event", "type": "drop"},
    {"action": "event", "type": "stall-out"},
    {"action": "event", "type": "block"},
    {"action": "event", "type": "foul"},
    {"action": "event", "type": "violation"},
    {"action": "event", "type": "contest"},
    {"action": "event", "type": "timeout"},
    {"action": "event", "type": "injury"},
    {"action": "event", "type": "substitution"},
    {"action": "override", "side": "them", "notes": "missed block"},
    {"action": "override", "side": "us", "notes": None},
    {"action": "event", "type": "goal"},
    {"action": "undo"},
    {"action": "event", "type": "callahan"},
    {"action": "undo"},
    {"action": "event", "type": "goal"},
    {"action": "event", "type": "completion"},
]


def format_status(game: Game, point: Point, possession: str) -> str:
    """Render a one-line status for the current point.

    Parameters
    ----------
    game : Game
        Game the point belongs to.
    point : Point
        Point being tracked.
    possession : str
        Side currently holding the disc.

    Returns
    -------
    str
        Score, point number, possession and terminal marker.
    """
    forced = " (forced)" if point.is_possession_forced else ""
    over = f" | Scored by {point.scoring_team.upper()}" if point.scoring_team else ""
    return (
        f"Score: {game.our_score} - {game.opponent_score} | "
        f"Point #{point.point_number} | Possession: {possession.upper()}{forced}{over}"
    )


def apply_step(tracker: GameTracker, point: Point, step: ScriptStep) -> Optional[EventOutcome]:
    """Run one script step against ``point``.

    Parameters
    ----------
    tracker : GameTracker
        Tracker owning the point's game.
    point : Point
        Point receiving the step.
    step : ScriptStep
        Normalised step from :func:`discline.utils.storage.load_event_script`.

    Returns
    -------
    EventOutcome | None
        Engine outcome, or ``None`` when an undo found nothing to remove.
    """
    action = step["action"]
    if action == "undo":
        return tracker.undo(point.point_id)
    if action == "override":
        return tracker.override(point.point_id, step["side"], step.get("notes"))
    return tracker.record_event(
        point.point_id,
        step["type"],
        step.get("actorId"),
        step.get("receiverId"),
        step.get("defenderId"),
    )


def replay(steps: Sequence[ScriptStep], starting_team: str, tracker: GameTracker) -> Game:
    """Replay ``steps`` as a single point of a new game, printing progress.

    Domain errors are printed and the replay moves on to the next step,
    leaving the point as it was.

    Parameters
    ----------
    steps : Sequence[ScriptStep]
        Steps to apply in order.
    starting_team : str
        Side in possession before the first step.
    tracker : GameTracker
        Tracker used to create the game and record the steps.

    Returns
    -------
    Game
        The game holding the replayed point.
    """
    replay_config = ENGINE_CONFIG.replay
    game = tracker.create_game(replay_config.our_team_id, replay_config.opponent_team_id)
    point = tracker.start_point(game.game_id, starting_team)
    print(format_status(game, point, tracker.engine.current_possession(point)))

    for step in steps:
        label = step.get("type") or step["action"]
        try:
            outcome = apply_step(tracker, point, step)
        except DisclineError as exc:
            print(f"{label:>13}: rejected - {exc}")
            continue
        if outcome is None:
            print(f"{label:>13}: nothing to undo")
            continue
        print(f"{label:>13}: {format_status(game, point, outcome.possession)}")

    return game


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments and replay a script or the built-in demo.

    Parameters
    ----------
    argv : Sequence[str] | None, optional
        Command-line arguments, defaulting to ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit status.
    """
    parser = argparse.ArgumentParser(description="Replay a point through the possession engine")
    parser.add_argument("script", nargs="?", help="JSON event script; the built-in demo runs when omitted")
    parser.add_argument(
        "--start",
        choices=("us", "them"),
        default=ENGINE_CONFIG.replay.default_starting_team,
        help="Side in possession when the point starts",
    )
    parser.add_argument("--log-dir", default=None, help="Write a debug log to this directory")
    args = parser.parse_args(argv)

    steps = DEMO_SCRIPT
    if args.script:
        try:
            steps = load_event_script(args.script)
        except (OSError, ValueError) as exc:
            print(f"Error loading script {args.script}: {exc}")
            return 1

    debugger = PointDebugger(args.log_dir) if args.log_dir else None
    try:
        game = replay(steps, args.start, GameTracker(debugger=debugger))
    finally:
        if debugger:
            debugger.close()

    print(f"\nFinal Score: {game.our_score} - {game.opponent_score}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
