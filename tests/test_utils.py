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
"""Tests for utility modules (storage, debug)."""

import json
from pathlib import Path

import pytest

from discline.engine.errors import PointAlreadyEndedError
from discline.engine.possession import PossessionEngine
from discline.engine.tracker import GameTracker
from discline.utils.debug import PointDebugger
from discline.utils.storage import (
    game_from_dict,
    game_to_dict,
    load_event_script,
    load_game,
    point_from_dict,
    save_game,
)


def _played_game() -> GameTracker:
    """Build a tracker holding one finished point and one live, overridden point."""
    tracker = GameTracker()
    game = tracker.create_game("team-us", "team-opp")
    first = tracker.start_point(game.game_id, "us")
    for event_type in ["pull", "completion", "throwaway", "block", "goal"]:
        tracker.record_event(first.point_id, event_type, actor_id="p7")
    second = tracker.start_point(game.game_id, "them")
    tracker.record_event(second.point_id, "pull")
    tracker.override(second.point_id, "us", notes="pull caught out of bounds")
    tracker.record_event(second.point_id, "drop")
    return tracker


class TestStorage:
    """Tests for JSON persistence of games and points."""

    def test_save_and_load_game(self, tmp_path: Path) -> None:
        """A saved game loads back with identical points and score."""
        tracker = _played_game()
        game = tracker.repository.games()[0]
        points = tracker.repository.points_for_game(game.game_id)

        path = save_game(tmp_path / "games" / "game.json", game, points)
        loaded_game, loaded_points = load_game(path)

        assert loaded_game == game
        assert loaded_points == points
        assert [e.event_type for e in loaded_points[0].events] == [e.event_type for e in points[0].events]
        assert loaded_points[1].forced_possession == "us"

    def test_loaded_point_resumes_in_engine(self, tmp_path: Path) -> None:
        """A reconstructed point keeps its state and accepts further operations."""
        tracker = _played_game()
        game = tracker.repository.games()[0]
        path = save_game(tmp_path / "game.json", game, tracker.repository.points_for_game(game.game_id))
        _, points = load_game(path)
        live = points[1]

        engine = PossessionEngine()
        assert engine.current_possession(live) == "us"
        engine.undo_last_event(live)
        engine.undo_last_event(live)
        assert live.forced_possession is None
        assert engine.current_possession(live) == "them"

    def test_load_missing_file(self, tmp_path: Path) -> None:
        """Loading a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_game(tmp_path / "nope.json")

    def test_missing_game_section(self) -> None:
        """A document without a game section is refused."""
        with pytest.raises(KeyError):
            game_from_dict({"points": []})

    def test_inconsistent_scoring_team_is_rejected(self) -> None:
        """A stored scoring team that the events cannot produce is refused."""
        tracker = _played_game()
        game = tracker.repository.games()[0]
        document = game_to_dict(game, tracker.repository.points_for_game(game.game_id))
        payload = document["points"][0]
        payload["scoringTeam"] = "them"
        with pytest.raises(ValueError, match="scoring team"):
            point_from_dict(payload)

    def test_stale_game_score_is_rejected(self) -> None:
        """A game score that differs from its points' scoring teams is refused."""
        tracker = _played_game()
        game = tracker.repository.games()[0]
        document = game_to_dict(game, tracker.repository.points_for_game(game.game_id))
        document["game"]["ourScore"] = 0
        with pytest.raises(ValueError, match="stores score 0 - 0 but its points give 1 - 0"):
            game_from_dict(document)

    def test_point_list_mismatch_is_rejected(self) -> None:
        """The game's point ids must match the points stored with it."""
        tracker = _played_game()
        game = tracker.repository.games()[0]
        document = game_to_dict(game, tracker.repository.points_for_game(game.game_id))
        document["points"].pop()
        with pytest.raises(ValueError, match="lists points"):
            game_from_dict(document)

    def test_inconsistent_forced_possession_is_rejected(self) -> None:
        """A stored forced side that disagrees with the log is refused."""
        tracker = _played_game()
        game = tracker.repository.games()[0]
        document = game_to_dict(game, tracker.repository.points_for_game(game.game_id))
        payload = document["points"][1]
        payload["forcedPossession"] = None
        with pytest.raises(ValueError, match="forced possession"):
            point_from_dict(payload)


class TestEventScript:
    """Tests for replay script loading."""

    def test_load_event_script(self, tmp_path: Path) -> None:
        """A script file loads as a list of steps."""
        script = tmp_path / "script.json"
        script.write_text(
            json.dumps(
                [
                    "pull",
                    {"type": "completion", "actorId": "a", "receiverId": "b"},
                    {"override": "them", "notes": "fix"},
                    {"undo": True},
                ]
            ),
            encoding="utf-8",
        )
        steps = load_event_script(script)
        assert [step["action"] for step in steps] == ["event", "event", "override", "undo"]
        assert steps[1]["receiverId"] == "b"
        assert steps[2] == {"action": "override", "side": "them", "notes": "fix"}

    def test_script_must_be_a_list(self, tmp_path: Path) -> None:
        """A script that is not a list is refused."""
        script = tmp_path / "script.json"
        script.write_text(json.dumps({"type": "pull"}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_event_script(script)

    def test_unknown_step_shape(self, tmp_path: Path) -> None:
        """A step that is neither an event nor an action is refused."""
        script = tmp_path / "script.json"
        script.write_text(json.dumps([42]), encoding="utf-8")
        with pytest.raises(ValueError, match="Unrecognised"):
            load_event_script(script)


class TestPointDebugger:
    """Tests for the structured debug logger."""

    def test_engine_operations_are_logged(self, tmp_path: Path) -> None:
        """Appends, overrides and undos reach the point log."""
        debugger = PointDebugger(str(tmp_path / "logs"))
        tracker = GameTracker(debugger=debugger)
        game = tracker.create_game("team-us", "team-opp")
        point = tracker.start_point(game.game_id, "us")
        tracker.record_event(point.point_id, "throwaway")
        tracker.override(point.point_id, "us", notes="block missed")
        tracker.record_event(point.point_id, "goal")
        tracker.undo(point.point_id)
        debugger.close()

        assert debugger.log_path is not None
        text = debugger.log_path.read_text(encoding="utf-8")
        assert "EVENT: Point: " in text
        assert "Event: throwaway | Possession: them" in text
        assert "OVERRIDE: Point: " in text and "Notes: block missed" in text
        assert "SCORE: " in text and "Scoring team: - -> us" in text
        assert "UNDO: " in text
        assert "SCORELINE: " in text and "Score: 0 - 0" in text

    def test_rejections_are_logged(self, tmp_path: Path) -> None:
        """Refused operations are logged as errors."""
        debugger = PointDebugger(str(tmp_path))
        tracker = GameTracker(debugger=debugger)
        game = tracker.create_game("team-us", "team-opp")
        point = tracker.start_point(game.game_id, "us")
        tracker.record_event(point.point_id, "goal")
        with pytest.raises(PointAlreadyEndedError):
            tracker.record_event(point.point_id, "pull")
        recent = debugger.get_recent_events(limit=1)
        debugger.close()
        assert len(recent) == 1
        assert "ERROR: Type: point_ended" in recent[0]

    def test_recent_events_are_numbered(self, tmp_path: Path) -> None:
        """The recent-events dump numbers each entry."""
        debugger = PointDebugger(str(tmp_path))
        debugger.log_error("test", "first")
        debugger.log_error("test", "second")
        recent = debugger.get_recent_events()
        debugger.close()
        assert recent[0].startswith("00001 ")
        assert recent[1].endswith("Details: second")
