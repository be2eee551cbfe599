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
"""Structured logging utilities used to trace point tracking sessions."""
import time
from collections import deque
from pathlib import Path
from threading import Lock
from typing import Deque, List, Optional, TextIO, Tuple

from discline.engine.config import ENGINE_CONFIG


class PointDebugger:
    """Helper object that streams structured point telemetry to disk.

    Parameters
    ----------
    output_dir : str | None, optional
        Directory where session logs are created; created automatically when
        missing. Defaults to ``ENGINE_CONFIG.debug.output_dir``.
    """

    def __init__(self, output_dir: Optional[str] = None) -> None:
        """Initialise the debugger and start the first logging session.

        Parameters
        ----------
        output_dir : str | None, optional
            Filesystem directory where log files are created or appended.
        """
        config = ENGINE_CONFIG.debug
        self.output_dir = Path(output_dir or config.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_file: Optional[TextIO] = None
        self.log_path: Optional[Path] = None
        self.session_start = time.strftime("%Y%m%d_%H%M%S")
        self._lock = Lock()
        self._line_number = 1
        self._recent_events: Deque[Tuple[int, str]] = deque(maxlen=config.recent_history)
        self.start_new_session()

    def start_new_session(self) -> None:
        """Start a new debug logging session."""
        if self.log_file:
            self.log_file.close()

        self.log_path = self.output_dir / f"{ENGINE_CONFIG.debug.file_prefix}_{self.session_start}.txt"
        self.log_file = open(self.log_path, "w", encoding="utf-8")
        self.log_file.write(f"=== Point Debug Session: {time.strftime('%Y-%m-%d %H:%M:%S')} ===\n\n")

    def log_event(self, point_id: str, event_index: int, event_type: str, possession: str) -> None:
        """Log an appended event and the possession that follows it.

        Parameters
        ----------
        point_id : str
            Identifier of the point receiving the event.
        event_index : int
            Zero-based position of the event in the log.
        event_type : str
            Wire value of the event type.
        possession : str
            Side holding the disc after the event.
        """
        self._write_log(
            "EVENT",
            f"Point: {point_id} | #{event_index} | Event: {event_type} | Possession: {possession}",
        )

    def log_undo(self, point_id: str, event_type: str, possession: str) -> None:
        """Log the removal of the last event of a point.

        Parameters
        ----------
        point_id : str
            Identifier of the point.
        event_type : str
            Wire value of the removed event's type.
        possession : str
            Side holding the disc once the event is gone.
        """
        self._write_log("UNDO", f"Point: {point_id} | Removed: {event_type} | Possession: {possession}")

    def log_override(self, point_id: str, possession: str, notes: Optional[str] = None) -> None:
        """Log an operator forcing possession.

        Parameters
        ----------
        point_id : str
            Identifier of the point.
        possession : str
            Side forced into possession.
        notes : str | None, optional
            Operator note attached to the override.
        """
        notes_str = f" | Notes: {notes}" if notes else ""
        self._write_log("OVERRIDE", f"Point: {point_id} | Forced: {possession}{notes_str}")

    def log_score(self, point_id: str, from_team: Optional[str], to_team: Optional[str]) -> None:
        """Log a change in a point's scoring team.

        Parameters
        ----------
        point_id : str
            Identifier of the point.
        from_team : str | None
            Scoring team before the change.
        to_team : str | None
            Scoring team after the change.
        """
        self._write_log("SCORE", f"Point: {point_id} | Scoring team: {from_team or '-'} -> {to_team or '-'}")

    def log_scoreline(self, game_id: str, our_score: int, opponent_score: int) -> None:
        """Log the running score of a game.

        Parameters
        ----------
        game_id : str
            Identifier of the game.
        our_score : int
            Points scored by the tracked team.
        opponent_score : int
            Points scored by the opponent.
        """
        self._write_log("SCORELINE", f"Game: {game_id} | Score: {our_score} - {opponent_score}")

    def log_error(self, error_type: str, description: str) -> None:
        """Log an error or warning.

        Parameters
        ----------
        error_type : str
            Label describing the error classification.
        description : str
            Human-readable explanation of the issue.
        """
        self._write_log("ERROR", f"Type: {error_type} | Details: {description}")

    def _write_log(self, event_type: str, details: str) -> None:
        """Write a log entry to the file.

        Parameters
        ----------
        event_type : str
            Category label for the log entry.
        details : str
            Formatted message body to persist.
        """
        timestamp = time.strftime("%H:%M:%S")
        log_entry = f"[{timestamp}] {event_type}: {details}"

        with self._lock:
            line_no = self._line_number
            self._line_number += 1
            self._recent_events.append((line_no, log_entry))

            if self.log_file:
                self.log_file.write(f"{log_entry}\n")
                self.log_file.flush()

    def get_recent_events(self, limit: int = 20) -> List[str]:
        """Return the latest debug entries with line numbers for live displays.

        Parameters
        ----------
        limit : int
            Maximum number of entries to return.

        Returns
        -------
        List[str]
            Up to ``limit`` most recent log lines with prefixed line numbers.
        """
        with self._lock:
            selected = list(self._recent_events)[-limit:]
        return [f"{line_no:05d} {entry}" for line_no, entry in selected]

    def close(self) -> None:
        """Close the log file."""
        if self.log_file:
            self.log_file.close()
            self.log_file = None
