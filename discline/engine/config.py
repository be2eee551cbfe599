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
"""Central configuration for engine, logging, and storage parameters."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class DebugConfig:
    """Settings for the structured point debugger.

    Parameters
    ----------
    output_dir : str, default="debug_logs"
        Directory where session log files are written.
    recent_history : int, default=200
        Number of log lines retained in memory for live displays.
    file_prefix : str, default="point_debug"
        Prefix applied to each session log filename.
    """

    output_dir: str = "debug_logs"
    recent_history: int = 200
    file_prefix: str = "point_debug"


@dataclass(slots=True)
class StorageConfig:
    """Formatting options for JSON persistence.

    Parameters
    ----------
    indent : int, default=2
        Indentation used when writing JSON documents.
    encoding : str, default="utf-8"
        Text encoding for files read and written by the storage helpers.
    """

    indent: int = 2
    encoding: str = "utf-8"


@dataclass(slots=True)
class ReplayConfig:
    """Defaults used by the replay entry point.

    Parameters
    ----------
    default_starting_team : str, default="us"
        Side holding the disc at the start of a replayed point.
    our_team_id : str, default="team-us"
        Identifier recorded for our team on demo games.
    opponent_team_id : str, default="team-opp"
        Identifier recorded for the opponent on demo games.
    """

    default_starting_team: str = "us"
    our_team_id: str = "team-us"
    opponent_team_id: str = "team-opp"


@dataclass(slots=True)
class EngineConfig:
    """Top-level container for all configuration sections.

    Parameters
    ----------
    debug : DebugConfig, default=DebugConfig()
        Debug logging settings.
    storage : StorageConfig, default=StorageConfig()
        JSON persistence settings.
    replay : ReplayConfig, default=ReplayConfig()
        Replay entry point defaults.
    """

    debug: DebugConfig = field(default_factory=DebugConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    replay: ReplayConfig = field(default_factory=ReplayConfig)


ENGINE_CONFIG = EngineConfig()
"""Singleton-style access to the engine configuration."""
