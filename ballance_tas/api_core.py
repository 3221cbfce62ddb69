"""Script-facing logging, input, world-query, debug and record-playback functions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .formatting import format_string
from .scheduler import Scheduler
from .tasks import SchedulerTask

_log = logging.getLogger(__name__)


class RecordApi:
    """Playback control over a record player.

    The player provides ``load_and_play(path)``, ``stop()``, ``pause()``,
    ``resume()``, ``seek(frame)``, ``is_playing()``, ``is_paused()``,
    ``get_current_frame()`` and ``get_total_frames()``.
    """

    def __init__(self, record_player: Any = None) -> None:
        self.record_player = record_player

    def _player(self, name: str) -> Any:
        if self.record_player is None:
            raise RuntimeError(f"record.{name}: RecordPlayer not available")
        return self.record_player

    def load(self, path: str) -> bool:
        """Load a record file and start playing it."""
        if not path:
            raise ValueError("record.load: path cannot be empty")
        return bool(self._player("load").load_and_play(path))

    def stop(self) -> None:
        self._player("stop").stop()

    def pause(self) -> None:
        self._player("pause").pause()

    def resume(self) -> None:
        self._player("resume").resume()

    def seek(self, frame: int) -> bool:
        player = self._player("seek")
        if frame < 0:
            raise ValueError("record.seek: frame must be non-negative")
        return bool(player.seek(int(frame)))

    def is_playing(self) -> bool:
        if self.record_player is None:
            return False
        return bool(self.record_player.is_playing())

    def is_paused(self) -> bool:
        if self.record_player is None:
            return False
        return bool(self.record_player.is_paused())

    def get_current_frame(self) -> int:
        if self.record_player is None:
            return 0
        return int(self.record_player.get_current_frame())

    def get_total_frames(self) -> int:
        if self.record_player is None:
            return 0
        return int(self.record_player.get_total_frames())


class TasApi:
    """The functions a TAS script calls, bound to the engine's parts.

    Collaborators are duck-typed and any of them may be left out:

    * ``game``: ``print_message``, ``is_paused``, ``is_playing``,
      ``get_sr_score``, ``get_hs_score``, ``get_points``, ``get_life_count``,
      ``get_current_level``, ``get_current_sector``, ``get_object_by_name``,
      ``get_object_by_id``, ``get_physics_object``, ``get_active_ball``,
      ``get_position``, ``get_velocity``, ``get_angular_velocity``,
      ``get_active_camera`` and ``skip_render_for_ticks``.
    * ``input_system``: ``press_keys_one_frame``, ``hold_keys``,
      ``press_keys``, ``release_keys``, ``release_all_keys``,
      ``are_keys_down``, ``are_keys_up`` and ``are_keys_toggled``.
    * ``project_manager``: ``current_project``, whose ``manifest`` is a mapping.
    * ``tick_source``: a callable returning the current tick.
    """

    def __init__(
        self,
        *,
        game: Any = None,
        input_system: Any = None,
        scheduler: Scheduler | None = None,
        record_player: Any = None,
        project_manager: Any = None,
        tick_source: Callable[[], int] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.game = game
        self.input_system = input_system
        self.scheduler = scheduler
        self.project_manager = project_manager
        self.tick_source = tick_source
        self.logger = logger or _log
        self.record = RecordApi(record_player)

    # ------------------------------------------------------------------
    # Logging and output
    # ------------------------------------------------------------------

    def _emit(self, level: int, name: str, fmt: str, args: tuple[Any, ...]) -> None:
        try:
            text = format_string(fmt, *args)
            self.logger.log(level, "[TAS] %s", text)
        except Exception as exc:
            self.logger.error("[TAS] Error in %s: %s", name, exc)

    def log(self, fmt: str, *args: Any) -> None:
        self._emit(logging.INFO, "log", fmt, args)

    def warn(self, fmt: str, *args: Any) -> None:
        self._emit(logging.WARNING, "warn", fmt, args)

    def error(self, fmt: str, *args: Any) -> None:
        self._emit(logging.ERROR, "error", fmt, args)

    def print(self, fmt: str, *args: Any) -> None:
        """Show a formatted message in the game."""
        try:
            text = format_string(fmt, *args)
            if self.game is None:
                raise RuntimeError("game interface not available")
            self.game.print_message(text)
        except Exception as exc:
            self.logger.error("[TAS] Error in print: %s", exc)

    def get_tick(self) -> int:
        if self.tick_source is None:
            return 0
        return int(self.tick_source())

    def get_manifest(self) -> dict[str, Any]:
        """The current project's manifest, or an empty mapping."""
        try:
            project = getattr(self.project_manager, "current_project", None)
            if project is not None:
                return dict(project.manifest)
        except Exception:
            pass
        return {}

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    @staticmethod
    def _require_keys(keys: str, name: str) -> None:
        if not keys:
            raise ValueError(f"{name}: key string cannot be empty")

    def press(self, keys: str) -> None:
        """Press keys for exactly one frame."""
        self._require_keys(keys, "press")
        self.input_system.press_keys_one_frame(keys)

    def hold(self, keys: str, duration: int) -> SchedulerTask:
        """Hold keys for a number of ticks; the script yields the returned wait."""
        self._require_keys(keys, "hold")
        if duration <= 0:
            raise ValueError("hold: duration must be positive")
        if self.scheduler is None:
            raise RuntimeError("hold: scheduler not available")
        self.input_system.hold_keys(keys, duration)
        return self.scheduler.yield_ticks(duration)

    def key_down(self, keys: str) -> None:
        self._require_keys(keys, "key_down")
        self.input_system.press_keys(keys)

    def key_up(self, keys: str) -> None:
        self._require_keys(keys, "key_up")
        self.input_system.release_keys(keys)

    def release_all_keys(self) -> None:
        self.input_system.release_all_keys()

    def are_keys_down(self, keys: str) -> bool:
        if not keys:
            return False
        return bool(self.input_system.are_keys_down(keys))

    def are_keys_up(self, keys: str) -> bool:
        if not keys:
            return False
        return bool(self.input_system.are_keys_up(keys))

    def are_keys_toggled(self, keys: str) -> bool:
        if not keys:
            return False
        return bool(self.input_system.are_keys_toggled(keys))

    # ------------------------------------------------------------------
    # World queries
    # ------------------------------------------------------------------

    def _query(self, method: str, default: Any) -> Any:
        if self.game is None:
            return default
        return getattr(self.game, method)()

    def is_paused(self) -> bool:
        return bool(self._query("is_paused", False))

    def is_playing(self) -> bool:
        return bool(self._query("is_playing", False))

    def get_sr_score(self) -> float:
        return float(self._query("get_sr_score", 0.0))

    def get_hs_score(self) -> int:
        return int(self._query("get_hs_score", 0))

    def get_points(self) -> int:
        return int(self._query("get_points", 0))

    def get_life_count(self) -> int:
        return int(self._query("get_life_count", 0))

    def get_level(self) -> int:
        return int(self._query("get_current_level", 0))

    def get_sector(self) -> int:
        return int(self._query("get_current_sector", 0))

    def get_object(self, name: str) -> Any:
        if not name or self.game is None:
            return None
        try:
            return self.game.get_object_by_name(name)
        except Exception:
            return None

    def get_object_by_id(self, object_id: int) -> Any:
        if object_id <= 0 or self.game is None:
            return None
        try:
            return self.game.get_object_by_id(object_id)
        except Exception:
            return None

    def get_physics_object(self, entity: Any) -> Any:
        if entity is None or self.game is None:
            return None
        try:
            return self.game.get_physics_object(entity)
        except Exception:
            return None

    def get_ball(self) -> Any:
        if self.game is None:
            return None
        try:
            return self.game.get_active_ball()
        except Exception:
            return None

    def _ball_query(self, method: str) -> Any:
        if self.game is None:
            return None
        try:
            ball = self.game.get_active_ball()
            if ball is None:
                return None
            return getattr(self.game, method)(ball)
        except Exception:
            return None

    def get_ball_position(self) -> Any:
        return self._ball_query("get_position")

    def get_ball_velocity(self) -> Any:
        return self._ball_query("get_velocity")

    def get_ball_angular_velocity(self) -> Any:
        return self._ball_query("get_angular_velocity")

    def get_camera(self) -> Any:
        if self.game is None:
            return None
        try:
            return self.game.get_active_camera()
        except Exception:
            return None

    # ------------------------------------------------------------------
    # Debugging
    # ------------------------------------------------------------------

    def assert_(self, condition: Any, message: str | None = None) -> None:
        """Raise AssertionError with ``message`` when ``condition`` is false."""
        if condition:
            return
        raise AssertionError(message if message is not None else "Assertion failed!")

    def skip_rendering(self, ticks: int) -> None:
        if self.game is not None:
            self.game.skip_render_for_ticks(ticks)