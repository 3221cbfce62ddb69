"""Script-facing waiting, task-coordination and event functions."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from typing import Any

from .scheduler import Scheduler
from .tasks import Coroutine, SchedulerTask


def _is_function(value: Any) -> bool:
    return callable(value) and not isinstance(value, Coroutine)


def _is_coroutine(value: Any) -> bool:
    return isinstance(value, Coroutine) or inspect.isgenerator(value)


def _is_ticks(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require_task(task: Any, name: str) -> None:
    if not _is_function(task):
        raise ValueError(f"{name}: invalid task function")


class ConcurrencyApi:
    """Waiting and background-task functions bound to a scheduler.

    The waiting functions register what the running script waits for and
    return the wait condition; a script yields that value, as in
    ``yield tas.wait_ticks(5)``. The background functions return at once.
    """

    def __init__(self, scheduler: Scheduler) -> None:
        self.scheduler = scheduler

    # ------------------------------------------------------------------
    # Waiting
    # ------------------------------------------------------------------

    def wait_ticks(self, ticks: int) -> SchedulerTask:
        if not _is_ticks(ticks) or ticks <= 0:
            raise ValueError("wait_ticks: tick count must be positive")
        return self.scheduler.yield_ticks(ticks)

    def wait_event(self, event_name: str) -> SchedulerTask:
        if not event_name:
            raise ValueError("wait_event: event name cannot be empty")
        return self.scheduler.yield_wait_for_event(event_name)

    def wait_until(self, predicate: Callable[[], Any]) -> SchedulerTask:
        if not _is_function(predicate):
            raise ValueError("wait_until: predicate function is invalid")
        return self.scheduler.yield_until(predicate)

    def wait_coroutines(self, *args: Coroutine) -> SchedulerTask:
        if not all(isinstance(arg, Coroutine) for arg in args):
            raise TypeError("wait_coroutines: all arguments must be coroutines")
        if not args:
            raise ValueError("wait_coroutines: no coroutines provided")
        return self.scheduler.yield_coroutines(args)

    def wait(self, arg: Any) -> SchedulerTask:
        """Wait on ticks, an event name, a predicate or a collection of coroutines."""
        if arg is None:
            raise ValueError("wait: argument is invalid")
        if _is_ticks(arg):
            if arg <= 0:
                raise ValueError("wait: tick count must be positive")
            return self.scheduler.yield_ticks(arg)
        if isinstance(arg, str):
            if not arg:
                raise ValueError("wait: event name cannot be empty")
            return self.scheduler.yield_wait_for_event(arg)
        if _is_function(arg):
            return self.scheduler.yield_until(arg)
        if isinstance(arg, (list, tuple, set, frozenset, Mapping)):
            values = arg.values() if isinstance(arg, Mapping) else arg
            coroutines = [value for value in values if isinstance(value, Coroutine)]
            if not coroutines:
                raise ValueError("wait: no valid coroutines found in table")
            return self.scheduler.yield_coroutines(coroutines)
        raise TypeError(
            "wait: unsupported argument type (expected number, string, function, or table)"
        )

    # ------------------------------------------------------------------
    # Coordination
    # ------------------------------------------------------------------

    def _track_all(self, name: str, args: tuple[Any, ...]) -> list[Coroutine]:
        tracked: list[Coroutine] = []
        for arg in args:
            if _is_function(arg) or _is_coroutine(arg):
                tracked.append(self.scheduler.start_coroutine_and_track(arg))
            else:
                raise TypeError(f"{name}: arguments must be functions or coroutines")
        if not tracked:
            raise ValueError(f"{name}: no valid tasks provided")
        return tracked

    def parallel(self, *args: Any) -> SchedulerTask:
        """Start every task and wait until all of them have finished."""
        return self.scheduler.yield_coroutines(self._track_all("parallel", args))

    def race(self, *args: Any) -> SchedulerTask:
        """Start every task and wait until the first of them has finished."""
        return self.scheduler.yield_race(self._track_all("race", args))

    def spawn(self, *args: Any) -> list[Coroutine]:
        """Start tasks in the background without waiting for them."""
        if not all(_is_function(arg) or _is_coroutine(arg) for arg in args):
            raise TypeError("spawn: arguments must be functions or coroutines")
        return [self.scheduler.add_coroutine_task(arg) for arg in args]

    # ------------------------------------------------------------------
    # Background tasks
    # ------------------------------------------------------------------

    def repeat_ticks(self, task: Callable[[], Any], ticks: int) -> SchedulerTask:
        _require_task(task, "repeat_ticks")
        if not _is_ticks(ticks) or ticks <= 0:
            raise ValueError("repeat_ticks: tick count must be positive")
        return self.scheduler.start_repeat_for(task, ticks)

    def repeat_until(
        self, task: Callable[[], Any], condition: Callable[[], Any]
    ) -> SchedulerTask:
        _require_task(task, "repeat_until")
        if not _is_function(condition):
            raise ValueError("repeat_until: invalid condition function")
        return self.scheduler.start_repeat_until(task, condition)

    def repeat_while(
        self, task: Callable[[], Any], condition: Callable[[], Any]
    ) -> SchedulerTask:
        _require_task(task, "repeat_while")
        if not _is_function(condition):
            raise ValueError("repeat_while: invalid condition function")
        return self.scheduler.start_repeat_while(task, condition)

    def delay(self, task: Callable[[], Any], delay_ticks: int) -> SchedulerTask:
        _require_task(task, "delay")
        if not _is_ticks(delay_ticks) or delay_ticks < 0:
            raise ValueError("delay: delay ticks cannot be negative")
        return self.scheduler.start_delay(task, delay_ticks)

    def timeout(self, task: Callable[[], Any], timeout_ticks: int) -> SchedulerTask:
        _require_task(task, "timeout")
        if not _is_ticks(timeout_ticks) or timeout_ticks <= 0:
            raise ValueError("timeout: timeout must be positive")
        return self.scheduler.start_timeout(task, timeout_ticks)

    def debounce(self, task: Callable[[], Any], debounce_ticks: int) -> SchedulerTask:
        _require_task(task, "debounce")
        if not _is_ticks(debounce_ticks) or debounce_ticks <= 0:
            raise ValueError("debounce: debounce ticks must be positive")
        return self.scheduler.start_debounce(task, debounce_ticks)

    def sequence(self, *args: Callable[[], Any]) -> SchedulerTask:
        if not all(_is_function(arg) for arg in args):
            raise TypeError("sequence: all arguments must be functions")
        if not args:
            raise ValueError("sequence: no tasks provided")
        return self.scheduler.start_sequence(args)

    def retry(self, task: Callable[[], Any], max_attempts: int) -> SchedulerTask:
        _require_task(task, "retry")
        if not _is_ticks(max_attempts) or max_attempts <= 0:
            raise ValueError("retry: max attempts must be positive")
        return self.scheduler.start_retry(task, max_attempts)


class EventApi:
    """Event listening and firing functions bound to an event manager.

    The manager provides ``register_listener(name, callback, one_time)``,
    ``register_once_listener``, ``fire_event(name, *args)``,
    ``clear_listeners([name])``, ``get_listener_count`` and ``has_listeners``.
    """

    def __init__(self, event_manager: Any) -> None:
        self.event_manager = event_manager

    @staticmethod
    def _check_name(event_name: str, name: str) -> None:
        if not event_name:
            raise ValueError(f"{name}: event name cannot be empty")

    def on(self, event_name: str, callback: Callable[..., Any], one_time: bool = False) -> None:
        self._check_name(event_name, "on")
        if not _is_function(callback):
            raise ValueError("on: callback function is invalid")
        self.event_manager.register_listener(event_name, callback, one_time)

    def once(self, event_name: str, callback: Callable[..., Any]) -> None:
        self._check_name(event_name, "once")
        if not _is_function(callback):
            raise ValueError("once: callback function is invalid")
        self.event_manager.register_once_listener(event_name, callback)

    def send(self, event_name: str, *args: Any) -> None:
        self._check_name(event_name, "send")
        self.event_manager.fire_event(event_name, *args)

    def clear_listeners(self, event_name: str | None = None) -> None:
        """Remove the listeners of one event, or of every event when none is named."""
        if event_name is None:
            self.event_manager.clear_listeners()
            return
        self._check_name(event_name, "clear_listeners")
        self.event_manager.clear_listeners(event_name)

    def get_listener_count(self, event_name: str) -> int:
        self._check_name(event_name, "get_listener_count")
        return self.event_manager.get_listener_count(event_name)

    def has_listeners(self, event_name: str) -> bool:
        self._check_name(event_name, "has_listeners")
        return self.event_manager.has_listeners(event_name)