"""Tick-driven scheduler for script coroutines and background tasks."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from .tasks import (
    CallStatus,
    Coroutine,
    CoroutineWaitTask,
    DebounceTask,
    DelayTask,
    EventWaitTask,
    ImmediateTask,
    PredicateWaitTask,
    RaceTask,
    RepeatForTicksTask,
    RepeatUntilTask,
    RepeatWhileTask,
    RetryTask,
    SchedulerTask,
    SequenceTask,
    TickWaitTask,
    TimeoutTask,
)

_log = logging.getLogger(__name__)


@dataclass
class _Pending:
    """A suspended coroutine and the condition it waits on."""

    coroutine: Coroutine
    task: SchedulerTask


def _as_coroutine(target: Any) -> Coroutine:
    if target is None:
        raise ValueError("invalid coroutine or function provided")
    if isinstance(target, Coroutine):
        return target
    return Coroutine(target)


def _require_callable(value: Any, what: str) -> None:
    if value is None or not callable(value):
        raise ValueError(f"invalid {what} function")


class Scheduler:
    """Resumes script coroutines when what they wait for is done.

    A script is a generator. To wait, it calls one of the ``yield_*``
    methods and then yields, typically as ``yield scheduler.yield_ticks(5)``.
    Errors raised by a script are logged; they do not stop the scheduler.
    """

    def __init__(self, event_manager: Any = None, logger: logging.Logger | None = None) -> None:
        self.event_manager = event_manager
        self._logger = logger or _log
        self._tasks: list[_Pending] = []
        self._background: list[SchedulerTask] = []
        self._stack: list[Coroutine] = []
        self._generation = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def current_coroutine(self) -> Coroutine | None:
        """The coroutine being resumed right now, if any."""
        return self._stack[-1] if self._stack else None

    @property
    def is_running(self) -> bool:
        """True while any coroutine or background task is pending."""
        return bool(self._tasks or self._background)

    @property
    def task_count(self) -> int:
        return len(self._tasks) + len(self._background)

    # ------------------------------------------------------------------
    # Starting coroutines
    # ------------------------------------------------------------------

    def start_coroutine(self, target: Any) -> Coroutine:
        """Run a coroutine at once, up to its first wait or its end."""
        coroutine = _as_coroutine(target)
        self._resume(coroutine, "Coroutine error")
        return coroutine

    def add_coroutine_task(self, target: Any) -> Coroutine:
        """Queue a coroutine to start on the next tick."""
        coroutine = _as_coroutine(target)
        self._tasks.append(_Pending(coroutine, ImmediateTask()))
        return coroutine

    def start_coroutine_and_track(self, target: Any) -> Coroutine:
        """Queue a coroutine to start on the next tick and return it for waiting on."""
        return self.add_coroutine_task(target)

    def start_parallel(self, targets: Iterable[Any]) -> list[Coroutine]:
        """Queue every given function or coroutine; ``None`` entries are skipped."""
        return [self.add_coroutine_task(target) for target in targets if target is not None]

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Advance every pending wait and background task by one tick."""
        generation = self._generation
        current, self._tasks = self._tasks, []
        kept: list[_Pending] = []
        for entry in current:
            if entry.coroutine.status is not CallStatus.YIELDED:
                continue
            if entry.task.is_complete():
                self._resume(entry.coroutine, "Coroutine resume error")
            else:
                kept.append(entry)
            if self._generation != generation:
                return
        self._tasks = kept + self._tasks

        background, self._background = self._background, []
        remaining = [task for task in background if not task.is_complete()]
        if self._generation == generation:
            self._background = remaining + self._background

    def clear(self) -> None:
        """Drop every pending coroutine and background task."""
        self._tasks.clear()
        self._background.clear()
        self._stack.clear()
        self._generation += 1

    def _resume(self, coroutine: Coroutine, context: str) -> None:
        self._stack.append(coroutine)
        try:
            coroutine.resume()
        except Exception as exc:
            self._logger.error("%s: %s", context, exc)
        finally:
            if self._stack and self._stack[-1] is coroutine:
                self._stack.pop()

    # ------------------------------------------------------------------
    # Waiting from inside a coroutine
    # ------------------------------------------------------------------

    def _wait(self, task: SchedulerTask, name: str) -> SchedulerTask:
        coroutine = self.current_coroutine
        if coroutine is None:
            raise RuntimeError(f"{name} called outside of coroutine context")
        self._tasks.append(_Pending(coroutine, task))
        return task

    def yield_ticks(self, ticks: int) -> SchedulerTask:
        if ticks <= 0:
            raise ValueError("yield_ticks: tick count must be positive")
        return self._wait(TickWaitTask(ticks), "yield_ticks")

    def yield_until(self, predicate: Callable[[], Any]) -> SchedulerTask:
        _require_callable(predicate, "predicate")
        return self._wait(PredicateWaitTask(predicate), "yield_until")

    def yield_coroutines(self, coroutines: Iterable[Coroutine]) -> SchedulerTask:
        coroutines = list(coroutines)
        if not coroutines:
            raise ValueError("yield_coroutines: no coroutines to wait for")
        return self._wait(CoroutineWaitTask(coroutines), "yield_coroutines")

    def yield_race(self, coroutines: Iterable[Coroutine]) -> SchedulerTask:
        coroutines = list(coroutines)
        if not coroutines:
            raise ValueError("yield_race: no coroutines to wait for")
        return self._wait(RaceTask(coroutines), "yield_race")

    def yield_wait_for_event(self, event_name: str) -> SchedulerTask:
        if not event_name:
            raise ValueError("yield_wait_for_event: event name cannot be empty")
        if self.current_coroutine is None:
            raise RuntimeError("yield_wait_for_event called outside of coroutine context")
        return self._wait(EventWaitTask(event_name, self.event_manager), "yield_wait_for_event")

    # ------------------------------------------------------------------
    # Background tasks
    # ------------------------------------------------------------------

    def _add_background(self, task: SchedulerTask) -> SchedulerTask:
        self._background.append(task)
        return task

    def start_repeat_for(self, task: Callable[[], Any], ticks: int) -> SchedulerTask:
        _require_callable(task, "task")
        if ticks <= 0:
            raise ValueError("start_repeat_for: tick count must be positive")
        return self._add_background(RepeatForTicksTask(task, ticks))

    def start_repeat_until(
        self, task: Callable[[], Any], condition: Callable[[], Any]
    ) -> SchedulerTask:
        _require_callable(task, "task")
        _require_callable(condition, "condition")
        return self._add_background(RepeatUntilTask(task, condition))

    def start_repeat_while(
        self, task: Callable[[], Any], condition: Callable[[], Any]
    ) -> SchedulerTask:
        _require_callable(task, "task")
        _require_callable(condition, "condition")
        return self._add_background(RepeatWhileTask(task, condition))

    def start_delay(self, task: Callable[[], Any], delay_ticks: int) -> SchedulerTask:
        _require_callable(task, "task")
        if delay_ticks < 0:
            raise ValueError("start_delay: delay ticks cannot be negative")
        return self._add_background(DelayTask(task, delay_ticks))

    def start_timeout(self, task: Callable[[], Any], timeout_ticks: int) -> SchedulerTask:
        _require_callable(task, "task")
        if timeout_ticks <= 0:
            raise ValueError("start_timeout: timeout must be positive")
        return self._add_background(TimeoutTask(task, timeout_ticks))

    def start_debounce(self, task: Callable[[], Any], debounce_ticks: int) -> SchedulerTask:
        _require_callable(task, "task")
        if debounce_ticks <= 0:
            raise ValueError("start_debounce: debounce ticks must be positive")
        return self._add_background(DebounceTask(task, debounce_ticks))

    def start_sequence(self, tasks: Iterable[Callable[[], Any]]) -> SchedulerTask:
        tasks = list(tasks)
        if not tasks:
            raise ValueError("start_sequence: no tasks provided")
        return self._add_background(SequenceTask(tasks))

    def start_retry(self, task: Callable[[], Any], max_attempts: int) -> SchedulerTask:
        _require_callable(task, "task")
        if max_attempts <= 0:
            raise ValueError("start_retry: max attempts must be positive")
        return self._add_background(RetryTask(task, max_attempts))