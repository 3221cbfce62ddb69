"""Coroutines and the completion conditions a scheduler waits on."""

from __future__ import annotations

import enum
import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from typing import Any


class CallStatus(enum.Enum):
    """State of a coroutine after its last resume."""

    OK = "ok"
    YIELDED = "yielded"
    RUNTIME = "runtime"


class Coroutine:
    """A resumable script task built from a generator or a callable.

    A callable is invoked on the first resume; if it returns a generator,
    that generator is stepped from then on. A fresh coroutine reports
    :attr:`CallStatus.YIELDED` so that it can be resumed.
    """

    def __init__(self, target: Any) -> None:
        if inspect.isgenerator(target):
            self._factory: Callable[[], Any] | None = None
            self._generator: Any = target
        elif callable(target):
            self._factory = target
            self._generator = None
        else:
            raise TypeError("coroutine target must be a callable or a generator")
        self._status = CallStatus.YIELDED
        self._running = False
        self._result: Any = None
        self._error: BaseException | None = None

    @property
    def status(self) -> CallStatus:
        return self._status

    @property
    def running(self) -> bool:
        return self._running

    @property
    def done(self) -> bool:
        return self._status is not CallStatus.YIELDED

    @property
    def result(self) -> Any:
        """The value returned when the coroutine finished, else None."""
        return self._result

    @property
    def error(self) -> BaseException | None:
        """The exception that ended the coroutine, if any."""
        return self._error

    def resume(self) -> Any:
        """Run until the next yield or the end; return the yielded or returned value.

        An exception raised inside the coroutine ends it with
        :attr:`CallStatus.RUNTIME` and propagates to the caller.
        """
        if self._status is not CallStatus.YIELDED:
            raise RuntimeError("cannot resume dead coroutine")
        if self._running:
            raise RuntimeError("cannot resume non-suspended coroutine")
        self._running = True
        try:
            if self._generator is None:
                factory, self._factory = self._factory, None
                produced = factory()
                if not inspect.isgenerator(produced):
                    self._finish(produced)
                    return produced
                self._generator = produced
            value = next(self._generator)
        except StopIteration as stop:
            self._finish(stop.value)
            return stop.value
        except Exception as exc:
            self._status = CallStatus.RUNTIME
            self._error = exc
            raise
        finally:
            self._running = False
        return value

    def _finish(self, value: Any) -> None:
        self._status = CallStatus.OK
        self._result = value

    def __repr__(self) -> str:
        return f"Coroutine(status={self._status.value})"


def _is_running(coroutine: Coroutine | None) -> bool:
    return coroutine is not None and coroutine.status is CallStatus.YIELDED


class SchedulerTask(ABC):
    """A condition polled once per tick until it reports completion."""

    @abstractmethod
    def is_complete(self) -> bool:
        """Advance the task by one tick and tell whether it is done."""


class ImmediateTask(SchedulerTask):
    """Complete at the first poll."""

    def is_complete(self) -> bool:
        return True


class TickWaitTask(SchedulerTask):
    """Complete after a number of ticks."""

    def __init__(self, ticks: int) -> None:
        self._remaining = ticks

    def is_complete(self) -> bool:
        self._remaining -= 1
        return self._remaining <= 0


class PredicateWaitTask(SchedulerTask):
    """Complete once the predicate returns a true value, or raises."""

    def __init__(self, predicate: Callable[[], Any] | None) -> None:
        self._predicate = predicate

    def is_complete(self) -> bool:
        if self._predicate is None:
            return True
        try:
            return bool(self._predicate())
        except Exception:
            return True


class CoroutineWaitTask(SchedulerTask):
    """Complete once none of the coroutines is still suspended."""

    def __init__(self, coroutines: Iterable[Coroutine | None]) -> None:
        self._coroutines = list(coroutines)

    def is_complete(self) -> bool:
        return not any(_is_running(co) for co in self._coroutines)


class RaceTask(SchedulerTask):
    """Complete once any of the coroutines has finished."""

    def __init__(self, coroutines: Iterable[Coroutine | None]) -> None:
        self._coroutines = list(coroutines)
        self._some_completed = False

    def is_complete(self) -> bool:
        if self._some_completed:
            return True
        if any(not _is_running(co) for co in self._coroutines):
            self._some_completed = True
            return True
        return False


class _RepeatTask(SchedulerTask):
    def __init__(self, task: Callable[[], Any] | None) -> None:
        self._task = task
        self._should_stop = False

    def _execute_task(self) -> None:
        if self._task is not None:
            try:
                self._task()
            except Exception:
                pass


class RepeatForTicksTask(_RepeatTask):
    """Run the task once per tick for a number of ticks."""

    def __init__(self, task: Callable[[], Any] | None, ticks: int) -> None:
        super().__init__(task)
        self._remaining = ticks

    def is_complete(self) -> bool:
        if self._should_stop or self._remaining <= 0:
            return True
        self._execute_task()
        self._remaining -= 1
        return self._remaining <= 0


class RepeatUntilTask(_RepeatTask):
    """Run the task each tick until the condition holds."""

    def __init__(
        self, task: Callable[[], Any] | None, condition: Callable[[], Any] | None
    ) -> None:
        super().__init__(task)
        self._condition = condition

    def is_complete(self) -> bool:
        if self._should_stop:
            return True
        condition_met = False
        if self._condition is not None:
            try:
                condition_met = bool(self._condition())
            except Exception:
                return True
        if condition_met:
            return True
        self._execute_task()
        return False


class RepeatWhileTask(_RepeatTask):
    """Run the task each tick while the condition holds."""

    def __init__(
        self, task: Callable[[], Any] | None, condition: Callable[[], Any] | None
    ) -> None:
        super().__init__(task)
        self._condition = condition

    def is_complete(self) -> bool:
        if self._should_stop:
            return True
        condition_met = True
        if self._condition is not None:
            try:
                condition_met = bool(self._condition())
            except Exception:
                return True
        if not condition_met:
            return True
        self._execute_task()
        return False


class DelayTask(SchedulerTask):
    """Run the task once after waiting a number of ticks."""

    def __init__(self, task: Callable[[], Any] | None, delay_ticks: int) -> None:
        self._task = task
        self._delay = delay_ticks
        self._executed = False

    def is_complete(self) -> bool:
        if self._delay > 0:
            self._delay -= 1
            return False
        if not self._executed:
            if self._task is not None:
                try:
                    self._task()
                except Exception:
                    pass
            self._executed = True
        return True


class TimeoutTask(SchedulerTask):
    """Poll the task each tick until it returns true or the time runs out."""

    def __init__(self, task: Callable[[], Any] | None, timeout_ticks: int) -> None:
        self._task = task
        self._timeout = timeout_ticks
        self._task_complete = False

    def is_complete(self) -> bool:
        if self._task_complete:
            return True
        if self._timeout <= 0:
            return True
        self._timeout -= 1
        if self._task is not None:
            try:
                if self._task():
                    self._task_complete = True
                    return True
            except Exception:
                return True
        return False


class SequenceTask(SchedulerTask):
    """Run one task per tick, in order."""

    def __init__(self, tasks: Sequence[Callable[[], Any] | None]) -> None:
        self._pending = iter(list(tasks))
        self._remaining = len(tasks)

    def is_complete(self) -> bool:
        if self._remaining <= 0:
            return True
        task = next(self._pending)
        if task is not None:
            try:
                task()
            except Exception:
                pass
        self._remaining -= 1
        return self._remaining <= 0


class ParallelTask(SchedulerTask):
    """Complete once every coroutine has finished."""

    def __init__(self, coroutines: Iterable[Coroutine | None]) -> None:
        self._coroutines = list(coroutines)

    def is_complete(self) -> bool:
        return not any(_is_running(co) for co in self._coroutines)


class RetryTask(SchedulerTask):
    """Call the task once per tick until it returns true or attempts run out."""

    def __init__(self, task: Callable[[], Any] | None, max_attempts: int) -> None:
        self._task = task
        self._max_attempts = max_attempts
        self._attempt = 0

    @property
    def attempts(self) -> int:
        return self._attempt

    def is_complete(self) -> bool:
        if self._attempt >= self._max_attempts:
            return True
        self._attempt += 1
        if self._task is not None:
            try:
                if self._task():
                    return True
            except Exception:
                pass
        return self._attempt >= self._max_attempts


class EventWaitTask(SchedulerTask):
    """Complete once the named event has been fired.

    The task registers itself through ``event_manager.register_listener``
    when one is given.
    """

    def __init__(self, event_name: str, event_manager: Any = None) -> None:
        self.event_name = event_name
        self._received = False
        if event_manager is not None:
            event_manager.register_listener(event_name, self._on_event)

    @property
    def received(self) -> bool:
        return self._received

    def _on_event(self, *args: Any, **kwargs: Any) -> None:
        self._received = True

    def is_complete(self) -> bool:
        return self._received


class DebounceTask(SchedulerTask):
    """Run the task once after a quiet period; :meth:`reset` restarts it."""

    def __init__(self, task: Callable[[], Any] | None, debounce_ticks: int) -> None:
        self._task = task
        self._debounce_ticks = debounce_ticks
        self._remaining = debounce_ticks
        self._executed = False

    def is_complete(self) -> bool:
        if self._executed:
            return True
        self._remaining -= 1
        if self._remaining <= 0:
            if self._task is not None:
                try:
                    self._task()
                except Exception:
                    pass
            self._executed = True
            return True
        return False

    def reset(self) -> None:
        self._remaining = self._debounce_ticks
        self._executed = False