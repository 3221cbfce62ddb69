import pytest

from ballance_tas.tasks import (
    CallStatus,
    Coroutine,
    CoroutineWaitTask,
    DebounceTask,
    DelayTask,
    EventWaitTask,
    ImmediateTask,
    ParallelTask,
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


def poll(task, times):
    return [task.is_complete() for _ in range(times)]


class Counter:
    def __init__(self, result=None, error=None):
        self.calls = 0
        self.result = result
        self.error = error

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def steps(n):
    for i in range(n):
        yield i
    return "finished"


def _yield_then_fail():
    yield
    raise ValueError("boom")


# Coroutine

def test_fresh_coroutine_is_resumable():
    co = Coroutine(lambda: steps(1))
    assert co.status is CallStatus.YIELDED
    assert co.done is False


def test_coroutine_from_generator_function_runs_to_end():
    co = Coroutine(lambda: steps(2))
    assert co.resume() == 0
    assert co.resume() == 1
    assert co.status is CallStatus.YIELDED
    assert co.resume() == "finished"
    assert co.status is CallStatus.OK
    assert co.result == "finished"


def test_coroutine_from_generator_object():
    co = Coroutine(steps(1))
    assert co.resume() == 0
    co.resume()
    assert co.done is True


def test_coroutine_from_plain_function_finishes_at_once():
    co = Coroutine(lambda: 42)
    assert co.resume() == 42
    assert co.status is CallStatus.OK


def test_dead_coroutine_cannot_be_resumed():
    co = Coroutine(lambda: None)
    co.resume()
    with pytest.raises(RuntimeError):
        co.resume()


def test_coroutine_error_sets_runtime_status():
    co = Coroutine(_yield_then_fail)
    co.resume()
    with pytest.raises(ValueError):
        co.resume()
    assert co.status is CallStatus.RUNTIME
    assert isinstance(co.error, ValueError)


def test_coroutine_rejects_non_callable():
    with pytest.raises(TypeError):
        Coroutine(5)


def test_scheduler_task_is_abstract():
    with pytest.raises(TypeError):
        SchedulerTask()


# Waiting tasks

def test_immediate_task():
    assert ImmediateTask().is_complete() is True


def test_tick_wait_task_completes_after_ticks():
    assert poll(TickWaitTask(3), 3) == [False, False, True]


def test_tick_wait_task_zero_completes_immediately():
    assert TickWaitTask(0).is_complete() is True


def test_predicate_wait_task():
    state = {"ready": False}
    task = PredicateWaitTask(lambda: state["ready"])
    assert task.is_complete() is False
    state["ready"] = True
    assert task.is_complete() is True


def test_predicate_wait_task_completes_on_error_and_none():
    assert PredicateWaitTask(Counter(error=RuntimeError())).is_complete() is True
    assert PredicateWaitTask(None).is_complete() is True


def test_coroutine_wait_task_waits_for_all():
    a = Coroutine(lambda: steps(1))
    b = Coroutine(lambda: steps(2))
    task = CoroutineWaitTask([a, b, None])
    a.resume()
    a.resume()
    assert task.is_complete() is False
    b.resume()
    b.resume()
    b.resume()
    assert task.is_complete() is True


def test_parallel_task_waits_for_all():
    a = Coroutine(lambda: None)
    b = Coroutine(lambda: None)
    task = ParallelTask([a, b])
    a.resume()
    assert task.is_complete() is False
    b.resume()
    assert task.is_complete() is True


def test_race_task_completes_on_first_and_stays_complete():
    a = Coroutine(lambda: steps(5))
    b = Coroutine(lambda: None)
    task = RaceTask([a, b])
    assert task.is_complete() is False
    b.resume()
    assert task.is_complete() is True
    assert task.is_complete() is True


def test_race_task_treats_missing_coroutine_as_done():
    assert RaceTask([Coroutine(lambda: None), None]).is_complete() is True


# Repeating tasks

def test_repeat_for_ticks():
    counter = Counter()
    task = RepeatForTicksTask(counter, 2)
    assert poll(task, 3) == [False, True, True]
    assert counter.calls == 2


def test_repeat_for_ticks_swallows_errors():
    counter = Counter(error=RuntimeError())
    task = RepeatForTicksTask(counter, 2)
    assert poll(task, 2) == [False, True]
    assert counter.calls == 2


def test_repeat_until_checks_condition_first():
    counter = Counter()
    state = {"stop": False}
    task = RepeatUntilTask(counter, lambda: state["stop"])
    assert poll(task, 2) == [False, False]
    state["stop"] = True
    assert task.is_complete() is True
    assert counter.calls == 2


def test_repeat_until_completes_on_condition_error():
    counter = Counter()
    task = RepeatUntilTask(counter, Counter(error=RuntimeError()))
    assert task.is_complete() is True
    assert counter.calls == 0


def test_repeat_while():
    counter = Counter()
    state = {"go": True}
    task = RepeatWhileTask(counter, lambda: state["go"])
    assert task.is_complete() is False
    state["go"] = False
    assert task.is_complete() is True
    assert counter.calls == 1


def test_repeat_while_without_condition_runs_forever():
    counter = Counter()
    task = RepeatWhileTask(counter, None)
    assert poll(task, 4) == [False] * 4
    assert counter.calls == 4


# Timing tasks

def test_delay_task_runs_once_after_delay():
    counter = Counter()
    task = DelayTask(counter, 2)
    assert poll(task, 4) == [False, False, True, True]
    assert counter.calls == 1


def test_delay_zero_runs_at_once():
    counter = Counter()
    assert DelayTask(counter, 0).is_complete() is True
    assert counter.calls == 1


def test_timeout_task_times_out():
    counter = Counter(result=False)
    task = TimeoutTask(counter, 2)
    assert poll(task, 3) == [False, False, True]
    assert counter.calls == 2


def test_timeout_task_completes_when_task_succeeds():
    counter = Counter(result=True)
    task = TimeoutTask(counter, 5)
    assert poll(task, 2) == [True, True]
    assert counter.calls == 1


def test_timeout_task_completes_on_error():
    assert TimeoutTask(Counter(error=RuntimeError()), 5).is_complete() is True


def test_debounce_task_and_reset():
    counter = Counter()
    task = DebounceTask(counter, 2)
    assert poll(task, 3) == [False, True, True]
    assert counter.calls == 1
    task.reset()
    assert poll(task, 2) == [False, True]
    assert counter.calls == 2


# Control flow tasks

def test_sequence_runs_one_task_per_tick():
    order = []
    task = SequenceTask([lambda: order.append("a"), lambda: order.append("b")])
    assert task.is_complete() is False
    assert order == ["a"]
    assert task.is_complete() is True
    assert order == ["a", "b"]
    assert task.is_complete() is True
    assert order == ["a", "b"]


def test_sequence_continues_after_error():
    second = Counter()
    task = SequenceTask([Counter(error=RuntimeError()), second])
    assert poll(task, 2) == [False, True]
    assert second.calls == 1


def test_empty_sequence_is_complete():
    assert SequenceTask([]).is_complete() is True


def test_retry_stops_on_success():
    results = iter([False, True])
    task = RetryTask(lambda: next(results), 5)
    assert poll(task, 2) == [False, True]
    assert task.attempts == 2


def test_retry_gives_up_after_max_attempts():
    counter = Counter(error=RuntimeError())
    task = RetryTask(counter, 3)
    assert poll(task, 4) == [False, False, True, True]
    assert counter.calls == 3


# Event task

class FakeEvents:
    def __init__(self):
        self.listeners = {}

    def register_listener(self, name, callback):
        self.listeners.setdefault(name, []).append(callback)

    def fire(self, name, *args):
        for callback in self.listeners.get(name, []):
            callback(*args)


def test_event_wait_task_completes_after_event():
    events = FakeEvents()
    task = EventWaitTask("finish", events)
    assert task.is_complete() is False
    events.fire("other")
    assert task.is_complete() is False
    events.fire("finish", 1, 2)
    assert task.is_complete() is True
    assert task.received is True


def test_event_wait_task_without_manager_never_completes():
    task = EventWaitTask("finish")
    assert poll(task, 3) == [False, False, False]