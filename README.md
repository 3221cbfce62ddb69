# ballance_tas

This is the scripting core of a tool-assisted speedrun (TAS) system. It
advances one game tick at a time. Scripts are Python generators. The package
has no third-party dependencies.

## Modules

- `ballance_tas.scheduler.Scheduler` runs script coroutines and background
  jobs.
  - A coroutine waits by calling one of these methods and yielding what it
    returns: `yield_ticks`, `yield_until`, `yield_wait_for_event`,
    `yield_coroutines` or `yield_race`.
  - The background jobs are `start_repeat_for`, `start_repeat_until`,
    `start_repeat_while`, `start_delay`, `start_timeout`, `start_debounce`,
    `start_sequence` and `start_retry`.
  - Errors raised inside a coroutine are logged and do not stop the
    scheduler. Invalid arguments raise `ValueError`.
  - A wait called outside a coroutine raises `RuntimeError`.
- `ballance_tas.tasks` holds the `Coroutine` wrapper and the `CallStatus`
  enum. It also holds the conditions that are polled once per tick:
  `ImmediateTask`, `TickWaitTask`, `PredicateWaitTask`, `CoroutineWaitTask`,
  `RaceTask`, `ParallelTask`, `RepeatForTicksTask`, `RepeatUntilTask`,
  `RepeatWhileTask`, `DelayTask`, `TimeoutTask`, `SequenceTask`, `RetryTask`,
  `EventWaitTask` and `DebounceTask`.
- `ballance_tas.hook` has three classes:
  - `Hook` replaces a callable attribute of an object or class with a detour
    and can call the original.
  - `HookInterceptor` runs ordered pre- and post-callbacks around the
    original.
  - `PreProcessHook` installs the hook once, on the class of a manager
    object.
- `ballance_tas.formatting` has two functions:
  - `format_string` formats messages with `{}` placeholders. When formatting
    fails, it returns the failure inside the text instead of raising.
  - `describe_value` shows values the way scripts expect: `nil`, `true`,
    `false`, `<table>`, `<userdata>` and so on.
- `ballance_tas.api_concurrency` holds the wait, coordination and event
  functions a script calls:
  - `ConcurrencyApi`, with `wait_ticks`, `wait`, `parallel`, `race`, `spawn`,
    `repeat_ticks`, `delay` and others.
  - `EventApi`, with `on`, `once`, `send`, `clear_listeners` and others.
- `ballance_tas.api_core` holds the functions for logging, input, world
  queries and debugging:
  - `TasApi`, with `log`, `print`, `press`, `hold`, `get_ball_position`,
    `assert_`, `skip_rendering` and others.
  - `RecordApi`, which controls playback and is available as `TasApi.record`.

## Installation

```
pip install .
```

## Examples

```python
from ballance_tas.formatting import format_string

format_string("tick {} of {}", 3, 10)   # 'tick 3 of 10'
format_string("flag: {}", True)         # 'flag: true'
format_string("value: {}", None)        # 'value: nil'
```

```python
from ballance_tas.scheduler import Scheduler

scheduler = Scheduler()
events = []

def script():
    events.append("start")
    yield scheduler.yield_ticks(2)
    events.append("done")

scheduler.start_coroutine(script)   # runs until the first wait
scheduler.tick()
scheduler.tick()                    # events == ["start", "done"]
```

Call `Scheduler.tick()` once per game frame. Each call does two things:

- It resumes every coroutine whose wait condition is met.
- It advances every background task.

## What the package does not include

The package has no connection to a running game and no script interpreter. It
does not provide any of these:

- an input system
- a game-state interface
- an event manager
- a record-file player
- a project manager

`TasApi`, `RecordApi`, `EventApi` and `Scheduler` take these collaborators as
duck-typed objects supplied by the caller. The docstrings list the methods each
one is expected to provide.

## Running the tests

```
pip install .[test]
pytest
```