"""Function hooks with ordered pre- and post-call interception."""

from __future__ import annotations

import threading
from typing import Any, Callable

Callback = Callable[..., Any]

_MISSING = object()


class Hook:
    """Replaces a callable attribute of an object with a detour.

    The target is given as an ``(owner, attribute_name)`` pair. The owner may
    be a class (every instance is then affected, and the detour receives the
    instance first), a module or any object whose attributes can be set.
    """

    def __init__(self) -> None:
        self._owner: Any = None
        self._name: str | None = None
        self._saved: Any = _MISSING
        self._detour: Callback | None = None
        self._original: Callback | None = None

    @property
    def original(self) -> Callback | None:
        """The callable that was in place before the hook, or None."""
        return self._original

    @property
    def detour(self) -> Callback | None:
        return self._detour

    @property
    def enabled(self) -> bool:
        return self._original is not None

    def enable(self, target: tuple[Any, str], detour: Callback) -> bool:
        """Install ``detour`` over ``target``; False if already hooked or not hookable."""
        if self._original is not None:
            return False
        try:
            owner, name = target
        except (TypeError, ValueError):
            return False
        if not isinstance(name, str):
            return False

        original = getattr(owner, name, _MISSING)
        if original is _MISSING or not callable(original):
            return False

        saved = getattr(owner, "__dict__", {}).get(name, _MISSING)
        try:
            setattr(owner, name, detour)
        except (AttributeError, TypeError):
            return False

        self._owner = owner
        self._name = name
        self._saved = saved
        self._detour = detour
        self._original = original
        return True

    def disable(self) -> None:
        """Restore the original attribute if the hook is installed."""
        if self._owner is None:
            return
        try:
            if self._saved is _MISSING:
                delattr(self._owner, self._name)
            else:
                setattr(self._owner, self._name, self._saved)
        except (AttributeError, TypeError):
            pass
        self._owner = None
        self._name = None
        self._saved = _MISSING
        self._detour = None
        self._original = None

    def invoke_original(self, *args: Any, **kwargs: Any) -> Any:
        """Call the unhooked callable."""
        if self._original is None:
            raise RuntimeError("hook is not enabled")
        return self._original(*args, **kwargs)

    def __enter__(self) -> Hook:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.disable()


class HookInterceptor:
    """Runs ordered callbacks around the original callable of a hook."""

    def __init__(self, hook: Hook) -> None:
        self._hook = hook
        self._pre_callbacks: list[Callback] = []
        self._post_callbacks: list[Callback] = []

    @property
    def pre_callbacks(self) -> tuple[Callback, ...]:
        return tuple(self._pre_callbacks)

    @property
    def post_callbacks(self) -> tuple[Callback, ...]:
        return tuple(self._post_callbacks)

    def invoke(self, *args: Any, **kwargs: Any) -> Any:
        """Run pre-callbacks, the original, then post-callbacks; return the original's result."""
        if not self._pre_callbacks and not self._post_callbacks:
            return self._hook.invoke_original(*args, **kwargs)

        for callback in self._pre_callbacks:
            callback(*args, **kwargs)
        result = self._hook.invoke_original(*args, **kwargs)
        for callback in self._post_callbacks:
            callback(*args, **kwargs)
        return result

    def add_pre_callback(self, callback: Callback) -> int:
        self._pre_callbacks.append(callback)
        return len(self._pre_callbacks) - 1

    def add_post_callback(self, callback: Callback) -> int:
        self._post_callbacks.append(callback)
        return len(self._post_callbacks) - 1

    def insert_pre_callback(self, callback: Callback) -> None:
        self._pre_callbacks.insert(0, callback)

    def insert_post_callback(self, callback: Callback) -> None:
        self._post_callbacks.insert(0, callback)

    def remove_pre_callback(self, index: int) -> bool:
        if 0 <= index < len(self._pre_callbacks):
            del self._pre_callbacks[index]
            return True
        return False

    def remove_post_callback(self, index: int) -> bool:
        if 0 <= index < len(self._post_callbacks):
            del self._post_callbacks[index]
            return True
        return False

    def clear_pre_callbacks(self) -> None:
        self._pre_callbacks.clear()

    def clear_post_callbacks(self) -> None:
        self._post_callbacks.clear()

    def clear(self) -> None:
        self._pre_callbacks.clear()
        self._post_callbacks.clear()


class PreProcessHook:
    """Hooks the per-frame method of a manager's class, at most once.

    The first call to :meth:`enable` installs the hook on the class of the
    given manager; later calls only report whether the hook is in place.
    """

    def __init__(self, method_name: str = "pre_process") -> None:
        self.method_name = method_name
        self._hook = Hook()
        self._interceptor: HookInterceptor | None = None
        self._lock = threading.Lock()
        self._attempted = False

    @property
    def original(self) -> Callback | None:
        return self._hook.original

    def enable(self, manager: Any) -> bool:
        with self._lock:
            if not self._attempted:
                self._attempted = True
                if self._hook.enable((type(manager), self.method_name), self._make_detour()):
                    self._interceptor = HookInterceptor(self._hook)
        return self._hook.original is not None

    def disable(self) -> None:
        if self._hook.original is not None:
            self._hook.disable()
            self._interceptor = None

    def add_pre_callback(self, callback: Callback) -> None:
        if self._interceptor is not None:
            self._interceptor.add_pre_callback(callback)

    def add_post_callback(self, callback: Callback) -> None:
        if self._interceptor is not None:
            self._interceptor.add_post_callback(callback)

    def clear_pre_callbacks(self) -> None:
        if self._interceptor is not None:
            self._interceptor.clear_pre_callbacks()

    def clear_post_callbacks(self) -> None:
        if self._interceptor is not None:
            self._interceptor.clear_post_callbacks()

    def _make_detour(self) -> Callback:
        owner = self

        def detour(instance: Any, *args: Any, **kwargs: Any) -> Any:
            interceptor = owner._interceptor
            if interceptor is not None:
                return interceptor.invoke(instance, *args, **kwargs)
            return owner._hook.invoke_original(instance, *args, **kwargs)

        return detour