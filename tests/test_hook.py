import types

import pytest

from ballance_tas.hook import Hook, HookInterceptor, PreProcessHook


def make_class():
    class Worker:
        def __init__(self):
            self.calls = []

        def step(self, amount):
            self.calls.append(("step", amount))
            return ("original", amount)

    return Worker


def test_enable_routes_calls_to_detour_and_disable_restores():
    worker_cls = make_class()
    hook = Hook()
    assert hook.enable((worker_cls, "step"), lambda self, amount: ("detour", amount)) is True
    worker = worker_cls()
    assert worker.step(3) == ("detour", 3)
    assert hook.invoke_original(worker, 3) == ("original", 3)
    hook.disable()
    assert worker.step(3) == ("original", 3)
    assert hook.original is None


def test_enable_twice_fails():
    worker_cls = make_class()
    hook = Hook()
    assert hook.enable((worker_cls, "step"), lambda self, a: a)
    assert hook.enable((worker_cls, "step"), lambda self, a: a) is False


def test_enable_missing_attribute_fails():
    worker_cls = make_class()
    hook = Hook()
    assert hook.enable((worker_cls, "missing"), lambda self: None) is False
    assert hook.enabled is False


def test_invoke_original_when_disabled_raises():
    with pytest.raises(RuntimeError):
        Hook().invoke_original()


def test_hook_on_namespace_and_inherited_method_restored():
    ns = types.SimpleNamespace(func=lambda x: x + 1)
    with Hook() as hook:
        assert hook.enable((ns, "func"), lambda x: -x)
        assert ns.func(4) == -4
        assert hook.invoke_original(4) == 5
    assert ns.func(4) == 5

    base = make_class()

    class Child(base):
        pass

    inherited = Hook()
    assert inherited.enable((Child, "step"), lambda self, a: "patched")
    assert Child().step(1) == "patched"
    inherited.disable()
    assert "step" not in Child.__dict__
    assert Child().step(1) == ("original", 1)


def test_interceptor_fast_path_and_callback_order():
    ns = types.SimpleNamespace(func=lambda x: x * 10)
    hook = Hook()
    hook.enable((ns, "func"), lambda x: None)
    interceptor = HookInterceptor(hook)
    assert interceptor.invoke(2) == ns.func.__class__ and False or interceptor.invoke(2) == hook.invoke_original(2)

    order = []
    assert interceptor.add_pre_callback(lambda x: order.append(("pre1", x))) == 0
    assert interceptor.add_pre_callback(lambda x: order.append(("pre2", x))) == 1
    interceptor.insert_pre_callback(lambda x: order.append(("pre0", x)))
    assert interceptor.add_post_callback(lambda x: order.append(("post1", x))) == 0
    interceptor.insert_post_callback(lambda x: order.append(("post0", x)))

    result = interceptor.invoke(7)
    assert result == hook.invoke_original(7)
    assert order == [("pre0", 7), ("pre1", 7), ("pre2", 7), ("post0", 7), ("post1", 7)]


def test_interceptor_remove_and_clear():
    hook = Hook()
    ns = types.SimpleNamespace(func=lambda: "value")
    hook.enable((ns, "func"), lambda: None)
    interceptor = HookInterceptor(hook)
    first = lambda: None
    second = lambda: None
    interceptor.add_pre_callback(first)
    interceptor.add_pre_callback(second)
    assert interceptor.remove_pre_callback(5) is False
    assert interceptor.remove_pre_callback(0) is True
    assert interceptor.pre_callbacks == (second,)
    interceptor.add_post_callback(first)
    assert interceptor.remove_post_callback(1) is False
    assert interceptor.remove_post_callback(0) is True
    assert interceptor.post_callbacks == ()
    interceptor.add_post_callback(first)
    interceptor.clear_pre_callbacks()
    assert interceptor.pre_callbacks == ()
    assert interceptor.post_callbacks == (first,)
    interceptor.add_pre_callback(second)
    interceptor.clear_post_callbacks()
    assert interceptor.post_callbacks == ()
    interceptor.clear()
    assert interceptor.pre_callbacks == () and interceptor.post_callbacks == ()
    assert interceptor.invoke() == "value"


def make_manager_class():
    class Manager:
        def __init__(self):
            self.processed = 0

        def pre_process(self):
            self.processed += 1
            return 0

    return Manager


def test_pre_process_hook_runs_callbacks_around_original():
    manager_cls = make_manager_class()
    manager = manager_cls()
    pre_hook = PreProcessHook()
    events = []
    pre_hook.add_pre_callback(lambda m: events.append("ignored"))
    assert pre_hook.enable(manager) is True
    pre_hook.add_pre_callback(lambda m: events.append(("pre", m.processed)))
    pre_hook.add_post_callback(lambda m: events.append(("post", m.processed)))

    assert manager.pre_process() == 0
    assert events == [("pre", 0), ("post", 1)]

    pre_hook.clear_pre_callbacks()
    pre_hook.clear_post_callbacks()
    events.clear()
    manager.pre_process()
    assert events == []
    assert manager.processed == 2


def test_pre_process_hook_enables_only_once():
    manager_cls = make_manager_class()
    manager = manager_cls()
    pre_hook = PreProcessHook()
    assert pre_hook.enable(manager)
    assert pre_hook.enable(manager)
    pre_hook.disable()
    assert "pre_process" in manager_cls.__dict__
    assert pre_hook.original is None
    assert pre_hook.enable(manager) is False
    assert manager.pre_process() == 0


def test_pre_process_hook_fails_without_method():
    class Plain:
        pass

    pre_hook = PreProcessHook()
    assert pre_hook.enable(Plain()) is False