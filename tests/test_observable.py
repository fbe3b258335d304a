"""Tests for Observable — ordered, non-owning listener lists."""

import gc

import pytest

from widgetdef import Observable, add_listener, notify


class _Recorder:
    def __init__(self, log, label):
        self.log = log
        self.label = label

    def on_notify(self, subject):
        self.log.append((self.label, subject))


class TestObservable:
    def test_notifies_in_addition_order(self):
        subject = Observable()
        log = []
        a = _Recorder(log, "a")
        b = _Recorder(log, "b")
        subject.add_listener(b.on_notify)
        subject.add_listener(a.on_notify)
        subject.notify()
        assert log == [("b", subject), ("a", subject)]

    def test_module_functions_delegate(self):
        subject = Observable()
        log = []
        r = _Recorder(log, "r")
        add_listener(subject, r.on_notify)
        notify(subject)
        assert log == [("r", subject)]

    def test_plain_function_listener(self):
        subject = Observable()
        seen = []

        def listener(s):
            seen.append(s)

        subject.add_listener(listener)
        subject.notify()
        assert seen == [subject]

    def test_notify_leaves_listeners_in_place(self):
        subject = Observable()
        log = []
        r = _Recorder(log, "r")
        subject.add_listener(r.on_notify)
        subject.notify()
        subject.notify()
        assert len(log) == 2
        assert subject.listeners == [r.on_notify]

    def test_does_not_own_listeners(self):
        subject = Observable()
        log = []
        r = _Recorder(log, "r")
        subject.add_listener(r.on_notify)
        del r
        gc.collect()
        subject.notify()
        assert log == []
        assert subject.listeners == []

    def test_remove_listener(self):
        subject = Observable()
        log = []
        a = _Recorder(log, "a")
        b = _Recorder(log, "b")
        subject.add_listener(a.on_notify)
        subject.add_listener(b.on_notify)
        subject.remove_listener(a.on_notify)
        subject.remove_listener(a.on_notify)  # unknown now, ignored
        subject.notify()
        assert log == [("b", subject)]

    def test_listener_added_during_notify_waits_for_next_round(self):
        subject = Observable()
        log = []
        late = _Recorder(log, "late")

        def first(s):
            log.append(("first", s))
            s.add_listener(late.on_notify)

        subject.add_listener(first)
        subject.notify()
        assert log == [("first", subject)]

    def test_listener_errors_propagate(self):
        subject = Observable()

        def boom(s):
            raise RuntimeError("boom")

        subject.add_listener(boom)
        with pytest.raises(RuntimeError, match="boom"):
            subject.notify()

    def test_rejects_unreferenceable_listener(self):
        subject = Observable()
        with pytest.raises(TypeError, match="weakly referenced"):
            subject.add_listener([].append)

    def test_builtin_bound_method_listener(self):
        class Bag(list):
            pass

        subject = Observable()
        bag = Bag()
        subject.add_listener(bag.append)
        subject.notify()
        assert bag == [subject]
        assert subject.listeners == [bag.append]
        subject.remove_listener(bag.append)
        subject.notify()
        assert bag == [subject]

    def test_builtin_bound_method_does_not_keep_owner_alive(self):
        class Bag(list):
            pass

        subject = Observable()
        bag = Bag()
        subject.add_listener(bag.append)
        del bag
        gc.collect()
        subject.notify()
        assert subject.listeners == []
