"""Shared fixtures. The data directory is redirected before desk_core is imported."""

import os
import tempfile
import tkinter

os.environ["EVENTDESK_HOME"] = tempfile.mkdtemp(prefix="eventdesk-test-")

import pytest  # noqa: E402

from desk_core.errors import AssetError  # noqa: E402
from desk_core.state import Snapshot  # noqa: E402
from desk_core.store import KeyValueStore  # noqa: E402


@pytest.fixture
def store(tmp_path):
    return KeyValueStore(tmp_path / "state.db")


def make_snapshot(total=0, identifier="MH26000001", amount=0, today=0, month=0):
    return Snapshot(total_count=total, identifier=identifier, today_count=today,
                    period_count=month, total_amount=amount)


class FakeSource:
    """Returns queued snapshots or raises queued exceptions, in order."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def fetch(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return result


class RecordingSurface:
    """Surface that records announcements; optionally fails on the rich path."""

    def __init__(self, fail_with=None):
        self.fail_with = fail_with
        self.announced = []
        self.text_only = []

    def announce(self, threshold):
        if self.fail_with is not None:
            raise self.fail_with
        self.announced.append(threshold)

    def announce_text(self, threshold):
        self.text_only.append(threshold)


class FakeAfter:
    """Stand-in for Tk's after/after_cancel. run_next() fires the earliest job."""

    def __init__(self):
        self.jobs = {}
        self._next_id = 0

    def after(self, ms, callback):
        self._next_id += 1
        handle = f"after#{self._next_id}"
        self.jobs[handle] = (ms, callback)
        return handle

    def after_cancel(self, handle):
        self.jobs.pop(handle, None)

    @property
    def pending(self):
        return sorted(ms for ms, _ in self.jobs.values())

    def run_next(self):
        handle = min(self.jobs, key=lambda h: (self.jobs[h][0], int(h.split("#")[1])))
        _, callback = self.jobs.pop(handle)
        callback()


@pytest.fixture
def missing_asset():
    return AssetError("milestone.gif not found")


class FakeWidget:
    """
    Records what surface code does to a widget. after()/after_cancel() go to
    the FakeAfter inherited from the master, so timers run under test control.
    Any other widget method is accepted and recorded in `calls`.
    """

    def __init__(self, kind, master=None, scheduler=None, **options):
        self.kind = kind
        self.master = master
        self.scheduler = scheduler or getattr(master, "scheduler", None)
        self.options = dict(options)
        self.children = []
        self.bindings = {}
        self.calls = []
        self.destroyed = False
        if isinstance(master, FakeWidget):
            master.children.append(self)

    def __getattr__(self, name):
        if name.startswith("__"):
            raise AttributeError(name)

        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
        return record

    def called(self, name):
        return [call for call in self.calls if call[0] == name]

    def bind(self, sequence, func):
        self.bindings[sequence] = func

    def configure(self, **options):
        self.options.update(options)

    config = configure

    def winfo_children(self):
        return list(self.children)

    def winfo_screenwidth(self):
        return 1920

    def winfo_screenheight(self):
        return 1080

    def after(self, ms, callback):
        return self.scheduler.after(ms, callback)

    def after_cancel(self, handle):
        self.scheduler.after_cancel(handle)

    def destroy(self):
        self.destroyed = True

    def click(self):
        self.bindings["<Button-1>"](None)


class FakeTk:
    """Drop-in for the `tk` module name inside a surface module."""

    TclError = tkinter.TclError

    def __init__(self):
        self.widgets = []

    def _make(self, kind, master=None, **options):
        widget = FakeWidget(kind, master, **options)
        self.widgets.append(widget)
        return widget

    def Frame(self, master=None, **options):
        return self._make("Frame", master, **options)

    def Label(self, master=None, **options):
        return self._make("Label", master, **options)

    def Toplevel(self, master=None, **options):
        return self._make("Toplevel", master, **options)

    def of_kind(self, kind):
        return [w for w in self.widgets if w.kind == kind]


@pytest.fixture
def fake_tk():
    return FakeTk()


@pytest.fixture
def tk_after():
    return FakeAfter()


@pytest.fixture
def tk_root(tk_after):
    return FakeWidget("Tk", scheduler=tk_after)
