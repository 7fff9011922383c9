import threading
import time
from datetime import datetime

from musing_cli.dashboard import MonitorApp
from musing_cli.registry import Category, ProbeTarget
from musing_cli.state import Phase, Tick

from conftest import make_snapshot

TARGETS = [
    ProbeTarget("Docker Desktop", 0, Category.INFRA),
    ProbeTarget("DB", 27018, Category.DATABASE),
    ProbeTarget("svc1", 8081, Category.API),
]


def scripted_builder(snapshot):
    calls = []

    def build(targets):
        calls.append(tuple(targets))
        return snapshot

    return build, calls


async def wait_for_snapshot(app, pilot, limit=2.0):
    deadline = time.monotonic() + limit
    while app.state.snapshot is None and time.monotonic() < deadline:
        await pilot.pause(0.05)


async def test_first_snapshot_is_rendered_without_waiting_for_a_tick():
    snap = make_snapshot(
        ("Docker Desktop", 0, Category.INFRA, False, 0.0),
        ("DB", 27018, Category.DATABASE, True, 1.2),
        ("svc1", 8081, Category.API, False, 0.0),
    )
    build, calls = scripted_builder(snap)
    app = MonitorApp(TARGETS, build=build)
    async with app.run_test() as pilot:
        await wait_for_snapshot(app, pilot)
        assert len(calls) == 1
        assert calls[0] == tuple(TARGETS)
        assert app.state.snapshot is snap
        assert app.state.refreshing is False
        frame = app.last_frame.plain
        assert "Infrastructure" in frame
        assert "Database" in frame
        assert "Application Services (1)" in frame
        assert "Frontend" not in frame
        assert "[1.2ms]" in frame
        await pilot.press("q")
    assert app.state.phase is Phase.EXITING


async def test_quit_before_first_snapshot_exits_cleanly():
    release = threading.Event()

    def blocking_build(targets):
        release.wait(2)
        return make_snapshot()

    app = MonitorApp(TARGETS, build=blocking_build)
    try:
        async with app.run_test() as pilot:
            assert app.state.refreshing is True
            assert app.state.snapshot is None
            assert "Waiting" in app.last_frame.plain
            await pilot.press("q")
            await pilot.pause()
        assert app.state.phase is Phase.EXITING
        assert app.state.snapshot is None
    finally:
        release.set()


async def test_escape_quits():
    build, _ = scripted_builder(make_snapshot())
    app = MonitorApp(TARGETS, build=build)
    async with app.run_test() as pilot:
        await pilot.press("escape")
        await pilot.pause()
    assert app.state.phase is Phase.EXITING


async def test_tick_during_refresh_does_not_start_another_sweep():
    release = threading.Event()
    calls = []

    def blocking_build(targets):
        calls.append(1)
        release.wait(2)
        return make_snapshot()

    app = MonitorApp(TARGETS, build=blocking_build)
    try:
        async with app.run_test() as pilot:
            app.feed_event(Tick(datetime.now()))
            app.feed_event(Tick(datetime.now()))
            await pilot.pause()
            assert len(calls) == 1
            release.set()
            await wait_for_snapshot(app, pilot)
            assert app.state.refreshing is False
            await pilot.press("q")
    finally:
        release.set()


async def test_resize_updates_dimensions_and_keeps_snapshot():
    snap = make_snapshot(("DB", 27018, Category.DATABASE, True, 1.0))
    build, _ = scripted_builder(snap)
    app = MonitorApp(TARGETS, build=build)
    async with app.run_test(size=(100, 30)) as pilot:
        await wait_for_snapshot(app, pilot)
        await pilot.resize_terminal(120, 40)
        await pilot.pause()
        assert (app.state.width, app.state.height) == (120, 40)
        assert app.state.snapshot is snap
        await pilot.press("q")


async def test_spinner_turns_while_sweep_is_slow():
    release = threading.Event()

    def blocking_build(targets):
        release.wait(2)
        return make_snapshot()

    app = MonitorApp(TARGETS, build=blocking_build)
    try:
        async with app.run_test() as pilot:
            await pilot.pause(0.5)
            assert app.state.refreshing is True
            assert app.state.spinner_phase >= 2
            release.set()
            await wait_for_snapshot(app, pilot)
            settled = app.state.spinner_phase
            await pilot.pause(0.3)
            assert app.state.spinner_phase == settled
            await pilot.press("q")
    finally:
        release.set()


def test_quit_does_not_wait_for_slow_sweep():
    release = threading.Event()

    def slow_build(targets):
        release.wait(5)
        return make_snapshot()

    async def quit_soon(pilot):
        await pilot.pause(0.2)
        await pilot.press("q")

    app = MonitorApp(TARGETS, build=slow_build)
    try:
        started = time.monotonic()
        app.run(headless=True, auto_pilot=quit_soon)
        elapsed = time.monotonic() - started
    finally:
        release.set()
    assert app.state.phase is Phase.EXITING
    assert app.state.snapshot is None
    assert elapsed < 2.5
