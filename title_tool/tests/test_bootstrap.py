from __future__ import annotations

from typing import List, Tuple

from host_fakes import build_host_tree

from title_tool.bootstrap import TOTAL_STEPS, RelocationBootstrap
from title_tool.host import HostEvent
from title_tool.relocation import MoveState, RelocationEngine


def _bootstrap(tree, progress=None, root_provider=None):
    provider = root_provider or (lambda: tree.root)
    engine = RelocationEngine(tree.host, provider)
    return engine, RelocationBootstrap(tree.host, engine, provider, progress=progress)


def test_loaded_window_runs_immediately() -> None:
    tree = build_host_tree()
    reports: List[Tuple[str, int, int]] = []
    engine, bootstrap = _bootstrap(tree, progress=lambda *args: reports.append(args))

    assert bootstrap.start() is MoveState.PLACED

    assert reports == [
        ("Initializing", 0, TOTAL_STEPS),
        ("On main thread", 1, TOTAL_STEPS),
        ("Direct Completion", TOTAL_STEPS, TOTAL_STEPS),
    ]
    assert not bootstrap.pending
    assert tree.host.handler_count(tree.root) == 0


def test_unloaded_window_defers_until_loaded() -> None:
    tree = build_host_tree()
    tree.root.loaded = False
    reports: List[Tuple[str, int, int]] = []
    engine, bootstrap = _bootstrap(tree, progress=lambda *args: reports.append(args))

    assert bootstrap.start() is MoveState.UNRESOLVED
    assert bootstrap.pending
    assert tree.host.operations == []

    tree.root.loaded = True
    assert tree.host.fire(tree.root, HostEvent.LOADED) == 1

    assert engine.state is MoveState.PLACED
    assert not bootstrap.pending
    assert tree.host.handler_count(tree.root) == 0
    assert reports[-1] == ("Deferred Completion", TOTAL_STEPS, TOTAL_STEPS)


def test_cancel_stops_a_deferred_run() -> None:
    tree = build_host_tree()
    tree.root.loaded = False
    engine, bootstrap = _bootstrap(tree)
    bootstrap.start()

    assert bootstrap.cancel() is True
    assert tree.host.fire(tree.root, HostEvent.LOADED) == 0
    assert engine.state is MoveState.UNRESOLVED
    assert bootstrap.cancel() is False


def test_cancel_after_direct_run_is_a_no_op() -> None:
    tree = build_host_tree()
    engine, bootstrap = _bootstrap(tree)
    bootstrap.start()

    assert bootstrap.cancel() is False
    assert engine.state is MoveState.PLACED


def test_start_twice_subscribes_once() -> None:
    tree = build_host_tree()
    tree.root.loaded = False
    _, bootstrap = _bootstrap(tree)

    bootstrap.start()
    bootstrap.start()

    assert tree.host.handler_count(tree.root, HostEvent.LOADED) == 1


def test_missing_root_allows_a_later_start() -> None:
    tree = build_host_tree()
    roots = [None, tree.root]
    engine, bootstrap = _bootstrap(tree, root_provider=lambda: roots[0])

    assert bootstrap.start() is MoveState.UNRESOLVED
    roots.pop(0)
    assert bootstrap.start() is MoveState.PLACED


def test_failing_progress_callback_does_not_block_start() -> None:
    tree = build_host_tree()

    def progress(message: str, step: int, total: int) -> None:
        raise RuntimeError("status bar gone")

    engine, bootstrap = _bootstrap(tree, progress=progress)

    assert bootstrap.start() is MoveState.PLACED
