from __future__ import annotations

from unittest.mock import Mock

import pytest

from discord_rest.events import EventEmitter


def test_emit_calls_listeners_in_registration_order() -> None:
    emitter = EventEmitter()
    seen: list[str] = []
    emitter.on("call", lambda value: seen.append(f"first:{value}"))
    emitter.on("call", lambda value: seen.append(f"second:{value}"))

    assert emitter.emit("call", 1)
    assert seen == ["first:1", "second:1"]


def test_emit_without_listeners_returns_false() -> None:
    assert not EventEmitter().emit("ratelimited")


def test_once_listener_runs_a_single_time() -> None:
    emitter = EventEmitter()
    listener = Mock()
    emitter.once("debug", listener)

    emitter.emit("debug", "a")
    emitter.emit("debug", "b")

    listener.assert_called_once_with("a")
    assert emitter.listener_count("debug") == 0


def test_off_removes_listener() -> None:
    emitter = EventEmitter()
    listener = Mock()
    emitter.on("ratelimited", listener)
    emitter.off("ratelimited", listener)
    emitter.off("ratelimited", listener)

    emitter.emit("ratelimited")

    listener.assert_not_called()


def test_listener_errors_propagate() -> None:
    emitter = EventEmitter()
    emitter.on("call", Mock(side_effect=RuntimeError("listener failed")))

    with pytest.raises(RuntimeError):
        emitter.emit("call", None)
