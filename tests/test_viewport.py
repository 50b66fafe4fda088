"""Tests for the view-mode policy and viewport observer."""

from __future__ import annotations

from admin_console.models.view_state import ViewState
from admin_console.services.viewport import ViewportModePolicy, ViewportObserver


class TestViewportModePolicy:
    def test_breakpoint_is_inclusive_for_table(self) -> None:
        policy = ViewportModePolicy(breakpoint=1024)
        assert policy.initial_mode(1024) == "table"
        assert policy.initial_mode(1023) == "grid"

    def test_unknown_width_uses_default(self) -> None:
        assert ViewportModePolicy().initial_mode(None) == "table"
        assert ViewportModePolicy(default_width=375).initial_mode(None) == "grid"

    def test_resize_recomputes_implicit_mode(self) -> None:
        policy = ViewportModePolicy()
        state = ViewState(view_mode="table")
        assert policy.on_resize(600, state) == "grid"

    def test_resize_overrides_explicit_choice_by_default(self) -> None:
        policy = ViewportModePolicy()
        state = ViewState(view_mode="grid", view_mode_is_explicit=True)
        assert policy.on_resize(1600, state) == "table"

    def test_resize_keeps_explicit_choice_when_honored(self) -> None:
        policy = ViewportModePolicy(honor_explicit=True)
        state = ViewState(view_mode="grid", view_mode_is_explicit=True)
        assert policy.on_resize(1600, state) == "grid"


class TestViewportObserver:
    def test_resize_notifies_subscribers(self) -> None:
        observer = ViewportObserver(1280)
        seen: list[int] = []
        observer.subscribe(seen.append)

        observer.resize(800)

        assert observer.width == 800
        assert seen == [800]

    def test_unsubscribe_stops_notifications(self) -> None:
        observer = ViewportObserver(1280)
        seen: list[int] = []
        unsubscribe = observer.subscribe(seen.append)

        unsubscribe()
        unsubscribe()  # second call is a no-op
        observer.resize(800)

        assert seen == []

    def test_failing_listener_does_not_block_others(self) -> None:
        observer = ViewportObserver(1280)
        seen: list[int] = []

        def broken(width: int) -> None:
            raise RuntimeError("boom")

        observer.subscribe(broken)
        observer.subscribe(seen.append)
        observer.resize(700)

        assert seen == [700]
