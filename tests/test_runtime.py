"""Tests for termiflow.runtime: Composer routing, tabs, resize, quit."""

import pytest

from termiflow.commands import QUIT, Batch, Command, execute
from termiflow.messages import IssuesFetched, KeyEvent, PaneMessage, ResizeEvent, ShellOutput
from termiflow.runtime import CHROME_HEIGHT, Composer
from tests.harness import FakePane


def _composer(n=3, **kwargs):
    return Composer.create([FakePane(title=f"P{i}", **kwargs) for i in range(n)])


class TestTabs:
    def test_tab_cycles_and_wraps(self):
        c = _composer(3)
        seen = [c.active]
        for _ in range(3):
            c, cmd = c.dispatch(KeyEvent("tab"))
            assert cmd is None
            seen.append(c.active)
        assert seen == [0, 1, 2, 0]

    def test_tab_not_delivered_to_panes(self):
        c, _ = _composer(2).dispatch(KeyEvent("tab"))
        assert all(p.received == () for p in c.panes)

    def test_tab_strip_lists_every_title(self):
        strip = _composer(3).tab_strip().plain
        assert "P0" in strip and "P1" in strip and "P2" in strip

    def test_empty_composer_rejected(self):
        with pytest.raises(ValueError):
            Composer.create([])


class TestQuit:
    def test_ctrl_c_returns_quit(self):
        c = _composer()
        after, cmd = c.dispatch(KeyEvent("ctrl+c"))
        assert cmd is QUIT
        assert after is c


class TestRouting:
    def test_keys_go_to_active_pane_only(self):
        c, _ = _composer(3).dispatch(KeyEvent("tab"))
        c, _ = c.dispatch(KeyEvent("a", "a"))
        assert c.panes[0].received == ()
        assert c.panes[1].received == (KeyEvent("a", "a"),)
        assert c.panes[2].received == ()

    def test_pane_message_reaches_origin_even_when_inactive(self):
        c = _composer(3)
        result = ShellOutput(command="ls", output="x")
        c, _ = c.dispatch(PaneMessage(pane_index=2, message=result))
        assert c.active == 0
        assert c.panes[2].received == (result,)
        assert c.panes[0].received == ()

    def test_unknown_pane_index_dropped(self):
        c = _composer(2)
        after, cmd = c.dispatch(PaneMessage(pane_index=7, message=IssuesFetched(items=())))
        assert after is c
        assert cmd is None


class TestResize:
    def test_resize_reaches_every_pane(self):
        c, _ = _composer(3).dispatch(ResizeEvent(120, 40))
        assert (c.width, c.height) == (120, 40)
        for pane in c.panes:
            assert (pane.width, pane.height) == (120, 40 - CHROME_HEIGHT)

    def test_raw_resize_routed_to_active_pane(self):
        c, _ = _composer(2).dispatch(ResizeEvent(80, 24))
        assert c.panes[0].received == (ResizeEvent(80, 24),)
        assert c.panes[1].received == ()

    def test_tiny_terminal_clamps_height(self):
        c, _ = _composer(1).dispatch(ResizeEvent(10, 1))
        assert c.panes[0].height == 0


class TestInit:
    def test_init_batches_tagged_commands(self):
        panes = [
            FakePane(title="A", init_result=IssuesFetched(items=())),
            FakePane(title="B"),
            FakePane(title="C", init_result=ShellOutput(command="c", output="")),
        ]
        c, cmd = Composer.create(panes).init()
        assert all(p.init_count == 1 for p in c.panes)
        assert isinstance(cmd, Batch)
        results = sorted((execute(leaf) for leaf in cmd.commands), key=lambda m: m.pane_index)
        assert [m.pane_index for m in results] == [0, 2]
        assert isinstance(results[0].message, IssuesFetched)

    def test_single_init_command_is_not_batched(self):
        c, cmd = Composer.create([FakePane(init_result=IssuesFetched(items=()))]).init()
        assert isinstance(cmd, Command)
        assert execute(cmd) == PaneMessage(0, IssuesFetched(items=()))

    def test_ctrl_r_reinits_active_pane(self):
        panes = [FakePane(title="A"), FakePane(title="B", init_result=IssuesFetched(items=()))]
        c, _ = Composer.create(panes).dispatch(KeyEvent("tab"))
        c, cmd = c.dispatch(KeyEvent("ctrl+r"))
        assert c.panes[1].init_count == 1
        assert c.panes[0].init_count == 0
        assert execute(cmd) == PaneMessage(1, IssuesFetched(items=()))


class TestView:
    def test_view_is_idempotent(self):
        c, _ = _composer(2).dispatch(ResizeEvent(60, 20))
        assert c.view().plain == c.view().plain

    def test_view_shows_active_pane(self):
        c, _ = _composer(2).dispatch(KeyEvent("tab"))
        body = c.view().plain.split("\n", 2)[2]
        assert body.startswith("P1")
