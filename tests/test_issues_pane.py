"""Tests for the IssueList pane: fetch lifecycle, placeholders, cursor and filter."""

from termiflow.commands import Command, execute
from termiflow.config import JiraConfig
from termiflow.errors import ConfigMissing, ErrorKind, ProtocolError, TransportError
from termiflow.messages import CommandCrashed, FetchFailed, IssueItem, IssuesFetched, KeyEvent
from termiflow.panes.issues import IssueListPane, fetch_items
from termiflow.trackers.sources import jira_source
from tests.harness import make_source

ITEMS = [
    IssueItem("ABC-1 Fix login", "Status: To Do"),
    IssueItem("ABC-2 Add logout", "Status: Done"),
    IssueItem("ABC-3 Login page copy", "Status: In Progress"),
]


def _loaded(items=ITEMS, **kwargs):
    pane = IssueListPane.create(make_source(items, **kwargs))
    pane, cmd = pane.init()
    pane, _ = pane.update(execute(cmd))
    return pane


class TestFetch:
    def test_init_issues_one_fetch(self):
        pane, cmd = IssueListPane.create(make_source(ITEMS)).init()
        assert pane.loading
        assert isinstance(cmd, Command)

    def test_second_init_while_loading_issues_nothing(self):
        pane, _ = IssueListPane.create(make_source(ITEMS)).init()
        again, cmd = pane.init()
        assert cmd is None
        assert again is pane

    def test_reinit_after_load_fetches_again(self):
        pane = _loaded()
        pane, cmd = pane.init()
        assert cmd is not None

    def test_items_replace_state(self):
        pane = _loaded()
        assert pane.items == tuple(ITEMS)
        assert pane.loaded and not pane.loading
        assert pane.last_error is None

    def test_zero_results(self):
        pane = _loaded([])
        assert pane.items == (IssueItem("No issues found", "Nothing assigned."),)

    def test_not_configured_placeholder(self):
        result = fetch_items(make_source(error=ConfigMissing("creds missing")))
        assert result == IssuesFetched(items=(IssueItem("Setup Required", "Please configure the test tracker"),))

    def test_unconfigured_jira_makes_no_network_call(self, no_network):
        result = fetch_items(jira_source(JiraConfig()))
        assert result.items[0].title == "Setup Required"
        assert "JIRA_URL" in result.items[0].description
        no_network.assert_not_called()

    def test_protocol_error_becomes_failure(self):
        result = fetch_items(make_source(error=ProtocolError("API Error: 401 Unauthorized", status=401)))
        assert result == FetchFailed(error="API Error: 401 Unauthorized", kind=ErrorKind.PROTOCOL)

    def test_failure_shows_error_item(self):
        pane, _ = IssueListPane.create(make_source(ITEMS)).init()
        pane, cmd = pane.update(FetchFailed(error="connection refused", kind=ErrorKind.TRANSPORT))
        assert cmd is None
        assert pane.items == (IssueItem("Error", "connection refused"),)
        assert pane.last_error == "connection refused"
        assert not pane.loading

    def test_transport_error_end_to_end(self):
        pane = _loaded(error=TransportError("timed out"))
        assert pane.items[0].title == "Error"

    def test_crash_shows_error_item(self):
        pane, _ = IssueListPane.create(make_source(ITEMS)).init()
        pane, _ = pane.update(CommandCrashed(command="fetch", error="KeyError: 'x'"))
        assert pane.items[0] == IssueItem("Error", "KeyError: 'x'")


class TestNavigation:
    def test_cursor_moves_and_clamps(self):
        pane = _loaded()
        for _ in range(5):
            pane, _ = pane.update(KeyEvent("down"))
        assert pane.cursor == 2
        for _ in range(5):
            pane, _ = pane.update(KeyEvent("up"))
        assert pane.cursor == 0

    def test_filter_is_case_insensitive(self):
        pane = _loaded()
        for ch in "LOGIN":
            pane, _ = pane.update(KeyEvent(ch, ch))
        assert pane.filter == "LOGIN"
        assert [i.title for i in pane.visible_items()] == ["ABC-1 Fix login", "ABC-3 Login page copy"]

    def test_filter_backspace_and_escape(self):
        pane = _loaded()
        for ch in "ab":
            pane, _ = pane.update(KeyEvent(ch, ch))
        pane, _ = pane.update(KeyEvent("backspace"))
        assert pane.filter == "a"
        pane, _ = pane.update(KeyEvent("escape"))
        assert pane.filter == ""
        assert len(pane.visible_items()) == 3


class TestView:
    def test_title_and_items(self):
        text = _loaded().view().plain
        assert text.startswith(" Test Issues ")
        assert "ABC-1 Fix login" in text
        assert "Status: Done" in text

    def test_selected_item_marked(self):
        pane, _ = _loaded().update(KeyEvent("down"))
        assert "│ ABC-2 Add logout" in pane.view().plain

    def test_loading_indicator(self):
        pane, _ = IssueListPane.create(make_source(ITEMS)).init()
        assert "Loading…" in pane.view().plain

    def test_filter_with_no_match(self):
        pane = _loaded()
        pane, _ = pane.update(KeyEvent("z", "z"))
        assert "No items match the filter." in pane.view().plain

    def test_scrolls_to_keep_cursor_visible(self):
        items = [IssueItem(f"T-{i}", f"d{i}") for i in range(20)]
        pane = _loaded(items).resize(80, 9)
        for _ in range(10):
            pane, _ = pane.update(KeyEvent("down"))
        text = pane.view().plain
        assert "│ T-10" in text
        assert "T-0\n" not in text

    def test_view_is_idempotent(self):
        pane = _loaded()
        assert pane.view().plain == pane.view().plain
