from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Optional

from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.fuzzy import Matcher
from textual.widgets import Footer, Input, OptionList, Static
from textual.widgets.option_list import Option

from logfzf.records import Record
from logfzf.timestamp_wrapper import TimestampDetector, strip_escape_sequences
from logfzf.tui.dialogs import GotoTimestampDialog, HelpDialog
from logfzf.tui.validators import TimestampValidator

DisplayAccessor = Callable[[int], str]
PreviewAccessor = Callable[[int, int, int], str]


def rank_matches(query: str, candidates: Sequence[str]) -> list[int]:
    """
    Return the indexes of the candidates that fuzzy-match query, best match first.
    Equally scored candidates keep their original order; an empty query matches
    everything.
    """
    if not query.strip():
        return list(range(len(candidates)))

    matcher = Matcher(query)
    scored = ((matcher.match(candidate), i) for i, candidate in enumerate(candidates))
    return [i for score, i in sorted(
        ((score, i) for score, i in scored if score > 0),
        key=lambda score_index: -score_index[0]
    )]


class RecordSelectorApp(App[Optional[int]]):
    """
    Fuzzy finder over the resolved records. Exits with the index of the chosen record,
    or None if the user quits.

    The display and preview accessors are called with record indexes; they must not
    do any timestamp detection or file reading, since they run on every keystroke.
    """
    TITLE = "logfzf"

    CSS = """
    #body {
        height: 1fr;
    }

    #records {
        width: 1fr;
        height: 1fr;
    }

    #preview {
        width: 1fr;
        height: 1fr;
        padding: 0 1;
        border-left: solid $primary;
    }

    #status {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding(key="escape", action="cancel", description="Quit", priority=True),
        Binding(key="ctrl+c", action="cancel", description="Quit", show=False, priority=True),
        Binding(key="up", action="cursor_up", show=False, priority=True),
        Binding(key="down", action="cursor_down", show=False, priority=True),
        Binding(key="pageup", action="page_up", show=False, priority=True),
        Binding(key="pagedown", action="page_down", show=False, priority=True),
        Binding(key="ctrl+t", action="goto_timestamp", description="Go to timestamp"),
        Binding(key="f1", action="help_about", description="Help/About"),
    ]

    def __init__(
            self,
            records: Sequence[Record],
            display: DisplayAccessor,
            preview: PreviewAccessor,
            detector: TimestampDetector,
            initial_query: str = "",
    ):
        super().__init__()
        self.records = records
        self.display = display
        self.preview = preview
        self.timestamp_validator = TimestampValidator(detector)
        self.query_text = initial_query
        self.current_goto_timestamp_string: str = ""

        self._display_strings = [display(i) for i in range(len(records))]
        self._visible: list[int] = []

    def compose(self) -> ComposeResult:
        with Horizontal(id="body"):
            yield OptionList(id="records")
            yield Static(id="preview")
        yield Static(id="status")
        yield Input(self.query_text, placeholder="Search...", id="query")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#query", Input).focus()
        self.apply_query(self.query_text)

    def on_resize(self) -> None:
        self.call_after_refresh(self.refresh_preview)

    #
    # filtering and preview
    #

    def apply_query(self, query: str) -> None:
        self.query_text = query
        self._visible = rank_matches(query, self._display_strings)

        option_list = self.query_one("#records", OptionList)
        option_list.clear_options()
        option_list.add_options(
            Option(Text(strip_escape_sequences(self._display_strings[i]), no_wrap=True, overflow="ellipsis"))
            for i in self._visible
        )
        if self._visible:
            option_list.highlighted = 0

        self.query_one("#status", Static).update(f"{len(self._visible)}/{len(self.records)}")
        self.call_after_refresh(self.refresh_preview)

    def highlighted_record_index(self) -> Optional[int]:
        highlighted = self.query_one("#records", OptionList).highlighted
        if highlighted is None or not 0 <= highlighted < len(self._visible):
            return None
        return self._visible[highlighted]

    def refresh_preview(self) -> None:
        preview_widget = self.query_one("#preview", Static)
        record_index = self.highlighted_record_index()
        if record_index is None:
            preview_widget.update("")
            return
        width, height = preview_widget.size
        preview_text = self.preview(record_index, width, height)
        preview_widget.update(Text(strip_escape_sequences(preview_text), no_wrap=True, overflow="ellipsis"))

    @on(Input.Changed, "#query")
    def query_changed(self, event: Input.Changed) -> None:
        self.apply_query(event.value)

    @on(OptionList.OptionHighlighted)
    def record_highlighted(self) -> None:
        self.refresh_preview()

    #
    # selection and navigation
    #

    @on(Input.Submitted, "#query")
    @on(OptionList.OptionSelected)
    def select_record(self) -> None:
        record_index = self.highlighted_record_index()
        if record_index is None:
            self.bell()
            return
        self.exit(record_index)

    def action_cancel(self) -> None:
        if len(self.screen_stack) > 1:
            self.pop_screen()
        else:
            self.exit(None)

    def action_cursor_up(self) -> None:
        self.query_one("#records", OptionList).action_cursor_up()

    def action_cursor_down(self) -> None:
        self.query_one("#records", OptionList).action_cursor_down()

    def action_page_up(self) -> None:
        self.query_one("#records", OptionList).action_page_up()

    def action_page_down(self) -> None:
        self.query_one("#records", OptionList).action_page_down()

    #
    # methods to support go to timestamp function
    #

    def action_goto_timestamp(self) -> None:
        self.push_screen(
            GotoTimestampDialog(self.timestamp_validator, initial=self.current_goto_timestamp_string),
            self.move_cursor_to_timestamp
        )

    def position_for_timestamp(self, target: datetime) -> Optional[int]:
        """Position of the first visible record at or before target, if any."""
        for position, record_index in enumerate(self._visible):
            if self.records[record_index].timestamp <= target:
                return position
        return None

    def move_cursor_to_timestamp(self, timestamp_str: Optional[str]) -> None:
        if not timestamp_str:
            return
        self.current_goto_timestamp_string = timestamp_str

        target = self.timestamp_validator.convert_time_str(timestamp_str)
        position = self.position_for_timestamp(target)
        if position is None:
            self.bell()
            return
        self.query_one("#records", OptionList).highlighted = position

    #
    # methods to support help/about
    #

    def action_help_about(self) -> None:
        from logfzf.about import text

        self.push_screen(
            HelpDialog(text)
        )
