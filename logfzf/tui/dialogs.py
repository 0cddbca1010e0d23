from typing import Optional

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, MarkdownViewer

from .validators import TimestampValidator


class GotoTimestampDialog(ModalScreen[Optional[str]]):
    """
    Asks for a timestamp to jump to. Anything the record timestamps can be written as
    is accepted, as well as relative times such as "90m" or "2h". The hint line
    shows how the current entry will be read, or why it can't be.
    """

    DEFAULT_CSS = """
    GotoTimestampDialog {
        align: center middle;
    }

    GotoTimestampDialog > Vertical {
        background: $panel;
        height: auto;
        width: 60;
        border: thick $primary;
    }

    GotoTimestampDialog Input {
        margin: 1 1 0 1;
    }

    GotoTimestampDialog Label {
        margin-left: 2;
    }

    GotoTimestampDialog #hint {
        color: $text-muted;
        height: 1;
    }

    GotoTimestampDialog #buttons {
        height: auto;
        width: 100%;
        align-horizontal: right;
        padding: 1 1 0 0;
    }

    GotoTimestampDialog Button {
        margin-right: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "app.pop_screen", "", show=False),
    ]

    def __init__(self, validator: TimestampValidator, initial: str = "") -> None:
        super().__init__()
        self.validator = validator
        self.initial = initial

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label("Go to timestamp:")
            yield Input(self.initial, placeholder="2023-07-14 08:00:00, 15m, ...", validators=[self.validator])
            yield Label("", id="hint")
            with Horizontal(id="buttons"):
                yield Button("Go", id="go", variant="primary")
                yield Button("Cancel", id="cancel")

    def on_mount(self) -> None:
        self.query_one(Input).focus()
        self.show_hint(self.initial)

    def show_hint(self, value: str) -> None:
        hint = self.query_one("#hint", Label)
        value = value.strip()
        if not value:
            hint.update("")
            return

        result = self.validator.validate(value)
        if result.is_valid:
            hint.update(f"-> {self.validator.convert_time_str(value)}")
        else:
            hint.update("; ".join(result.failure_descriptions))

    @on(Input.Changed)
    def entry_changed(self, event: Input.Changed) -> None:
        self.show_hint(event.value)

    @on(Button.Pressed, "#cancel")
    def cancel_goto(self) -> None:
        self.dismiss(None)

    @on(Input.Submitted)
    @on(Button.Pressed, "#go")
    def accept_goto(self) -> None:
        value = self.query_one(Input).value.strip()
        if value and self.validator.validate(value).is_valid:
            self.dismiss(value)
        else:
            self.app.bell()


class HelpDialog(ModalScreen[None]):
    """Shows the Markdown help text; enter, escape or OK close it."""

    DEFAULT_CSS = """
    HelpDialog {
        align: center middle;
    }

    HelpDialog > Vertical {
        background: $panel;
        height: auto;
        width: auto;
        border: thick $primary;
    }

    HelpDialog MarkdownViewer {
        height: 24;
        width: 80;
    }

    HelpDialog #buttons {
        height: auto;
        width: 100%;
        align-horizontal: center;
        padding-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "app.pop_screen", "", show=False),
        Binding("enter", "app.pop_screen", "", show=False),
    ]

    def __init__(self, help_text: str) -> None:
        super().__init__()
        self.help_text = help_text

    def compose(self) -> ComposeResult:
        with Vertical():
            yield MarkdownViewer(self.help_text, show_table_of_contents=False)
            with Horizontal(id="buttons"):
                yield Button("OK", id="ok", variant="primary")

    def on_mount(self) -> None:
        self.query_one(MarkdownViewer).focus()

    @on(Button.Pressed, "#ok")
    def ok_clicked(self) -> None:
        self.dismiss(None)
