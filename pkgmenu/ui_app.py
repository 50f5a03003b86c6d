from __future__ import annotations

import sys
from typing import List, Optional, Tuple

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Button, OptionList, SelectionList, Static
from textual.widgets.option_list import Option
from textual.widgets.selection_list import Selection

from .dialog import ChoiceChannel, DialogProvider
from .models import DialogMode, DialogRequest, Outcome

APP_NAME = "pkgmenu"

DialogAnswer = Tuple[Outcome, List[str]]

class DialogApp(App[DialogAnswer]):
    """One request, one screen; exits with (outcome, tags)."""

    CSS = """
    Screen { background: $background; align: center middle; }
    #modal { width: 92%; max-width: 120; height: auto; max-height: 95%; padding: 1 2; border: round $primary; background: $panel; }
    #body { margin: 0 0 1 0; }
    OptionList, SelectionList { height: auto; max-height: 24; border: round $surface; background: $panel; }
    .toolbar { height: auto; margin: 1 0 0 0; }
    .toolbar Button { margin: 0 1 0 0; }
    """

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("ctrl+c", "cancel", "Cancel"),
    ]

    def __init__(self, request: DialogRequest):
        super().__init__()
        self.request = request
        self.title = request.title

    def compose(self) -> ComposeResult:
        req = self.request
        if req.mode is DialogMode.YESNO:
            buttons = (
                Button("No", id="cancel", variant="error"),
                Button("Yes", id="ok", variant="success"),
            )
            yield Container(
                Static(f"[b]{req.title}[/b]"),
                Static(req.text, id="body"),
                Horizontal(*buttons, classes="toolbar"),
                id="modal",
            )
            return

        if req.mode is DialogMode.CHECKLIST:
            picker = SelectionList[str](
                *[Selection(it.label or it.tag, it.tag, it.checked) for it in req.items],
                id="picker",
            )
        else:
            picker = OptionList(
                *[Option(f"{it.tag}  [dim]{it.label}[/dim]" if it.label else it.tag, id=it.tag) for it in req.items],
                id="picker",
            )
        yield Container(
            Static(f"[b]{req.title}[/b]"),
            Static(req.text, id="body"),
            picker,
            Horizontal(
                Button("OK", id="ok", variant="success"),
                Button("Cancel", id="cancel", variant="error"),
                classes="toolbar",
            ),
            id="modal",
        )

    def on_mount(self) -> None:
        if self.request.mode is DialogMode.YESNO:
            self.query_one("#ok", Button).focus()
            return
        picker = self.query_one("#picker")
        picker.focus()
        if isinstance(picker, OptionList) and picker.option_count:
            picker.highlighted = 0

    def _chosen(self) -> List[str]:
        mode = self.request.mode
        if mode is DialogMode.CHECKLIST:
            return list(self.query_one("#picker", SelectionList).selected)
        if mode is DialogMode.MENU:
            ol = self.query_one("#picker", OptionList)
            if ol.highlighted is None:
                return []
            opt = ol.get_option_at_index(ol.highlighted)
            return [opt.id] if opt.id else []
        return []

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        tag = event.option.id or ""
        self.exit((Outcome.OK, [tag] if tag else []))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "ok":
            self.exit((Outcome.OK, self._chosen()))
        else:
            self.exit((Outcome.CANCEL, []))

    def action_cancel(self) -> None:
        self.exit((Outcome.CANCEL, []))

class TextualDialog(DialogProvider):
    name = "textual"

    def available(self) -> bool:
        return sys.stdin.isatty() and sys.stdout.isatty()

    def show(self, request: DialogRequest, channel: ChoiceChannel) -> Outcome:
        answer: Optional[DialogAnswer] = DialogApp(request).run()
        if answer is None:
            channel.write("")
            return Outcome.CANCEL
        outcome, tags = answer
        channel.write(" ".join(f'"{t}"' for t in tags))
        return outcome
