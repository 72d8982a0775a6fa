"""Minimal Textual app for browsing and editing one CryptBox.

Start here with `python -m cryptbox.frontend.cli.app`
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

import pyperclip
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    Static,
)

from cryptbox.core.exceptions import EncodeError
from cryptbox.frontend.cli.clipboard import copy_to_clipboard, format_value
from cryptbox.frontend.cli.context import AppContext, build_context


def _format_stamp(stamp: Optional[int]) -> str:
    # Header stamps are epoch seconds; unset ones render as a dash.
    if stamp is None:
        return "--"
    return datetime.fromtimestamp(stamp).isoformat(sep=" ", timespec="seconds")


def parse_value(text: str) -> Any:
    """Read user input as JSON, falling back to a plain string."""
    text = text.strip()
    try:
        return json.loads(text)
    except ValueError:
        return text


def _preview(value: Any, limit: int = 60) -> str:
    text = format_value(value)
    return text if len(text) <= limit else text[: limit - 1] + "…"


# === Modal definitions ===


class UnlockModal(ModalScreen[Optional[str]]):
    """Prompt for the key of the box."""

    def __init__(self, box_name: str, first_run: bool = False):
        super().__init__()
        self.box_name = box_name
        self.first_run = first_run

    def compose(self) -> ComposeResult:  # pragma: no cover - UI only
        with Vertical(classes="dialog"):
            yield Static(f"Unlock '{self.box_name}'", classes="title")
            if self.first_run:
                yield Label("New box: the key you enter now will encrypt it.")
            yield Label("Key (Enter to unlock, Esc to quit)")
            self.key_input = Input(placeholder="••••••", password=True)
            yield self.key_input
            with Horizontal():
                yield Button("Quit (Esc)", id="cancel")
                yield Button("Unlock (Enter)", id="ok", variant="primary")

    def on_mount(self) -> None:  # pragma: no cover
        self.set_focus(self.key_input)

    def _submit(self) -> None:
        key = self.key_input.value or ""
        if not key.strip():
            self.app.notify("Key cannot be empty", severity="error")
            return
        self.dismiss(key)

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        if event.button.id == "cancel":
            self.dismiss(None)
        else:
            self._submit()

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(None)
        elif event.key == "enter":
            self._submit()


class SetValueResult:
    def __init__(self, name: str, value: Any):
        self.name = name
        self.value = value


class SetValueModal(ModalScreen[Optional[SetValueResult]]):
    def __init__(self, name: str = "", value: str = ""):
        super().__init__()
        self.initial_name = name
        self.initial_value = value

    def compose(self) -> ComposeResult:  # pragma: no cover - UI only
        with Vertical(classes="dialog"):
            yield Static("Set Value", classes="title")
            yield Label("Key")
            self.name_input = Input(placeholder="score", value=self.initial_name)
            yield self.name_input
            yield Label("Value (JSON; anything else is stored as text)")
            self.value_input = Input(placeholder='42, "text", [1, 2], {"a": 1}', value=self.initial_value)
            yield self.value_input
            with Horizontal():
                yield Button("Cancel (Esc)", id="cancel")
                yield Button("Set (Enter)", id="ok", variant="primary")

    def on_mount(self) -> None:  # pragma: no cover
        self.set_focus(self.name_input)

    def _submit(self) -> None:
        name = (self.name_input.value or "").strip()
        if not name:
            self.app.notify("Key cannot be empty", severity="error")
            return
        self.dismiss(SetValueResult(name=name, value=parse_value(self.value_input.value or "")))

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        if event.button.id == "cancel":
            self.dismiss(None)
        else:
            self._submit()

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(None)
        elif event.key == "enter":
            self._submit()


class WipeConfirmModal(ModalScreen[Optional[bool]]):
    def __init__(self, prompt: str):
        super().__init__()
        self.prompt = prompt

    def compose(self) -> ComposeResult:  # pragma: no cover
        with Vertical(classes="dialog"):
            yield Static(self.prompt)
            with Horizontal():
                yield Button("Cancel (Esc)", id="cancel")
                yield Button("Wipe (Enter)", id="ok", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        self.dismiss(event.button.id == "ok")

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(False)
        elif event.key == "enter":
            self.dismiss(True)


class HeaderInfoModal(ModalScreen[None]):
    def __init__(self, ctx: AppContext):
        super().__init__()
        self.ctx = ctx

    def compose(self) -> ComposeResult:  # pragma: no cover
        box = self.ctx.box
        header = box.header
        with Vertical(classes="dialog"):
            yield Static(f"Box: {box.name}", classes="title")
            yield Static(f"Path: {box.path}")
            yield Static(f"Algorithm: {box.algorithm}" + ("" if box.encrypted else " (unencrypted)"))
            yield Static(f"Format version: {header.version}")
            yield Static(f"Created:  {_format_stamp(header.created)}")
            yield Static(f"Saved:    {_format_stamp(header.saved)}")
            yield Static(f"Loaded:   {_format_stamp(header.loaded)}")
            yield Static(f"Accessed: {_format_stamp(header.accessed)}")
            yield Static(f"Modified: {_format_stamp(header.modified)}")
            with Horizontal():
                yield Button("Close", id="ok", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        self.dismiss(None)

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key in ("escape", "enter"):
            self.dismiss(None)


class CryptBoxApp(App):
    """Table view over the values of one box."""

    TITLE = "CryptBox"

    CSS = """
    #main { border: heavy $surface; }
    .title { padding: 1 1; text-style: bold; }
    #status { padding: 0 1 1 1; height: 3; color: $text-muted; }
    ModalScreen { align: center middle; background: rgba(0,0,0,0.45); }
    .dialog { width: 75%; height: 75%; padding: 1; border: heavy $surface; background: $boost; }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("s", "save", "Save"),
        ("r", "reload", "Reload"),
        ("n", "set_value", "Set"),
        ("e", "edit_value", "Edit"),
        ("plus", "increment", "+1"),
        ("minus", "decrement", "-1"),
        ("c", "copy_value", "Copy"),
        ("i", "box_info", "Info"),
        ("x", "wipe", "Wipe"),
    ]

    def __init__(self, ctx: AppContext | None = None):
        self.ctx = ctx or build_context()
        super().__init__()

        self.table: DataTable | None = None
        self.status: Static | None = None
        self.row_keys: list[str] = []
        self.unlocked = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="main"):
            yield Static(f"Box: {self.ctx.box.name}", classes="title")
            self.table = DataTable(id="values")
            yield self.table
            self.status = Static("", id="status")
            yield self.status
        yield Footer()

    def on_mount(self) -> None:
        assert self.table is not None
        self.table.add_columns("Key", "Type", "Value")
        if self.ctx.password:
            self._handle_unlock(self.ctx.password)
        else:
            self._prompt_unlock()

    # === Unlocking ===

    def _prompt_unlock(self) -> None:
        self.push_screen(
            UnlockModal(self.ctx.box.name, first_run=self.ctx.first_run),
            self._handle_unlock,
        )

    def _handle_unlock(self, key: Optional[str]) -> None:
        if key is None:
            self.exit()
            return
        if self.ctx.box.load(key):
            self.unlocked = True
            self.refresh_values()
            return
        self.ctx.password = None
        self.notify("Key did not open the box", severity="error")
        self._prompt_unlock()

    # === Table ===

    def refresh_values(self) -> None:
        assert self.table is not None
        self.table.clear(columns=False)
        self.row_keys = []
        if not self.unlocked:
            self._set_status("Locked")
            return

        box = self.ctx.box
        for name in box.keys():
            value = box.get(name)
            kind = box.get_type(name)
            self.table.add_row(name, kind.value if kind else "--", _preview(value), key=name)
            self.row_keys.append(name)
        self._update_status()

    def _set_status(self, message: str) -> None:
        if self.status:
            self.status.update(message)

    def _update_status(self) -> None:
        box = self.ctx.box
        header = box.header
        mode = box.algorithm if box.encrypted else "unencrypted"
        self._set_status(
            f"Box: {box.name} • {mode} • Keys: {len(self.row_keys)} • Saved: {_format_stamp(header.saved)}"
        )

    def _selected_key(self) -> Optional[str]:
        if not self.table or not self.row_keys:
            return None
        row = self.table.cursor_row
        if row is None or row < 0 or row >= len(self.row_keys):
            return None
        return self.row_keys[row]

    # === Actions ===

    def action_save(self) -> None:
        if not self.unlocked:
            return
        if self.ctx.box.save():
            self.notify("Box saved")
        else:
            self.notify("Could not save box (see log)", severity="error")
        self._update_status()

    def action_reload(self) -> None:
        if not self.unlocked:
            return
        # Reload with the key already held by the box.
        if not self.ctx.box.load():
            self.notify("Could not reload box (see log)", severity="error")
        self.refresh_values()

    def action_set_value(self) -> None:
        if not self.unlocked:
            return
        self.push_screen(SetValueModal(), self._handle_set_value)

    def action_edit_value(self) -> None:
        name = self._selected_key() if self.unlocked else None
        if name is None:
            return
        current = format_value(self.ctx.box.get(name))
        self.push_screen(SetValueModal(name, current), self._handle_set_value)

    def _handle_set_value(self, result: Optional[SetValueResult]) -> None:
        if result is None:
            return
        try:
            self.ctx.box.set(result.name, result.value)
        except EncodeError as exc:
            self.notify(str(exc), severity="error")
            return
        self.refresh_values()

    def action_increment(self) -> None:
        self._adjust_selected(1)

    def action_decrement(self) -> None:
        self._adjust_selected(-1)

    def _adjust_selected(self, step: int) -> None:
        name = self._selected_key() if self.unlocked else None
        if name is None:
            return
        box = self.ctx.box
        changed = box.increment(name) if step > 0 else box.decrement(name)
        if not changed:
            self.notify(f"'{name}' is not a number", severity="warning")
            return
        self.refresh_values()

    def action_copy_value(self) -> None:
        name = self._selected_key() if self.unlocked else None
        if name is None:
            return
        try:
            copy_to_clipboard(self.ctx.box.get(name))
        except pyperclip.PyperclipException:
            self.notify("Could not copy to clipboard", severity="error")
            return
        self.notify(f"Copied '{name}' to clipboard")

    def action_box_info(self) -> None:
        self.push_screen(HeaderInfoModal(self.ctx))

    def action_wipe(self) -> None:
        if not self.unlocked:
            return
        prompt = f"Wipe box '{self.ctx.box.name}'? All values and the file are removed."
        self.push_screen(WipeConfirmModal(prompt), self._handle_wipe)

    def _handle_wipe(self, confirmed: Optional[bool]) -> None:
        if not confirmed:
            return
        if not self.ctx.box.wipe():
            self.notify("Box cleared but the file could not be removed", severity="warning")
            self.refresh_values()
            return
        # Nothing left to show; leaving now also keeps quit from re-saving the file.
        self.unlocked = False
        self.ctx.box.destroy()
        self.exit()

    def action_quit(self) -> None:
        """Save (if unlocked) and release the box before exiting."""
        if self.unlocked:
            self.ctx.box.save()
        self.ctx.box.destroy()
        self.exit()


if __name__ == "__main__":  # pragma: no cover
    CryptBoxApp().run()
