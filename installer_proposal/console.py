from __future__ import annotations

import html as html_lib
import re
import sys
from typing import Any, Callable, List, Optional, Sequence, TextIO

from .i18n import _
from .models import Action, MenuItem, UserInput
from .sink import MENU_WIDGET, PROPOSAL_WIDGET, SKIP_WIDGET, TAB_WIDGET, DialogLayout

_LINK_RE = re.compile(r'<a href="([^"]*)">(.*?)</a>', re.S)
_TAG_RE = re.compile(r"<[^>]+>")


def markup_to_text(markup: str) -> str:
    """Flatten proposal markup for a plain terminal."""
    text = _LINK_RE.sub(lambda m: f"{m.group(2)} [{m.group(1)}]", markup)
    text = re.sub(r"<br\s*/?>", "\n", text, flags=re.I)
    text = re.sub(r"<h3>", "\n== ", text, flags=re.I)
    text = re.sub(r"</h3>", "\n", text, flags=re.I)
    text = re.sub(r"<li>", "  - ", text, flags=re.I)
    text = re.sub(r"</(li|p)>", "\n", text, flags=re.I)
    text = _TAG_RE.sub("", text)
    return html_lib.unescape(text).strip("\n")


def parse_input(line: str) -> UserInput:
    line = line.strip()
    if not line:
        return None
    if line.isdigit():
        return int(line)
    try:
        return Action(line.lower())
    except ValueError:
        return line


class ConsoleSink:
    """Line-oriented rendering of the proposal dialog."""

    def __init__(
        self,
        *,
        input_fn: Callable[[str], str] = input,
        out: Optional[TextIO] = None,
    ) -> None:
        self._input = input_fn
        self._out = out or sys.stdout
        self._layout: Optional[DialogLayout] = None
        self._skip = False
        self._enabled = {PROPOSAL_WIDGET: True, MENU_WIDGET: True}
        self._menu: List[MenuItem] = []
        self._next_label = _("&Next")

    def _print(self, text: str = "") -> None:
        self._out.write(text + "\n")
        self._out.flush()

    def _ask_yes(self, question: str) -> bool:
        answer = self._input(f"{question} [y/N] ").strip().lower()
        return answer in {"y", "yes"}

    def set_contents(self, layout: DialogLayout) -> None:
        self._layout = layout
        self._print(f"\n#### {layout.headline} ####")
        self._print(layout.intro)
        if layout.tab_labels:
            tabs = "  ".join(f"[{i}] {label}" for i, label in enumerate(layout.tab_labels))
            self._print(f"Tabs: {tabs}")
        self._print(markup_to_text(layout.initial_content))

    def set_content(self, markup: str) -> None:
        self._print(markup_to_text(markup))

    def widget_exists(self, widget_id: str) -> bool:
        if widget_id == SKIP_WIDGET:
            return bool(self._layout and self._layout.enable_skip)
        if widget_id == TAB_WIDGET:
            return bool(self._layout and self._layout.tab_labels)
        return widget_id in {PROPOSAL_WIDGET, MENU_WIDGET}

    def query_widget(self, widget_id: str, prop: str) -> Any:
        if widget_id == SKIP_WIDGET and prop == "value":
            return self._skip
        return None

    def set_enabled(self, widget_id: str, enabled: bool) -> None:
        self._enabled[widget_id] = enabled

    def set_progress(self, total: int, value: int) -> None:
        if total:
            self._out.write(f"\r{_('Analyzing')} {value}/{total}")
            self._out.flush()

    def clear_progress(self) -> None:
        self._out.write("\r\n")

    def replace_menu(self, items: Sequence[MenuItem]) -> None:
        self._menu = list(items)

    def set_current_tab(self, index: int) -> None:
        self._print(f"-- tab {index} --")

    def set_help_text(self, text: str) -> None:
        pass

    def set_next_button(self, label: str) -> None:
        self._next_label = label

    def enable_next(self, enabled: bool) -> None:
        pass

    def busy_cursor(self) -> None:
        pass

    def normal_cursor(self) -> None:
        pass

    def user_input(self) -> UserInput:
        if self._enabled.get(MENU_WIDGET, True):
            for item in self._menu:
                key = item.id.value if isinstance(item.id, Action) else item.id
                self._print(f"  {key:<20} {item.label.replace('&', '')}")
        self._print(f"  next ({self._next_label.replace('&', '')}), back, abort, skip, dontskip")
        try:
            line = self._input("> ")
        except EOFError:
            # stdin closed; leave the proposal like the window was closed.
            return Action.CANCEL
        value = parse_input(line)
        if value is Action.SKIP:
            self._skip = True
        elif value is Action.DONTSKIP:
            self._skip = False
        return value

    def error(self, message: str) -> None:
        self._print(f"ERROR: {message}")

    def timed_message(self, message: str, seconds: int) -> None:
        self._print(message)

    def confirm_abort(self, kind: str) -> bool:
        if kind == "painless":
            return self._ask_yes(_("Really abort the installation?"))
        return self._ask_yes(_("Really abort? The system may be left incomplete."))

    def continue_cancel(self, message: str) -> bool:
        return self._ask_yes(message)

    def ask_save_file_name(self, start: str, pattern: str, title: str) -> Optional[str]:
        path = self._input(f"{title} ({pattern}): ").strip()
        return path or None

    def confirm_install(self) -> UserInput:
        return Action.NEXT if self._ask_yes(_("Start the installation now?")) else Action.BACK

    def confirm_update(self) -> bool:
        return self._ask_yes(_("Start the update now?"))
