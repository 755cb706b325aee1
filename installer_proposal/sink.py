from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence, Tuple

from .models import MenuItem, UserInput

# Widget ids the proposal dialog relies on.
PROPOSAL_WIDGET = "proposal"
SKIP_WIDGET = "skip"
MENU_WIDGET = "menu"
TAB_WIDGET = "tabs"


@dataclass(frozen=True)
class DialogLayout:
    headline: str
    intro: str
    help_text: str
    icon: str
    enable_skip: bool
    enable_back: bool
    initial_content: str
    tab_labels: Tuple[str, ...] = field(default_factory=tuple)
    current_tab: int = 0


class RenderSink(Protocol):
    """Display technology the proposal pushes state into.

    Everything here is synchronous; ``user_input`` is the only call that
    blocks waiting for the user.
    """

    def set_contents(self, layout: DialogLayout) -> None:
        ...

    def set_content(self, markup: str) -> None:
        ...

    def widget_exists(self, widget_id: str) -> bool:
        ...

    def query_widget(self, widget_id: str, prop: str) -> Any:
        ...

    def set_enabled(self, widget_id: str, enabled: bool) -> None:
        ...

    def set_progress(self, total: int, value: int) -> None:
        ...

    def clear_progress(self) -> None:
        ...

    def replace_menu(self, items: Sequence[MenuItem]) -> None:
        ...

    def set_current_tab(self, index: int) -> None:
        ...

    def set_help_text(self, text: str) -> None:
        ...

    def set_next_button(self, label: str) -> None:
        ...

    def enable_next(self, enabled: bool) -> None:
        ...

    def busy_cursor(self) -> None:
        ...

    def normal_cursor(self) -> None:
        ...

    def user_input(self) -> UserInput:
        ...

    def error(self, message: str) -> None:
        ...

    def timed_message(self, message: str, seconds: int) -> None:
        ...

    def confirm_abort(self, kind: str) -> bool:
        ...

    def continue_cancel(self, message: str) -> bool:
        ...

    def ask_save_file_name(self, start: str, pattern: str, title: str) -> Optional[str]:
        ...

    def confirm_install(self) -> UserInput:
        ...

    def confirm_update(self) -> bool:
        ...
