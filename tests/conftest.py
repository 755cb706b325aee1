from __future__ import annotations

from collections import deque
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pytest

from installer_proposal.context import InstallContext
from installer_proposal.gateway import SubmoduleGateway, SubmoduleRegistry
from installer_proposal.models import Action
from installer_proposal.registry import ProposalRegistry
from installer_proposal.session import ProposalSession
from installer_proposal.sink import PROPOSAL_WIDGET, SKIP_WIDGET


class FakeSink:
    """Records everything pushed to the display; replays scripted input."""

    def __init__(self, inputs: Iterable[Any] = (), *, skip_widget: bool = False, skip: bool = False) -> None:
        self.inputs = deque(inputs)
        self.has_skip_widget = skip_widget
        self.skip = skip
        self.has_proposal_widget = True
        self.layouts: List[Any] = []
        self.contents: List[str] = []
        self.errors: List[str] = []
        self.messages: List[str] = []
        self.menus: List[List[Any]] = []
        self.tabs: List[int] = []
        self.help_texts: List[str] = []
        self.next_labels: List[str] = []
        self.progress: List[tuple] = []
        self.enabled: Dict[str, bool] = {}
        self.busy = 0
        self.normal = 0
        self.cleared = 0
        self.abort_answer = True
        self.abort_kinds: List[str] = []
        self.continue_answer = True
        self.save_path: Optional[str] = None
        self.install_answer: Any = Action.NEXT
        self.update_answer = True

    @property
    def content(self) -> str:
        return self.contents[-1] if self.contents else ""

    def set_contents(self, layout) -> None:
        self.layouts.append(layout)

    def set_content(self, markup: str) -> None:
        self.contents.append(markup)

    def widget_exists(self, widget_id: str) -> bool:
        if widget_id == SKIP_WIDGET:
            return self.has_skip_widget
        if widget_id == PROPOSAL_WIDGET:
            return self.has_proposal_widget
        return True

    def query_widget(self, widget_id: str, prop: str) -> Any:
        if widget_id == SKIP_WIDGET:
            return self.skip
        return None

    def set_enabled(self, widget_id: str, enabled: bool) -> None:
        self.enabled[widget_id] = enabled

    def set_progress(self, total: int, value: int) -> None:
        self.progress.append((total, value))

    def clear_progress(self) -> None:
        self.cleared += 1

    def replace_menu(self, items) -> None:
        self.menus.append(list(items))

    def set_current_tab(self, index: int) -> None:
        self.tabs.append(index)

    def set_help_text(self, text: str) -> None:
        self.help_texts.append(text)

    def set_next_button(self, label: str) -> None:
        self.next_labels.append(label)

    def enable_next(self, enabled: bool) -> None:
        pass

    def busy_cursor(self) -> None:
        self.busy += 1

    def normal_cursor(self) -> None:
        self.normal += 1

    def user_input(self) -> Any:
        if not self.inputs:
            raise AssertionError("proposal asked for more input than scripted")
        value = self.inputs.popleft()
        if value is Action.SKIP:
            self.skip = True
        elif value is Action.DONTSKIP:
            self.skip = False
        return value

    def error(self, message: str) -> None:
        self.errors.append(message)

    def timed_message(self, message: str, seconds: int) -> None:
        self.messages.append(message)

    def confirm_abort(self, kind: str) -> bool:
        self.abort_kinds.append(kind)
        return self.abort_answer

    def continue_cancel(self, message: str) -> bool:
        return self.continue_answer

    def ask_save_file_name(self, start: str, pattern: str, title: str) -> Optional[str]:
        return self.save_path

    def confirm_install(self) -> Any:
        return self.install_answer

    def confirm_update(self) -> bool:
        return self.update_answer


class FakeSubmodule:
    """Scripted proposal client.

    ``proposals`` is consumed one per MakeProposal call; the last one repeats.
    """

    def __init__(
        self,
        title: str,
        proposals: Sequence[Mapping[str, Any]] = ({"raw_proposal": ["ok"]},),
        *,
        description: Optional[Mapping[str, Any]] = None,
        ask: Optional[Mapping[str, Any]] = None,
        write: Any = None,
        log: Optional[List[tuple]] = None,
        on_write=None,
    ) -> None:
        self.title = title
        self.proposals = list(proposals)
        self._description = description
        self.ask = ask or {"workflow_sequence": "next"}
        self.write_result = write if write is not None else {"success": True}
        self.log = log if log is not None else []
        self.on_write = on_write
        self.proposal_calls: List[tuple] = []
        self.ask_calls: List[dict] = []
        self.write_calls: List[dict] = []
        self.describe_calls = 0

    def description(self):
        self.describe_calls += 1
        if self._description is not None:
            return self._description
        return {"rich_text_title": self.title}

    def make_proposal(self, force_reset: bool, language_changed: bool):
        self.proposal_calls.append((force_reset, language_changed))
        self.log.append(("propose", self.title))
        index = min(len(self.proposal_calls), len(self.proposals)) - 1
        result = self.proposals[index]
        if isinstance(result, Exception):
            raise result
        return result

    def ask_user(self, info):
        self.ask_calls.append(dict(info))
        return self.ask

    def write(self, options):
        self.write_calls.append(dict(options))
        self.log.append(("write", self.title))
        if self.on_write:
            self.on_write(options)
        if isinstance(self.write_result, Exception):
            raise self.write_result
        return self.write_result


class FakeSource:
    def __init__(
        self,
        modules: Optional[List[tuple]],
        *,
        locked: Sequence[str] = (),
        properties: Optional[Dict[str, Any]] = None,
        disabled: Sequence[str] = (),
    ) -> None:
        self.modules = modules
        self.locked = list(locked)
        self.properties = dict(properties or {})
        self.disabled = list(disabled)
        self.queries: List[tuple] = []

    def get_proposals(self, stage, mode, proposal):
        self.queries.append((stage, mode, proposal))
        return None if self.modules is None else list(self.modules)

    def get_locked_proposals(self, stage, mode, proposal):
        return list(self.locked)

    def get_proposal_properties(self, stage, mode, proposal):
        return dict(self.properties)

    def get_disabled_proposals(self):
        return list(self.disabled)


def make_session(
    source: FakeSource,
    submodules: Mapping[str, Any],
    sink: FakeSink,
    context: Optional[InstallContext] = None,
) -> ProposalSession:
    context = context or InstallContext(stage="continue", mode="installation", proposal="network")
    registry = SubmoduleRegistry(dict(submodules))
    return ProposalSession(
        context,
        ProposalRegistry(source, context),
        SubmoduleGateway(registry, sink),
        sink,
    )


def prepare(session: ProposalSession) -> ProposalSession:
    """Set the dialog up the way ``run`` does, without the input loop."""
    session.build_dialog()
    session.load_submodules()
    assert session.describe_and_build_menu()
    return session


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()
