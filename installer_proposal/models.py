from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


class Severity(Enum):
    OK = "ok"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"
    BLOCKER = "blocker"
    FATAL = "fatal"

    @classmethod
    def parse(cls, value: Any) -> Optional["Severity"]:
        if value is None or isinstance(value, Severity):
            return value
        try:
            return cls(str(value).lstrip(":").lower())
        except ValueError:
            return None

    @property
    def forces_tab(self) -> bool:
        return self in {Severity.ERROR, Severity.BLOCKER, Severity.FATAL}

    @property
    def is_blocking(self) -> bool:
        return self in {Severity.BLOCKER, Severity.FATAL}


class Outcome(Enum):
    """Terminal results handed back to the installer workflow."""

    AUTO = "auto"
    NEXT = "next"
    BACK = "back"
    ABORT = "abort"
    FINISH = "finish"


class Action(Enum):
    ACCEPT = "accept"
    CANCEL = "cancel"
    NEXT = "next"
    BACK = "back"
    ABORT = "abort"
    FINISH = "finish"
    RESET_TO_DEFAULTS = "reset_to_defaults"
    EXPORT_CONFIG = "export_config"
    SKIP = "skip"
    DONTSKIP = "dontskip"


# A tab index, a hyperlink / menu id, or a named button.
UserInput = Union[int, str, Action, None]

# Workflow sequences that end an AskUser round without re-proposing.
LEAVING_SEQUENCES = frozenset({"cancel", "back", "abort", "finish"})


def _flag(raw: Mapping[str, Any], key: str) -> bool:
    return bool(raw.get(key, False))


@dataclass(frozen=True)
class Description:
    rich_text_title: Optional[str] = None
    rich_text_raw_title: Optional[str] = None
    id: Optional[str] = None
    menu_title: Optional[str] = None
    menu_titles: Optional[Tuple[Dict[str, Any], ...]] = None
    help: Optional[str] = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Description":
        menu_titles = raw.get("menu_titles")
        return cls(
            rich_text_title=raw.get("rich_text_title"),
            rich_text_raw_title=raw.get("rich_text_raw_title"),
            id=raw.get("id"),
            menu_title=raw.get("menu_title"),
            menu_titles=tuple(menu_titles) if menu_titles is not None else None,
            help=raw.get("help"),
        )

    def title_for(self, name: str) -> str:
        return self.rich_text_title or self.rich_text_raw_title or name


@dataclass(frozen=True)
class ProposalResult:
    warning: Optional[str] = None
    warning_level: Optional[Severity] = None
    preformatted_proposal: Optional[str] = None
    raw_proposal: Optional[Tuple[str, ...]] = None
    links: Tuple[str, ...] = field(default_factory=tuple)
    language_changed: bool = False
    mode_changed: bool = False
    rootpart_changed: bool = False
    help: Optional[str] = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ProposalResult":
        raw_proposal = raw.get("raw_proposal")
        return cls(
            warning=raw.get("warning"),
            warning_level=Severity.parse(raw.get("warning_level")),
            preformatted_proposal=raw.get("preformatted_proposal"),
            raw_proposal=tuple(str(x) for x in raw_proposal) if raw_proposal is not None else None,
            links=tuple(str(x) for x in (raw.get("links") or [])),
            language_changed=_flag(raw, "language_changed"),
            mode_changed=_flag(raw, "mode_changed"),
            rootpart_changed=_flag(raw, "rootpart_changed"),
            help=raw.get("help"),
        )

    @property
    def severity(self) -> Severity:
        return self.warning_level or Severity.OK


@dataclass(frozen=True)
class AskUserResult:
    sequence: str = "next"
    language_changed: bool = False
    mode_changed: bool = False
    rootpart_changed: bool = False

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "AskUserResult":
        sequence = raw.get("workflow_sequence") or "next"
        if isinstance(sequence, Enum):
            sequence = sequence.value
        return cls(
            sequence=str(sequence).lstrip(":"),
            language_changed=_flag(raw, "language_changed"),
            mode_changed=_flag(raw, "mode_changed"),
            rootpart_changed=_flag(raw, "rootpart_changed"),
        )


@dataclass(frozen=True)
class MenuItem:
    id: Union[str, Action]
    label: str


@dataclass
class SessionState:
    """Mutable state owned by the session; replaced per aggregation pass."""

    current_tab: int = 0
    has_tabs: bool = False
    skip: bool = False
    have_blocker: bool = False
    execution_order: List[str] = field(default_factory=list)
    presentation_order: List[str] = field(default_factory=list)
    display_only: List[str] = field(default_factory=list)
    locked: frozenset = frozenset()
    mod2tab: Dict[str, int] = field(default_factory=dict)
    titles: Dict[str, str] = field(default_factory=dict)
    descriptions: Dict[str, Description] = field(default_factory=dict)
    submod2id: Dict[str, str] = field(default_factory=dict)
    id2submod: Dict[str, str] = field(default_factory=dict)
    link2submod: Dict[str, str] = field(default_factory=dict)
    already_called: List[str] = field(default_factory=list)
    submodule_helps: Dict[str, str] = field(default_factory=dict)
    # submodule -> rendered markup, in execution order
    html: Dict[str, str] = field(default_factory=dict)
    properties: Dict[str, Any] = field(default_factory=dict)

    def document(self) -> str:
        return "".join(self.html.get(mod, "") for mod in self.presentation_order)
