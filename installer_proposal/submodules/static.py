from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class StaticSubmodule:
    """Fixed summary declared in the control file (no interactive edit)."""

    title: str
    summary: Tuple[str, ...] = field(default_factory=tuple)
    warning: Optional[str] = None
    warning_level: Optional[str] = None
    help: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "StaticSubmodule":
        summary = raw.get("summary") or []
        if isinstance(summary, str):
            summary = [summary]
        return cls(
            title=str(raw.get("title") or ""),
            summary=tuple(str(s) for s in summary),
            warning=raw.get("warning"),
            warning_level=raw.get("warning_level"),
            help=raw.get("help"),
            id=raw.get("id"),
        )

    def description(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"rich_text_title": self.title, "menu_title": self.title}
        if self.id:
            d["id"] = self.id
        return d

    def make_proposal(self, force_reset: bool, language_changed: bool) -> Dict[str, Any]:
        result: Dict[str, Any] = {"raw_proposal": list(self.summary)}
        if self.warning:
            result["warning"] = self.warning
            result["warning_level"] = self.warning_level or "warning"
        if self.help:
            result["help"] = self.help
        return result

    def ask_user(self, info: Mapping[str, Any]) -> Dict[str, Any]:
        return {"workflow_sequence": "next"}

    def write(self, options: Mapping[str, Any]) -> Dict[str, Any]:
        return {"success": True}
