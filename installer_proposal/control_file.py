from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

import yaml

from .errors import ConfigLoadError

logger = logging.getLogger(__name__)

DEFAULT_CONTROL_PATH = "/etc/installer-proposal/control.yaml"

# (submodule name, presentation priority)
ProposalEntry = Tuple[str, Optional[int]]


class ProposalSource(Protocol):
    """Product configuration queried by the proposal registry."""

    def get_proposals(self, stage: str, mode: str, proposal: str) -> Optional[List[ProposalEntry]]:
        ...

    def get_locked_proposals(self, stage: str, mode: str, proposal: str) -> List[str]:
        ...

    def get_proposal_properties(self, stage: str, mode: str, proposal: str) -> Dict[str, Any]:
        ...

    def get_disabled_proposals(self) -> List[str]:
        ...


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to YAML; control files are hand-written.
    return "yaml"


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [str(v) for v in value]


def _matches(field_value: Any, wanted: str) -> bool:
    allowed = _as_list(field_value)
    return not allowed or wanted in allowed or "all" in allowed


@dataclass(frozen=True)
class ControlFile:
    raw: Dict[str, Any]

    @property
    def textdomain(self) -> str:
        return str(self.raw.get("textdomain") or "control")

    @property
    def submodule_specs(self) -> Dict[str, Dict[str, Any]]:
        specs = self.raw.get("submodules") or {}
        if not isinstance(specs, dict):
            raise ConfigLoadError("control file: submodules must be a mapping")
        return specs

    def _entry(self, stage: str, mode: str, proposal: str) -> Optional[Mapping[str, Any]]:
        for entry in self.raw.get("proposals") or []:
            if not isinstance(entry, Mapping):
                continue
            if str(entry.get("name")) != proposal:
                continue
            if _matches(entry.get("stage"), stage) and _matches(entry.get("mode"), mode):
                return entry
        return None

    def get_proposals(self, stage: str, mode: str, proposal: str) -> Optional[List[ProposalEntry]]:
        entry = self._entry(stage, mode, proposal)
        if entry is None:
            logger.error("No proposal %r defined for stage=%s mode=%s", proposal, stage, mode)
            return None

        modules: List[ProposalEntry] = []
        for m in entry.get("proposal_modules") or []:
            if isinstance(m, Mapping):
                name = str(m.get("name") or "")
                order = m.get("presentation_order")
                if order is not None:
                    try:
                        order = int(order)
                    except (TypeError, ValueError) as e:
                        raise ConfigLoadError(f"{name}: presentation_order must be an integer") from e
                modules.append((name, order))
            else:
                modules.append((str(m), None))
        return modules

    def get_locked_proposals(self, stage: str, mode: str, proposal: str) -> List[str]:
        locked = _as_list(self.raw.get("locked_modules"))
        entry = self._entry(stage, mode, proposal) or {}
        for m in _as_list(entry.get("locked_modules")):
            if m not in locked:
                locked.append(m)
        return locked

    def get_proposal_properties(self, stage: str, mode: str, proposal: str) -> Dict[str, Any]:
        entry = self._entry(stage, mode, proposal) or {}
        props = {k: entry[k] for k in ("label", "icon", "help", "enable_skip") if k in entry}
        if "proposal_tabs" in entry:
            props["proposal_tabs"] = list(entry.get("proposal_tabs") or [])
        return props

    def get_disabled_proposals(self) -> List[str]:
        return _as_list(self.raw.get("disabled_proposals"))


def load_control(path: str) -> ControlFile:
    p = Path(path)
    if not p.exists():
        raise ConfigLoadError(f"Control file not found: {path}")

    fmt = _detect_format(p)
    try:
        if fmt == "json":
            data = json.loads(p.read_text(encoding="utf-8"))
        else:
            data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigLoadError(f"Cannot read control file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigLoadError(f"Control file must be an object/dict, got {type(data)}")

    return ControlFile(raw=data)
