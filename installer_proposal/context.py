from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

STAGES = ("initial", "continue", "normal")
MODES = ("installation", "update", "normal", "autoinst", "autoupgrade")


@dataclass(frozen=True)
class InstallContext:
    """Where in the installation workflow the proposal runs."""

    stage: str = "initial"
    mode: str = "installation"
    proposal: str = "initial"
    # Unattended installs only show the proposal when asked to confirm.
    confirm: bool = False
    # Unattended allow-list of presented submodules; empty means no filter.
    proposal_list: Tuple[str, ...] = field(default_factory=tuple)
    enable_back: bool = True

    @property
    def is_initial_stage(self) -> bool:
        return self.stage == "initial"

    @property
    def is_normal_mode(self) -> bool:
        return self.mode == "normal"

    @property
    def is_update(self) -> bool:
        return self.mode in {"update", "autoupgrade"}

    @property
    def is_installation(self) -> bool:
        return self.mode in {"installation", "autoinst"}

    @property
    def is_unattended(self) -> bool:
        return self.mode in {"autoinst", "autoupgrade"}
