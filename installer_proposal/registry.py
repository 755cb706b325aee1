from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from .context import InstallContext
from .control_file import ProposalEntry, ProposalSource
from .errors import ConfigLoadError, NoProposalsAvailable

logger = logging.getLogger(__name__)

SUFFIX = "_proposal"
MODE_PROPOSAL = "mode_proposal"
DEFAULT_PRIORITY = 50


def normalize_name(name: str) -> str:
    # All proposal clients are named *_proposal; tabs may use the short form.
    return name if SUFFIX in name else name + SUFFIX


def sort_by_priority(modules: Sequence[ProposalEntry]) -> List[str]:
    """Stable ascending sort by presentation priority (missing means 50)."""
    ordered = sorted(modules, key=lambda m: DEFAULT_PRIORITY if m[1] is None else m[1])
    return [name for name, _ in ordered]


def filter_allowed(names: Iterable[str], allowed: Sequence[str]) -> List[str]:
    """Intersect with the unattended allow-list; an empty list filters nothing."""
    names = list(names)
    if not allowed:
        return names
    return [n for n in names if n in allowed]


def tab_modules(tab: Any) -> List[str]:
    if not isinstance(tab, dict):
        return []
    return [normalize_name(str(m)) for m in tab.get("proposal_modules") or []]


def tab_assignment(tabs: Sequence[Any]) -> Dict[str, int]:
    """Map each module to the lowest-indexed tab that lists it."""
    mod2tab: Dict[str, int] = {}
    for index, tab in enumerate(tabs):
        for m in tab_modules(tab):
            mod2tab.setdefault(m, index)
    return mod2tab


@dataclass(frozen=True)
class RegistryView:
    execution_order: Tuple[str, ...]
    presentation_order: Tuple[str, ...]
    locked: frozenset
    mod2tab: Dict[str, int]
    has_tabs: bool
    display_only: Tuple[str, ...] = field(default_factory=tuple)
    properties: Dict[str, Any] = field(default_factory=dict)


class ProposalRegistry:
    """Resolves which submodules take part in a proposal, and in which order."""

    def __init__(self, source: ProposalSource, context: InstallContext) -> None:
        self.source = source
        self.context = context

    def _query(self) -> Tuple[str, str, str]:
        c = self.context
        return c.stage, c.mode, c.proposal

    def is_disabled(self) -> bool:
        return self.context.proposal in self.source.get_disabled_proposals()

    def properties(self) -> Dict[str, Any]:
        return dict(self.source.get_proposal_properties(*self._query()) or {})

    def load(self, current_tab: int = 0) -> RegistryView:
        stage, mode, proposal = self._query()
        logger.info(
            'Getting proposals for stage: "%s" mode: "%s" proposal type: "%s"', stage, mode, proposal
        )

        modules = self.source.get_proposals(stage, mode, proposal)
        if modules is None:
            raise ConfigLoadError(f"Error loading proposals for {proposal!r}")
        if not modules:
            raise NoProposalsAvailable(f"No proposals available for {proposal!r}")

        locked = frozenset(self.source.get_locked_proposals(stage, mode, proposal) or [])
        props = self.properties()

        # In normal mode we don't switch between installation and update.
        if self.context.is_normal_mode:
            modules = [m for m in modules if m[0] != MODE_PROPOSAL]

        allowed = list(self.context.proposal_list)
        tabs = props.get("proposal_tabs")

        if tabs is not None:
            logger.info("Proposal uses tabs")
            tabs = list(tabs)
            mod2tab = tab_assignment(tabs)

            execution: List[str] = []
            for tab in tabs:
                for m in tab_modules(tab):
                    if m not in execution:
                        execution.append(m)
            display_only = [
                n for n in (normalize_name(name) for name, _ in modules) if n not in execution
            ]
            execution.extend(display_only)

            if 0 <= current_tab < len(tabs):
                presentation = tab_modules(tabs[current_tab])
            else:
                logger.warning("Tab %s does not exist (%d tabs)", current_tab, len(tabs))
                presentation = []
            presentation = filter_allowed(presentation, allowed)
        else:
            logger.info("Proposal doesn't use tabs")
            mod2tab = {}
            display_only = []
            execution = [name for name, _ in modules]
            presentation = filter_allowed(sort_by_priority(modules), allowed)

        if self.context.is_normal_mode:
            execution = [m for m in execution if m != MODE_PROPOSAL]
            presentation = [m for m in presentation if m != MODE_PROPOSAL]

        logger.info("Presentation order: %s", presentation)
        logger.info("Execution order: %s", execution)

        return RegistryView(
            execution_order=tuple(execution),
            presentation_order=tuple(presentation),
            locked=locked,
            mod2tab=mod2tab,
            has_tabs=tabs is not None,
            display_only=tuple(display_only),
            properties=props,
        )
