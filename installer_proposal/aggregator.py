from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, Protocol, Sequence, Tuple

from . import html
from .errors import RenderTargetMissing
from .gateway import SubmoduleGateway
from .i18n import _
from .models import ProposalResult, SessionState, Severity
from .sink import PROPOSAL_WIDGET, RenderSink

logger = logging.getLogger(__name__)

# A submodule that keeps reporting a language change must not restart
# the proposal forever.
MAX_LANGUAGE_RESTARTS = 3


class ProposalHost(Protocol):
    """Dialog-level operations the aggregator triggers on its owner."""

    def retranslate(self) -> None:
        ...

    def switch_tab(self, index: int) -> None:
        ...

    def refresh_help(self) -> None:
        ...


def compose(parts: Mapping[str, str], order: Sequence[str]) -> str:
    return "".join(parts.get(mod, "") for mod in order)


def display_proposal(sink: RenderSink, markup: str) -> None:
    if sink.widget_exists(PROPOSAL_WIDGET):
        sink.set_content(markup)
    else:
        logger.error("%s", RenderTargetMissing(f"Widget {PROPOSAL_WIDGET!r} does not exist"))


def format_result(result: ProposalResult) -> Tuple[str, bool]:
    """Render one submodule's proposal body.

    Returns the markup and whether the result blocks the installation.
    """
    out = ""
    if result.warning:
        level = result.warning_level or Severity.WARNING
        warning = result.warning
        if level is Severity.NOTICE:
            warning = html.bold(warning)
        elif level is not Severity.OK:
            warning = html.colorize(warning, "red")
        out += html.para(warning)

    if result.preformatted_proposal:
        out += result.preformatted_proposal
    else:
        # Neither form present usually means an internal error in the submodule.
        out += html.bullet_list(result.raw_proposal or [_("ERROR: No proposal")])

    return out, result.severity.is_blocking


class ProposalAggregator:
    def __init__(
        self,
        gateway: SubmoduleGateway,
        sink: RenderSink,
        state: SessionState,
        host: ProposalHost,
    ) -> None:
        self.gateway = gateway
        self.sink = sink
        self.state = state
        self.host = host

    def heading(self, submod: str) -> str:
        title = self.state.titles.get(submod) or _("ERROR: Missing Title")
        if submod in self.state.locked or "<a" in title:
            return html.heading(title)
        return html.heading(html.link(title, self.state.submod2id.get(submod, "")))

    def _placeholders(self, modules: Sequence[str]) -> Dict[str, str]:
        parts: Dict[str, str] = {}
        for submod in modules:
            if submod in self.state.already_called:
                message = _("Adapting the proposal to the current settings...")
            else:
                message = _("Analyzing your system...")
                self.state.already_called.append(submod)
            parts[submod] = self.heading(submod) + html.para(message)
        return parts

    def _wants_help(self, submod: str) -> bool:
        tab = self.state.mod2tab.get(submod)
        return tab is None or tab == self.state.current_tab

    def make_proposal(self, force_reset: bool = False, language_changed: bool = False) -> None:
        """Ask every submodule for its proposal and redisplay the result."""

        restarts = 0
        while self._run_pass(force_reset, language_changed, allow_restart=restarts < MAX_LANGUAGE_RESTARTS):
            restarts += 1
            logger.info("Language changed, restarting proposal (%d)", restarts)
            self.host.retranslate()
            language_changed = True

    def _run_pass(self, force_reset: bool, language_changed: bool, *, allow_restart: bool) -> bool:
        """One walk over the execution order. Returns True to request a restart."""

        state = self.state
        modules = list(state.execution_order)
        total = 2 * len(modules)
        tick = 0
        self.sink.set_progress(total, tick)

        parts = self._placeholders(modules)
        links: Dict[str, str] = {}
        helps: Dict[str, str] = {}
        have_blocker = False
        tab_to_switch: Optional[int] = None
        current_tab_affected = False
        skip_the_rest = False

        display_proposal(self.sink, compose(parts, state.presentation_order))

        self.sink.enable_next(False)
        self.sink.busy_cursor()
        logger.debug("Submodules list before execution: %s", modules)

        try:
            for submod in modules:
                tick += 1
                self.sink.set_progress(total, tick)

                if not skip_the_rest:
                    locked = submod in state.locked
                    result = self.gateway.propose(submod, force_reset and not locked, language_changed)

                    if result.help and self._wants_help(submod):
                        logger.info("Submodule '%s' has its own help", submod)
                        helps[submod] = result.help

                    tab = state.mod2tab.get(submod)
                    if tab is not None and result.severity.forces_tab:
                        logger.info("Mod2Tab: '%s' -> %s", submod, tab)
                        # Always switch to the more detailed (higher) tab.
                        if tab_to_switch is None or tab > tab_to_switch:
                            tab_to_switch = tab
                        if tab == state.current_tab:
                            current_tab_affected = True

                    for link in result.links:
                        links[link] = submod

                    if result.language_changed:
                        if allow_restart:
                            return True
                        logger.error("%s keeps reporting a language change, ignoring it", submod)

                    body, blocking = format_result(result)
                    have_blocker = have_blocker or blocking
                    parts[submod] = self.heading(submod) + body
                    display_proposal(self.sink, compose(parts, state.presentation_order))

                    if result.severity is Severity.FATAL:
                        logger.info("Fatal proposal from %s, skipping the rest", submod)
                        skip_the_rest = True

                tick += 1
                self.sink.set_progress(total, tick)

            state.html = parts
            state.link2submod = links
            state.submodule_helps = helps
            state.have_blocker = have_blocker

            if helps:
                self.host.refresh_help()

            if state.has_tabs and tab_to_switch is not None and not current_tab_affected:
                logger.info("Switching to tab '%s'", tab_to_switch)
                self.host.switch_tab(tab_to_switch)
        finally:
            self.sink.clear_progress()
            self.sink.enable_next(True)
            self.sink.normal_cursor()
        return False
