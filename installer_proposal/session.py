from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Set

from . import html
from .aggregator import ProposalAggregator, display_proposal
from .context import InstallContext
from .dialog import build_layout, build_menu, help_text, next_button_label
from .errors import BlockingProposal, ConfigLoadError, ExportError
from .gateway import SubmoduleGateway, check_leftover_layers
from .i18n import _
from .models import LEAVING_SEQUENCES, Action, Description, Outcome, SessionState, UserInput
from .registry import ProposalRegistry
from .sink import MENU_WIDGET, PROPOSAL_WIDGET, SKIP_WIDGET, RenderSink

logger = logging.getLogger(__name__)

# Submodule that knows how to store the whole configuration as a profile.
EXPORT_SUBMODULE = "clone_proposal"


class ProposalSession:
    """The interactive proposal dialog.

    Owns all session state; it is only mutated between two user inputs
    (or by nested re-proposals triggered from within one of them).
    """

    def __init__(
        self,
        context: InstallContext,
        registry: ProposalRegistry,
        gateway: SubmoduleGateway,
        sink: RenderSink,
        *,
        textdomain: str = "control",
    ) -> None:
        self.context = context
        self.registry = registry
        self.gateway = gateway
        self.sink = sink
        self.textdomain = textdomain
        self.state = SessionState()
        self.unavailable: Set[str] = set()
        self.aggregator = ProposalAggregator(gateway, sink, self.state, self)

    # -- dialog ------------------------------------------------------------

    def help_text(self) -> str:
        return help_text(
            self.context,
            self.state.properties,
            self.textdomain,
            has_locked=bool(self.state.locked),
            presentation_order=self.state.presentation_order,
            submodule_helps=self.state.submodule_helps,
        )

    def build_dialog(self) -> None:
        self.state.properties = self.registry.properties()
        self.state.has_tabs = "proposal_tabs" in self.state.properties
        self.sink.set_contents(build_layout(self.context, self.state, self.textdomain))
        if self.state.has_tabs:
            self.sink.set_current_tab(self.state.current_tab)

    def load_submodules(self) -> None:
        view = self.registry.load(self.state.current_tab)
        state = self.state
        state.execution_order = [m for m in view.execution_order if m not in self.unavailable]
        state.presentation_order = list(view.presentation_order)
        state.display_only = list(view.display_only)
        state.locked = view.locked
        state.mod2tab = dict(view.mod2tab)
        state.has_tabs = view.has_tabs
        state.properties = dict(view.properties)

    def describe_and_build_menu(self) -> bool:
        """Collect titles and ids; drop submodules that are not available.

        Returns False when no submodule is left.
        """
        available: List[str] = []
        titles: Dict[str, str] = {}
        descriptions: Dict[str, Description] = {}
        submod2id: Dict[str, str] = {}
        id2submod: Dict[str, str] = {}
        no = 1

        for submod in self.state.execution_order:
            descr = self.gateway.describe(submod)
            if descr is None:
                logger.info("Submodule %s not available (not installed?)", submod)
                self.unavailable.add(submod)
                continue
            available.append(submod)
            descriptions[submod] = descr
            titles[submod] = descr.title_for(submod)
            submod_id = descr.id or f"module_{no}"
            submod2id[submod] = submod_id
            id2submod[submod_id] = submod
            no += 1

        state = self.state
        state.execution_order = available
        state.titles = titles
        state.descriptions = descriptions
        state.submod2id = submod2id
        state.id2submod = id2submod
        logger.info("Execution order after rewrite: %s", available)

        self.sink.replace_menu(build_menu(state.presentation_order, descriptions, submod2id))
        return no > 1

    def retranslate(self) -> None:
        logger.debug("Retranslating proposal dialog")
        self.build_dialog()
        self.describe_and_build_menu()

    def refresh_help(self) -> None:
        self.sink.set_help_text(self.help_text())

    def _show_tab(self, index: int) -> None:
        self.state.current_tab = index
        self.load_submodules()
        display_proposal(self.sink, self.state.document())
        self.describe_and_build_menu()

    def switch_tab(self, index: int) -> None:
        self._show_tab(index)
        self.sink.set_current_tab(index)

    def set_next_button(self) -> None:
        label = next_button_label(self.context)
        if label:
            self.sink.set_next_button(label)

    # -- main loop ---------------------------------------------------------

    def run(self) -> Outcome:
        c = self.context
        if not c.confirm and c.is_unattended:
            return Outcome.AUTO

        logger.info("Proposal %r (stage=%s mode=%s)", c.proposal, c.stage, c.mode)
        if self.registry.is_disabled():
            logger.info("Proposal %r is disabled", c.proposal)
            return Outcome.AUTO

        try:
            self.build_dialog()
            self.load_submodules()

            self.sink.set_enabled(PROPOSAL_WIDGET, False)
            self.sink.enable_next(True)

            if not self.describe_and_build_menu():
                return Outcome.AUTO

            self.aggregator.make_proposal(False, False)
            return self._input_loop()
        except ConfigLoadError as e:
            logger.error("%s", e)
            return Outcome.ABORT

    def _input_loop(self) -> Outcome:
        while True:
            self.sink.set_enabled(PROPOSAL_WIDGET, True)
            # Some proposal modules change the button while called.
            self.set_next_button()

            user_input = self.sink.user_input()
            if user_input is Action.ACCEPT:
                return Outcome.NEXT
            if user_input is Action.CANCEL:
                return Outcome.ABORT

            logger.info("Proposal - UserInput: '%s'", user_input)
            self.sink.set_enabled(PROPOSAL_WIDGET, False)

            try:
                outcome = self.handle(user_input)
            except ExportError as e:
                logger.error("Export failed: %s", e)
                self.sink.error(str(e))
                continue
            if outcome is not None:
                return outcome

    def handle(self, user_input: UserInput) -> Optional[Outcome]:
        """Dispatch one user input; a returned outcome ends the dialog."""

        if isinstance(user_input, int) and not isinstance(user_input, bool):
            self._show_tab(user_input)
            return None
        if isinstance(user_input, str):
            return self.ask_user(user_input)

        if user_input is Action.FINISH:
            return Outcome.FINISH
        if user_input is Action.ABORT:
            kind = "painless" if self.context.is_initial_stage else "incomplete"
            return Outcome.ABORT if self.sink.confirm_abort(kind) else None
        if user_input is Action.RESET_TO_DEFAULTS:
            question = _("Really reset everything to default values?") + "\n" + _("You will lose all changes.")
            if self.sink.continue_cancel(question):
                self.aggregator.make_proposal(True, False)
            return None
        if user_input is Action.EXPORT_CONFIG:
            self.export_config()
            return None
        if user_input in (Action.SKIP, Action.DONTSKIP):
            self.toggle_skip()
            return None
        if user_input is Action.NEXT:
            return self.commit()
        if user_input is Action.BACK:
            if self.context.is_initial_stage:
                self.sink.set_next_button(_("&Next"))
            return Outcome.BACK

        logger.debug("Ignoring input %r", user_input)
        return None

    # -- actions -----------------------------------------------------------

    def ask_user(self, link: str) -> Optional[Outcome]:
        state = self.state
        submod = state.id2submod.get(link) or state.link2submod.get(link)
        if not submod:
            logger.warning("No submodule handles link %r", link)
            return None
        if submod in state.locked:
            logger.info("Submodule %s is locked, not asking the user", submod)
            return None

        info = {"has_next": False}
        if submod != link:
            info["chosen_id"] = link

        result = self.gateway.ask_user(submod, info)

        if result.sequence not in LEAVING_SEQUENCES:
            if result.language_changed:
                self.retranslate()
            if result.mode_changed:
                self.build_dialog()
                self.load_submodules()
                if not self.describe_and_build_menu():
                    logger.error("No proposal submodule left after mode change")
            if result.rootpart_changed:
                logger.info("Root partition changed by %s", submod)
            # Re-propose on top of the user's changes.
            self.aggregator.make_proposal(False, result.language_changed)

        check_leftover_layers(self.sink)

        # The submodule may finish the whole workflow from its own dialog.
        if result.sequence == "finish":
            return Outcome.FINISH
        return None

    def export_config(self) -> None:
        path = self.sink.ask_save_file_name("/", "*.xml", _("Location of Stored Configuration"))
        if not path:
            return

        # Always write the profile, even if the user chose not to store one.
        self.gateway.write(EXPORT_SUBMODULE, {"force": True, "target_path": path})
        if not Path(path).exists():
            raise ExportError(_("Failed to store configuration. Details can be found in log."))
        logger.info("Configuration exported to %s", path)

    def toggle_skip(self) -> None:
        if self.sink.query_widget(SKIP_WIDGET, "value"):
            self.state.skip = True
            display_proposal(
                self.sink,
                html.newlines(3) + html.para(_("Skipping configuration upon user request")),
            )
            self.sink.set_enabled(MENU_WIDGET, False)
        else:
            self.state.skip = False
            self.aggregator.make_proposal(False, False)
            self.sink.set_enabled(MENU_WIDGET, True)

    def commit(self) -> Optional[Outcome]:
        # Without skip buttons there is nothing to write, but a blocker
        # still cannot be passed.
        has_skip = self.sink.widget_exists(SKIP_WIDGET)
        skip = bool(self.sink.query_widget(SKIP_WIDGET, "value")) if has_skip else True
        skip_blocker = has_skip and skip
        self.state.skip = skip

        if self.state.have_blocker and not skip_blocker:
            blocked = BlockingProposal(
                _("The proposal contains an error that must be\nresolved before continuing.\n")
            )
            logger.warning("Not continuing: %s", blocked)
            self.sink.error(str(blocked))
            return None

        confirmed: UserInput = Action.NEXT
        if self.context.is_initial_stage:
            confirmed = self.sink.confirm_install()
        elif self.context.stage == "normal" and self.context.is_update:
            if not self.sink.confirm_update():
                logger.info("Update not confirmed, returning back...")
                confirmed = None

        if confirmed is not Action.NEXT:
            return None

        if not skip:
            self.write_settings()
        return Outcome.NEXT

    def write_settings(self) -> bool:
        success = True
        for submod in self.state.execution_order:
            ok = self.gateway.write(submod)
            if not ok:
                logger.error("Write() failed for submodule %s", submod)
            success = success and ok

        if not success:
            logger.error("Write() failed for one or more submodules")
            # Submodules report their own errors; this is just the summary.
            self.sink.timed_message(_("Configuration saved.\nThere were errors."), 3)
        return success
