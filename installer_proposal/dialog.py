"""Static parts of the proposal dialog: headline, help, icon, change menu."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from . import html
from .context import InstallContext
from .i18n import _, dgettext
from .models import Action, Description, MenuItem, SessionState
from .sink import DialogLayout

logger = logging.getLogger(__name__)

# Proposal types that never offer "Skip Configuration" unless told otherwise.
NO_SKIP_PROPOSALS = {"initial", "uml"}


def headline(properties: Mapping[str, Any], textdomain: str) -> str:
    label = str(properties.get("label") or "")
    logger.info("headline: %s", label)
    if not label:
        return _("Installation Overview")
    return dgettext(textdomain, label)


def skip_enabled(properties: Mapping[str, Any], proposal: str) -> bool:
    if "enable_skip" in properties:
        value = properties.get("enable_skip")
        if isinstance(value, bool):
            return value
        return str(value or "yes") == "yes"
    return proposal not in NO_SKIP_PROPOSALS


def icon_for(proposal: str, properties: Mapping[str, Any]) -> str:
    if proposal == "network":
        return "yast-network"
    if proposal == "hardware":
        return "yast-controller"
    return str(properties.get("icon") or "yast-software")


def next_button_label(context: InstallContext) -> Optional[str]:
    if context.is_initial_stage and context.proposal == "initial":
        return _("&Update") if context.is_update else _("&Install")
    return None


def help_text(
    context: InstallContext,
    properties: Mapping[str, Any],
    textdomain: str,
    *,
    has_locked: bool = False,
    presentation_order: Sequence[str] = (),
    submodule_helps: Optional[Mapping[str, str]] = None,
) -> str:
    how_to_change = _(
        "<p>\n"
        "Change the values by clicking on the respective headline\n"
        "or by using the <b>Change...</b> menu.\n"
        "</p>\n"
    )
    not_modified = _(
        "<p>\n"
        "Your hard disk has not been modified yet. You can still safely abort.\n"
        "</p>\n"
    )
    proposal = context.proposal

    if proposal == "initial" and context.is_installation:
        text = (
            _("<p>\nSelect <b>Install</b> to perform a new installation with the values displayed.\n</p>\n")
            + how_to_change
            + not_modified
        )
    elif proposal == "initial" and context.is_update:
        text = (
            _("<p>\nSelect <b>Update</b> to perform an update with the values displayed.\n</p>\n")
            + how_to_change
            + not_modified
        )
    elif proposal == "network":
        text = _("<p>\nPut the network settings into effect by pressing <b>Next</b>.\n</p>\n") + how_to_change
    elif proposal == "service":
        text = _("<p>\nPut the service settings into effect by pressing <b>Next</b>.\n</p>\n") + how_to_change
    elif proposal == "hardware":
        text = _("<p>\nPut the hardware settings into effect by pressing <b>Next</b>.\n</p>\n") + how_to_change
    elif proposal == "uml":
        text = _("<P><B>UML Installation Proposal</B></P>") + _(
            "<P>UML (User Mode Linux) installation allows you to start independent\n"
            "Linux virtual machines in the host system.</P>"
        )
    elif properties.get("help"):
        text = dgettext(textdomain, str(properties["help"])) + how_to_change
    else:
        text = _("<p>\nTo use the settings as displayed, press <b>Next</b>.\n</p>\n") + how_to_change

    if has_locked:
        text += _(
            "<p>Some proposals might be\n"
            "locked by the system administrator and therefore cannot be changed. If a\n"
            "locked proposal needs to be changed, ask your system administrator.</p>\n"
        )

    helps = submodule_helps or {}
    for submod in presentation_order:
        if helps.get(submod):
            text += helps[submod]

    return text


def build_menu(
    presentation_order: Sequence[str],
    descriptions: Mapping[str, Description],
    submod2id: Mapping[str, str],
) -> List[MenuItem]:
    items: List[MenuItem] = []
    for submod in presentation_order:
        descr = descriptions.get(submod)
        if descr is None:
            continue
        if descr.menu_titles is not None:
            for entry in descr.menu_titles:
                entry_id = entry.get("id") if isinstance(entry, Mapping) else None
                title = entry.get("title") if isinstance(entry, Mapping) else None
                if entry_id and title:
                    items.append(MenuItem(id=str(entry_id), label=f"{title}..."))
                else:
                    logger.info("Invalid menu item: %s", entry)
        else:
            title = descr.menu_title or descr.rich_text_title or submod
            items.append(MenuItem(id=submod2id[submod], label=f"{title}..."))

    items.append(MenuItem(id=Action.RESET_TO_DEFAULTS, label=_("&Reset to defaults")))
    items.append(MenuItem(id=Action.EXPORT_CONFIG, label=_("&Export Configuration")))
    return items


def build_layout(context: InstallContext, state: SessionState, textdomain: str) -> DialogLayout:
    props: Dict[str, Any] = state.properties
    tabs = props.get("proposal_tabs")
    labels = tuple(
        str(t.get("label") or "Tab") if isinstance(t, dict) else "Tab" for t in (tabs or [])
    )
    return DialogLayout(
        headline=headline(props, textdomain),
        intro=_("Click a headline to make changes."),
        help_text=help_text(
            context,
            props,
            textdomain,
            has_locked=bool(state.locked),
            presentation_order=state.presentation_order,
            submodule_helps=state.submodule_helps,
        ),
        icon=icon_for(context.proposal, props),
        enable_skip=skip_enabled(props, context.proposal),
        enable_back=context.enable_back,
        initial_content=html.newlines(3) + html.para(_("Analyzing your system...")),
        tab_labels=labels,
        current_tab=state.current_tab,
    )
