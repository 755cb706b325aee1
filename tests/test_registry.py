from __future__ import annotations

import pytest

from conftest import FakeSource

from installer_proposal.context import InstallContext
from installer_proposal.errors import ConfigLoadError, NoProposalsAvailable
from installer_proposal.registry import (
    ProposalRegistry,
    filter_allowed,
    normalize_name,
    sort_by_priority,
    tab_assignment,
)

CTX = InstallContext(stage="initial", mode="installation", proposal="initial")

TABS = {
    "proposal_tabs": [
        {"label": "Overview", "proposal_modules": ["m1", "m2"]},
        {"label": "Expert", "proposal_modules": ["m2", "m3_proposal"]},
    ]
}


def test_sort_by_priority_is_stable_with_default_50() -> None:
    modules = [("a", 60), ("b", None), ("c", 10), ("d", 50), ("e", None)]
    assert sort_by_priority(modules) == ["c", "b", "d", "e", "a"]


def test_example_without_tabs_keeps_priority_order() -> None:
    source = FakeSource([("net_proposal", 10), ("software_proposal", 20)])
    view = ProposalRegistry(source, CTX).load()

    assert view.presentation_order == ("net_proposal", "software_proposal")
    assert view.execution_order == ("net_proposal", "software_proposal")
    assert not view.has_tabs
    assert view.mod2tab == {}


def test_execution_order_keeps_config_order_without_tabs() -> None:
    source = FakeSource([("software_proposal", 20), ("net_proposal", 10)])
    view = ProposalRegistry(source, CTX).load()

    assert view.execution_order == ("software_proposal", "net_proposal")
    assert view.presentation_order == ("net_proposal", "software_proposal")


def test_lowest_tab_wins_assignment() -> None:
    mod2tab = tab_assignment(TABS["proposal_tabs"])
    assert mod2tab["m2_proposal"] == 0
    assert mod2tab["m1_proposal"] == 0
    assert mod2tab["m3_proposal"] == 1


def test_normalize_name_appends_suffix_once() -> None:
    assert normalize_name("net") == "net_proposal"
    assert normalize_name("net_proposal") == "net_proposal"


def test_tabs_drive_execution_and_presentation() -> None:
    source = FakeSource([("m1_proposal", None), ("extra_proposal", None)], properties=TABS)
    registry = ProposalRegistry(source, CTX)

    view = registry.load(current_tab=0)
    assert view.has_tabs
    assert view.execution_order == ("m1_proposal", "m2_proposal", "m3_proposal", "extra_proposal")
    assert view.display_only == ("extra_proposal",)
    assert view.presentation_order == ("m1_proposal", "m2_proposal")

    view = registry.load(current_tab=1)
    assert view.presentation_order == ("m2_proposal", "m3_proposal")
    # Execution order does not depend on the visible tab.
    assert view.execution_order == ("m1_proposal", "m2_proposal", "m3_proposal", "extra_proposal")


def test_missing_tab_presents_nothing() -> None:
    source = FakeSource([("m1_proposal", None)], properties=TABS)
    view = ProposalRegistry(source, CTX).load(current_tab=7)
    assert view.presentation_order == ()


def test_normal_mode_drops_mode_proposal() -> None:
    ctx = InstallContext(stage="normal", mode="normal", proposal="network")
    source = FakeSource([("mode_proposal", 1), ("net_proposal", 2)])
    view = ProposalRegistry(source, ctx).load()

    assert view.execution_order == ("net_proposal",)
    assert view.presentation_order == ("net_proposal",)


def test_mode_proposal_kept_outside_normal_mode() -> None:
    source = FakeSource([("mode_proposal", 1), ("net_proposal", 2)])
    view = ProposalRegistry(source, CTX).load()
    assert view.execution_order == ("mode_proposal", "net_proposal")


def test_allow_list_filters_presentation_without_tabs() -> None:
    ctx = InstallContext(proposal_list=("software_proposal",))
    source = FakeSource([("net_proposal", 10), ("software_proposal", 20)])
    view = ProposalRegistry(source, ctx).load()

    assert view.presentation_order == ("software_proposal",)
    assert view.execution_order == ("net_proposal", "software_proposal")


def test_allow_list_filters_presentation_with_tabs() -> None:
    ctx = InstallContext(proposal_list=("m2_proposal",))
    source = FakeSource([("m1_proposal", None)], properties=TABS)
    view = ProposalRegistry(source, ctx).load(current_tab=0)
    assert view.presentation_order == ("m2_proposal",)


def test_empty_allow_list_is_a_no_op() -> None:
    assert filter_allowed(["a", "b"], []) == ["a", "b"]
    assert filter_allowed(["a", "b"], ["b", "z"]) == ["b"]


def test_locked_modules_are_reported() -> None:
    source = FakeSource([("net_proposal", None)], locked=["net_proposal"])
    view = ProposalRegistry(source, CTX).load()
    assert view.locked == frozenset({"net_proposal"})


def test_source_error_is_config_load_error() -> None:
    with pytest.raises(ConfigLoadError) as exc_info:
        ProposalRegistry(FakeSource(None), CTX).load()
    assert not isinstance(exc_info.value, NoProposalsAvailable)


def test_empty_module_list_means_no_proposals() -> None:
    with pytest.raises(NoProposalsAvailable):
        ProposalRegistry(FakeSource([]), CTX).load()


def test_disabled_proposal_type() -> None:
    registry = ProposalRegistry(FakeSource([("a", None)], disabled=["initial"]), CTX)
    assert registry.is_disabled()
