from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional, Protocol

from .errors import RenderTargetMissing, SubmoduleCallFailure, UnknownSubmodule
from .models import AskUserResult, Description, ProposalResult
from .sink import PROPOSAL_WIDGET, RenderSink

logger = logging.getLogger(__name__)


class Submodule(Protocol):
    """A proposal client.

    Every call returns a plain mapping (or None); the gateway normalizes it.
    """

    def description(self) -> Optional[Mapping[str, Any]]:
        ...

    def make_proposal(self, force_reset: bool, language_changed: bool) -> Optional[Mapping[str, Any]]:
        ...

    def ask_user(self, info: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
        ...

    def write(self, options: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
        ...


class SubmoduleRegistry:
    def __init__(self, submodules: Optional[Mapping[str, Submodule]] = None) -> None:
        self._submodules: Dict[str, Submodule] = dict(submodules or {})

    @classmethod
    def from_specs(cls, specs: Mapping[str, Mapping[str, Any]]) -> "SubmoduleRegistry":
        from .submodules import build_submodule

        return cls({name: build_submodule(name, spec) for name, spec in specs.items()})

    def register(self, name: str, submodule: Submodule) -> None:
        self._submodules[name] = submodule

    def resolve(self, name: str) -> Submodule:
        try:
            return self._submodules[name]
        except KeyError:
            raise UnknownSubmodule(f"No submodule registered under {name!r}") from None

    def __contains__(self, name: object) -> bool:
        return name in self._submodules


def check_leftover_layers(sink: RenderSink) -> bool:
    """Report when a submodule left its own dialog on top of the proposal.

    Returns False (after logging) when the proposal widget is not reachable.
    """
    if sink.widget_exists(PROPOSAL_WIDGET):
        return True
    logger.error("%s", RenderTargetMissing(f"Widget {PROPOSAL_WIDGET!r} is not active"))
    return False


@contextmanager
def busy(sink: RenderSink) -> Iterator[None]:
    sink.busy_cursor()
    try:
        yield
    finally:
        check_leftover_layers(sink)
        sink.normal_cursor()


def _expect_mapping(name: str, function: str, value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise SubmoduleCallFailure(f"{name}.{function}() returned {type(value).__name__}, expected a mapping")
    return value


class SubmoduleGateway:
    """Calls submodules by name and never lets their failures escape."""

    def __init__(self, registry: SubmoduleRegistry, sink: RenderSink) -> None:
        self.registry = registry
        self.sink = sink

    def describe(self, name: str) -> Optional[Description]:
        with busy(self.sink):
            try:
                raw = self.registry.resolve(name).description()
                if raw is None:
                    return None
                raw = _expect_mapping(name, "Description", raw)
            except Exception:
                logger.exception("Description() failed for submodule %s", name)
                return None
        if not raw:
            return None
        return Description.from_mapping(raw)

    def propose(self, name: str, force_reset: bool, language_changed: bool) -> ProposalResult:
        with busy(self.sink):
            try:
                raw = self.registry.resolve(name).make_proposal(force_reset, language_changed)
                raw = _expect_mapping(name, "MakeProposal", raw)
            except Exception:
                logger.exception("MakeProposal() failed for submodule %s", name)
                return ProposalResult()
        logger.debug("%s MakeProposal() returns %s", name, raw)
        return ProposalResult.from_mapping(raw)

    def ask_user(self, name: str, info: Mapping[str, Any]) -> AskUserResult:
        try:
            raw = self.registry.resolve(name).ask_user(dict(info))
            raw = _expect_mapping(name, "AskUser", raw)
        except Exception:
            logger.exception("AskUser() failed for submodule %s", name)
            return AskUserResult()
        logger.debug("%s AskUser() returns %s", name, raw)
        return AskUserResult.from_mapping(raw)

    def write(self, name: str, options: Optional[Mapping[str, Any]] = None) -> bool:
        try:
            raw = self.registry.resolve(name).write(dict(options or {}))
            if raw is None:
                return True
            raw = _expect_mapping(name, "Write", raw)
        except Exception:
            logger.exception("Write() failed for submodule %s", name)
            return False
        success = raw.get("success", True)
        return True if success is None else bool(success)
