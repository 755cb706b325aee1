from __future__ import annotations


class ProposalError(RuntimeError):
    pass


class ConfigLoadError(ProposalError):
    """The control file could not provide proposals for this stage/mode."""


class NoProposalsAvailable(ConfigLoadError):
    """The control file matched, but lists no submodules."""


class SubmoduleCallFailure(ProposalError):
    pass


class UnknownSubmodule(SubmoduleCallFailure):
    pass


class BlockingProposal(ProposalError):
    pass


class ExportError(ProposalError):
    pass


class RenderTargetMissing(ProposalError):
    pass
