from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from .console import ConsoleSink
from .context import MODES, STAGES, InstallContext
from .control_file import DEFAULT_CONTROL_PATH, load_control
from .errors import ConfigLoadError
from .gateway import SubmoduleGateway, SubmoduleRegistry
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .models import Outcome
from .registry import ProposalRegistry
from .session import ProposalSession
from .sink import RenderSink

logger = logging.getLogger(__name__)

EXIT_CODES = {
    Outcome.AUTO: 0,
    Outcome.NEXT: 0,
    Outcome.FINISH: 0,
    Outcome.BACK: 1,
    Outcome.ABORT: 1,
}


def run(
    *,
    context: InstallContext,
    control_path: str = DEFAULT_CONTROL_PATH,
    log_path: str = DEFAULT_LOG_PATH,
    sink: Optional[RenderSink] = None,
) -> Outcome:
    """Show the proposal for ``context`` and return the workflow outcome."""

    configure_logging(log_path=log_path)

    try:
        control = load_control(control_path)
        registry = SubmoduleRegistry.from_specs(control.submodule_specs)
    except ConfigLoadError:
        logger.exception("Cannot load control file %s", control_path)
        return Outcome.ABORT

    sink = sink or ConsoleSink()
    session = ProposalSession(
        context,
        ProposalRegistry(control, context),
        SubmoduleGateway(registry, sink),
        sink,
        textdomain=control.textdomain,
    )
    outcome = session.run()
    logger.info("Proposal finished: %s", outcome.value)
    return outcome


def main(argv: Optional[Sequence[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="installer-proposal")
    p.add_argument("--control", default=DEFAULT_CONTROL_PATH, help="Path to the control file (yaml|json)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the proposal log")
    p.add_argument("--stage", default="initial", choices=STAGES)
    p.add_argument("--mode", default="installation", choices=MODES)
    p.add_argument("--proposal", default="initial", help="Proposal type (initial, network, hardware, ...)")
    p.add_argument("--confirm", action="store_true", help="Show the proposal even in unattended modes")
    p.add_argument(
        "--proposal-list",
        action="append",
        default=[],
        help="Only present this submodule (repeatable)",
    )
    p.add_argument("--no-back", action="store_true", help="Hide the Back button")

    args = p.parse_args(argv)

    context = InstallContext(
        stage=args.stage,
        mode=args.mode,
        proposal=args.proposal,
        confirm=bool(args.confirm),
        proposal_list=tuple(args.proposal_list),
        enable_back=not args.no_back,
    )
    outcome = run(context=context, control_path=args.control, log_path=args.log)
    print(outcome.value)
    return EXIT_CODES[outcome]


if __name__ == "__main__":
    raise SystemExit(main())
