from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from ..errors import SubmoduleCallFailure
from ..lib.command import fmt_argv, run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScriptSubmodule:
    """A proposal client living in its own executable.

    The client is started as ``argv + [Function]`` and talks JSON: the
    request object on stdin, the reply object on stdout.
    """

    name: str
    argv: Tuple[str, ...]
    timeout_s: Optional[float] = None

    def _call(self, function: str, request: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        argv = [*self.argv, function]
        try:
            res = run_cmd(
                argv,
                check=False,
                input_text=json.dumps(dict(request), sort_keys=True),
                timeout_s=self.timeout_s,
            )
        except (OSError, ValueError, subprocess.TimeoutExpired) as e:
            raise SubmoduleCallFailure(f"{self.name}: cannot run {fmt_argv(argv)}: {e}") from e

        if res.returncode != 0:
            raise SubmoduleCallFailure(f"{self.name} {function} exited with {res.returncode}: {res.stderr.strip()}")

        out = res.stdout.strip()
        if not out:
            raise SubmoduleCallFailure(f"{self.name} {function} produced no reply")
        try:
            reply = json.loads(out)
        except json.JSONDecodeError as e:
            raise SubmoduleCallFailure(f"{self.name} {function} reply is not JSON: {e}") from e

        logger.debug("%s %s reply: %s", self.name, function, reply)
        # "null" is a legitimate answer to Description (not applicable).
        if reply is None:
            return None
        if not isinstance(reply, dict):
            raise SubmoduleCallFailure(f"{self.name} {function} reply must be an object")
        return reply

    def description(self) -> Optional[Dict[str, Any]]:
        return self._call("Description", {})

    def make_proposal(self, force_reset: bool, language_changed: bool) -> Optional[Dict[str, Any]]:
        return self._call(
            "MakeProposal",
            {"force_reset": force_reset, "language_changed": language_changed},
        )

    def ask_user(self, info: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        return self._call("AskUser", info)

    def write(self, options: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        return self._call("Write", options)
