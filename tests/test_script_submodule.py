from __future__ import annotations

import sys
from pathlib import Path

import pytest

from conftest import FakeSink

from installer_proposal.errors import SubmoduleCallFailure
from installer_proposal.gateway import SubmoduleGateway, SubmoduleRegistry
from installer_proposal.submodules import ScriptSubmodule, build_submodule

CLIENT = """\
import json
import sys

function = sys.argv[1]
request = json.loads(sys.stdin.read() or "{}")
if function == "Description":
    print(json.dumps({"rich_text_title": "Scripted", "id": "scripted"}))
elif function == "MakeProposal":
    print(json.dumps({"raw_proposal": ["force_reset=%s" % request["force_reset"]], "warning_level": "notice"}))
elif function == "AskUser":
    print("this is not json")
elif function == "Write":
    sys.stderr.write("cannot write\\n")
    sys.exit(3)
"""


@pytest.fixture
def client(tmp_path: Path) -> ScriptSubmodule:
    script = tmp_path / "client.py"
    script.write_text(CLIENT, encoding="utf-8")
    return ScriptSubmodule(name="scripted_proposal", argv=(sys.executable, str(script)), timeout_s=30)


def test_script_round_trips(client: ScriptSubmodule) -> None:
    assert client.description() == {"rich_text_title": "Scripted", "id": "scripted"}
    assert client.make_proposal(True, False) == {"raw_proposal": ["force_reset=True"], "warning_level": "notice"}


def test_garbled_reply_is_call_failure(client: ScriptSubmodule) -> None:
    with pytest.raises(SubmoduleCallFailure):
        client.ask_user({"has_next": False})


def test_nonzero_exit_is_call_failure(client: ScriptSubmodule) -> None:
    with pytest.raises(SubmoduleCallFailure, match="exited with 3"):
        client.write({})


def test_missing_executable_is_call_failure(tmp_path: Path) -> None:
    missing = ScriptSubmodule(name="gone_proposal", argv=(str(tmp_path / "nope"),))
    with pytest.raises(SubmoduleCallFailure):
        missing.description()


def test_gateway_tolerates_script_failures(client: ScriptSubmodule) -> None:
    gw = SubmoduleGateway(SubmoduleRegistry({"scripted_proposal": client}), FakeSink())

    assert gw.propose("scripted_proposal", False, False).raw_proposal == ("force_reset=False",)
    assert gw.ask_user("scripted_proposal", {}).sequence == "next"
    assert gw.write("scripted_proposal") is False


def test_build_from_command_spec() -> None:
    sub = build_submodule("x_proposal", {"command": "/usr/lib/clients/x", "timeout": 5})
    assert isinstance(sub, ScriptSubmodule)
    assert sub.argv == ("/usr/lib/clients/x",)
    assert sub.timeout_s == 5
