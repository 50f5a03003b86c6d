from typing import Dict, List, Optional, Set, Tuple

import pytest
from loguru import logger

from pkgmenu import backends
from pkgmenu.backends import CommandRunner
from pkgmenu.dialog import ChoiceChannel, DialogProvider
from pkgmenu.models import DialogRequest, Outcome


class FakeRunner(CommandRunner):
    """Records commands instead of running them."""

    def __init__(self, rc: int = 0, outputs: Optional[Dict[Tuple[str, ...], Tuple[int, str]]] = None,
                 fail_on: Optional[Set[str]] = None):
        super().__init__(use_sudo=True)
        self.rc = rc
        self.outputs = outputs or {}
        self.fail_on = fail_on or set()
        self.calls: List[Tuple[List[str], bool]] = []
        self.captures: List[List[str]] = []

    def argv(self, cmd, privileged=False):
        return ["sudo"] + list(cmd) if privileged else list(cmd)

    def run(self, cmd, privileged=False):
        self.calls.append((list(cmd), privileged))
        if any(p in self.fail_on for p in cmd):
            return 100
        return self.rc

    def capture(self, cmd, privileged=False):
        self.captures.append(list(cmd))
        return self.outputs.get(tuple(cmd), (0, ""))


class ScriptedDialog(DialogProvider):
    """Answers dialogs from a script of (outcome, raw channel text)."""

    name = "scripted"

    def __init__(self, answers=(), available: bool = True):
        self.answers = list(answers)
        self._available = available
        self.requests: List[DialogRequest] = []
        self.channels: List[ChoiceChannel] = []

    def available(self):
        return self._available

    def show(self, request, channel):
        self.requests.append(request)
        self.channels.append(channel)
        outcome, raw = self.answers.pop(0)
        channel.write(raw)
        return outcome


def ok(raw: str = ""):
    return (Outcome.OK, raw)


CANCEL = (Outcome.CANCEL, "")


@pytest.fixture(autouse=True)
def fresh_warnings(monkeypatch):
    monkeypatch.setattr(backends, "_warned", set())


@pytest.fixture
def log_messages():
    msgs: List[str] = []
    hid = logger.add(lambda m: msgs.append(m.record["message"]), level="DEBUG")
    yield msgs
    logger.remove(hid)


@pytest.fixture
def runner():
    return FakeRunner()
