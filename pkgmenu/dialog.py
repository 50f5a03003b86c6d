from __future__ import annotations
import os
import shlex
import subprocess
import tempfile
from typing import IO, Callable, List, Optional, Tuple

from loguru import logger

from .backends import which
from .errors import ChannelError, CommandError, DialogUnavailableError
from .models import DialogMode, DialogRequest, DialogResult, Outcome

_QUOTES = {ord('"'): None, ord("'"): None}

def sanitize_tag(tag: str) -> str:
    return tag.translate(_QUOTES).strip()

def parse_tags(raw: str) -> Tuple[str, ...]:
    # whiptail quotes checklist tags: "vim" "git"
    try:
        parts = shlex.split(raw)
    except ValueError:
        # unbalanced quote
        parts = raw.split()
    return tuple(t for t in (sanitize_tag(x) for x in parts) if t)

class ChoiceChannel:
    """
    Temp file the dialog writes its choice into. Read once, then released.
    """

    def __init__(self) -> None:
        fd, self.path = tempfile.mkstemp(prefix="pkgmenu-", suffix=".choice")
        os.close(fd)
        self._read = False
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def open_for_writing(self) -> IO[str]:
        if self._released:
            raise ChannelError("channel already released")
        return open(self.path, "w", encoding="utf-8")

    def write(self, text: str) -> None:
        with self.open_for_writing() as f:
            f.write(text)

    def read(self) -> str:
        if self._released or not os.path.exists(self.path):
            raise ChannelError("channel already released")
        if self._read:
            raise ChannelError("channel already read")
        self._read = True
        with open(self.path, "r", encoding="utf-8") as f:
            return f.read()

    def release(self) -> None:
        self._released = True
        try:
            os.unlink(self.path)
        except FileNotFoundError:
            pass

    def __enter__(self) -> "ChoiceChannel":
        return self

    def __exit__(self, *exc) -> None:
        self.release()

class DialogProvider:
    """
    Shows one dialog and writes the chosen tag(s) into the channel.
    """

    name = ""

    def available(self) -> bool:
        raise NotImplementedError

    def show(self, request: DialogRequest, channel: ChoiceChannel) -> Outcome:
        raise NotImplementedError

def run_dialog(
    provider: DialogProvider,
    request: DialogRequest,
    channel_factory: Callable[[], ChoiceChannel] = ChoiceChannel,
) -> DialogResult:
    with channel_factory() as channel:
        outcome = provider.show(request, channel)
        raw = channel.read()
    if outcome is not Outcome.OK:
        return DialogResult(Outcome.CANCEL)
    return DialogResult(Outcome.OK, parse_tags(raw))

def _call(cmd: List[str], stderr: IO[str]) -> int:
    return subprocess.call(cmd, stderr=stderr)

class WhiptailDialog(DialogProvider):
    """whiptail draws on the terminal and prints the choice on stderr."""

    name = "whiptail"

    def __init__(self, program: str = "whiptail", call: Callable[[List[str], IO[str]], int] = _call):
        self.program = program
        self._call = call

    def available(self) -> bool:
        return which(self.program)

    def command(self, request: DialogRequest) -> List[str]:
        cmd = [self.program, "--title", request.title]
        if request.mode is DialogMode.YESNO:
            return cmd + ["--yesno", request.text, str(request.height), str(request.width)]
        flag = "--checklist" if request.mode is DialogMode.CHECKLIST else "--menu"
        cmd += [flag, request.text, str(request.height), str(request.width), str(request.list_height)]
        for it in request.items:
            cmd += [it.tag, it.label]
            if request.mode is DialogMode.CHECKLIST:
                cmd.append("ON" if it.checked else "OFF")
        return cmd

    def show(self, request: DialogRequest, channel: ChoiceChannel) -> Outcome:
        cmd = self.command(request)
        logger.debug(f"Dialog: {request.mode.value} {request.title!r}")
        with channel.open_for_writing() as f:
            rc = self._call(cmd, f)
        if rc == 0:
            return Outcome.OK
        if rc in (1, 255):  # Cancel/No, Esc
            return Outcome.CANCEL
        raise CommandError(cmd, rc)

def get_provider(name: str) -> DialogProvider:
    if name == "whiptail":
        return WhiptailDialog()
    if name == "textual":
        from .ui_app import TextualDialog
        return TextualDialog()
    raise DialogUnavailableError(f"Unknown dialog provider: {name}")

def require_provider(provider: Optional[DialogProvider]) -> DialogProvider:
    if provider is None or not provider.available():
        shown = provider.name if provider is not None else "none"
        raise DialogUnavailableError(f"Interactive dialog not available ({shown})")
    return provider
