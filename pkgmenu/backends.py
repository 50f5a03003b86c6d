from __future__ import annotations
import os
import re
import shutil
import subprocess
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set, Tuple, Type

from loguru import logger

from .errors import CommandError, UnsupportedManagerError
from .models import Backend, ManagerKind

# one-shot warnings already emitted by this process
_warned: Set[str] = set()

def warn_once(key: str, msg: str) -> None:
    if key in _warned:
        return
    _warned.add(key)
    logger.warning(msg)

def which(cmd: str) -> bool:
    return shutil.which(cmd) is not None

def run_capture(cmd: List[str], input: Optional[str] = None) -> Tuple[int, str]:
    try:
        p = subprocess.run(cmd, input=input, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
        return p.returncode, p.stdout
    except FileNotFoundError:
        return 127, f"Command not found: {cmd[0]}"

class CommandRunner:
    """
    Runs backend commands. Privileged calls get a sudo prefix unless we are root.
    """

    def __init__(self, use_sudo: bool = True):
        self.use_sudo = use_sudo

    def argv(self, cmd: List[str], privileged: bool = False) -> List[str]:
        if privileged and self.use_sudo and cmd[0] != "sudo" and os.geteuid() != 0:
            return ["sudo"] + cmd
        return list(cmd)

    def run(self, cmd: List[str], privileged: bool = False) -> int:
        final = self.argv(cmd, privileged)
        logger.debug(f"Executing command: {' '.join(final)}")
        try:
            rc = subprocess.call(final)
        except FileNotFoundError:
            logger.error(f"Command not found: {final[0]}")
            return 127
        if rc != 0:
            logger.warning(f"Command {' '.join(final)} failed with code {rc}")
        return rc

    def capture(self, cmd: List[str], privileged: bool = False) -> Tuple[int, str]:
        final = self.argv(cmd, privileged)
        logger.debug(f"Capturing command: {' '.join(final)}")
        return run_capture(final)

class GrepHighlighter:
    """Colors query hits with grep while passing every line through."""

    def __init__(self, capture: Callable[..., Tuple[int, str]] = run_capture):
        self._capture = capture

    def available(self) -> bool:
        return which("grep")

    def __call__(self, query: str, text: str) -> str:
        # apt-cache and pacman -Ss take the query as a regex; "|$" keeps non-matching lines
        pattern = f"({query})|$"
        rc, out = self._capture(["grep", "--color=always", "-i", "-E", "-e", pattern], input=text)
        if rc not in (0, 1):
            warn_once("highlight-failed", f"grep highlighting failed (rc={rc}), showing plain output")
            return text
        return out

class SearchResults:
    """
    Lazy search output. Nothing runs until iterated; every new iteration
    runs the backend search again.
    """

    def __init__(self, runner: CommandRunner, cmd: List[str], query: str, highlighter=None):
        self._runner = runner
        self._cmd = cmd
        self.query = query
        self._highlighter = highlighter

    def __iter__(self) -> Iterator[str]:
        rc, out = self._runner.capture(self._cmd)
        if rc != 0:
            # pacman -Ss exits 1 with no output when nothing matches
            if out.strip():
                raise CommandError(self._cmd, rc, out)
            return
        hl = self._highlighter
        if hl is None or not hl.available():
            warn_once("highlight", "No highlighter available (grep not found), search output is not highlighted")
        elif out:
            out = hl(self.query, out)
        for ln in out.splitlines():
            yield ln

class PackageManagerAdapter:
    """
    The six package operations against one backend. Subclasses only supply
    the command lines.
    """

    kind: Backend = Backend.UNSUPPORTED

    def __init__(self, runner: Optional[CommandRunner] = None, highlighter=None, assume_yes: bool = False):
        self.runner = runner or CommandRunner()
        self.highlighter = highlighter
        self.assume_yes = assume_yes

    # ---------- command lines ----------
    def install_cmd(self) -> List[str]:
        raise NotImplementedError

    def remove_cmd(self) -> List[str]:
        raise NotImplementedError

    def search_cmd(self, query: str) -> List[str]:
        raise NotImplementedError

    def sync_cmd(self) -> List[str]:
        raise NotImplementedError

    def upgrade_cmd(self) -> List[str]:
        raise NotImplementedError

    def orphans(self) -> List[str]:
        raise NotImplementedError

    # ---------- operations ----------
    def _privileged(self, cmd: List[str]) -> None:
        rc = self.runner.run(cmd, privileged=True)
        if rc != 0:
            raise CommandError(self.runner.argv(cmd, privileged=True), rc)

    def _batched(self, cmd: List[str], ids: Iterable[str]) -> None:
        pkgs = list(ids)
        if not pkgs:
            raise ValueError("at least one package identifier is required")
        self._privileged(cmd + pkgs)

    def install(self, ids: Iterable[str]) -> None:
        self._batched(self.install_cmd(), ids)

    def remove(self, ids: Iterable[str]) -> None:
        self._batched(self.remove_cmd(), ids)

    def search(self, query: str) -> SearchResults:
        return SearchResults(self.runner, self.search_cmd(query), query, self.highlighter)

    def sync_index(self) -> None:
        self._privileged(self.sync_cmd())

    def upgrade_all(self) -> None:
        self._privileged(self.upgrade_cmd())

    def remove_orphans(self) -> List[str]:
        orph = self.orphans()
        if not orph:
            logger.info("No orphaned packages, nothing to do")
            return []
        logger.info(f"Removing {len(orph)} orphaned packages: {' '.join(orph)}")
        self.remove(orph)
        return orph

class AptGetAdapter(PackageManagerAdapter):
    kind = Backend.APT_GET

    def _yes(self) -> List[str]:
        return ["-y"] if self.assume_yes else []

    def install_cmd(self) -> List[str]:
        return ["apt-get", "install"] + self._yes()

    def remove_cmd(self) -> List[str]:
        return ["apt-get", "remove"] + self._yes()

    def search_cmd(self, query: str) -> List[str]:
        return ["apt-cache", "search", query]

    def sync_cmd(self) -> List[str]:
        return ["apt-get", "update"]

    def upgrade_cmd(self) -> List[str]:
        return ["apt-get", "upgrade"] + self._yes()

    def orphans(self) -> List[str]:
        cmd = ["apt-get", "-s", "autoremove"]
        rc, out = self.runner.capture(cmd)
        if rc != 0:
            raise CommandError(cmd, rc, out)
        xs: List[str] = []
        for ln in out.splitlines():
            m = re.match(r"^Remv\s+(\S+)", ln)
            if m and m.group(1) not in xs:
                xs.append(m.group(1))
        return xs

class PacmanAdapter(PackageManagerAdapter):
    kind = Backend.PACMAN

    def _yes(self) -> List[str]:
        return ["--noconfirm"] if self.assume_yes else []

    def install_cmd(self) -> List[str]:
        return ["pacman", "-S"] + self._yes()

    def remove_cmd(self) -> List[str]:
        return ["pacman", "-Rns"] + self._yes()

    def search_cmd(self, query: str) -> List[str]:
        return ["pacman", "-Ss", query]

    def sync_cmd(self) -> List[str]:
        return ["pacman", "-Sy"]

    def upgrade_cmd(self) -> List[str]:
        return ["pacman", "-Syu"] + self._yes()

    def orphans(self) -> List[str]:
        cmd = ["pacman", "-Qtdq"]
        rc, out = self.runner.capture(cmd)
        if rc != 0:
            # exit 1 without output: no orphans
            if not out.strip():
                return []
            raise CommandError(cmd, rc, out)
        return [x for x in out.split() if x.strip()]

class UnsupportedAdapter(PackageManagerAdapter):
    """Stands in for an unresolved backend; every operation fails without running anything."""

    def __init__(self, raw: str, runner: Optional[CommandRunner] = None, highlighter=None, assume_yes: bool = False):
        super().__init__(runner, highlighter, assume_yes)
        self.raw = raw

    def _fail(self):
        raise UnsupportedManagerError(self.raw)

    def install(self, ids: Iterable[str]) -> None:
        self._fail()

    def remove(self, ids: Iterable[str]) -> None:
        self._fail()

    def search(self, query: str) -> SearchResults:
        self._fail()

    def sync_index(self) -> None:
        self._fail()

    def upgrade_all(self) -> None:
        self._fail()

    def remove_orphans(self) -> List[str]:
        self._fail()

class ManagerRegistry:
    """Maps config values to backends and backends to adapters."""

    _names: Dict[str, Backend] = {
        "apt": Backend.APT_GET,
        "apt-get": Backend.APT_GET,
        "pacman": Backend.PACMAN,
    }

    _mapping: Dict[Backend, Type[PackageManagerAdapter]] = {
        Backend.APT_GET: AptGetAdapter,
        Backend.PACMAN: PacmanAdapter,
    }

    @classmethod
    def resolve(cls, value: Optional[str]) -> ManagerKind:
        raw = value or ""
        key = raw.strip().lower()
        if not key:
            warn_once("empty-manager", "No package manager configured (set PKG_MANAGER or --manager)")
        backend = cls._names.get(key)
        if backend is None:
            return ManagerKind(Backend.UNSUPPORTED, raw)
        return ManagerKind(backend, raw)

    @classmethod
    def adapter_for(
        cls,
        kind: ManagerKind,
        runner: Optional[CommandRunner] = None,
        highlighter=None,
        assume_yes: bool = False,
    ) -> PackageManagerAdapter:
        ctor = cls._mapping.get(kind.backend)
        if ctor is None:
            return UnsupportedAdapter(kind.raw, runner, highlighter, assume_yes)
        return ctor(runner, highlighter, assume_yes)
