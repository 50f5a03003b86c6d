from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

class Backend(Enum):
    APT_GET = "apt-get"
    PACMAN = "pacman"
    UNSUPPORTED = "unsupported"

@dataclass(frozen=True)
class ManagerKind:
    backend: Backend
    raw: str = ""  # config value as given

    @property
    def supported(self) -> bool:
        return self.backend is not Backend.UNSUPPORTED

@dataclass(frozen=True)
class Category:
    id: str
    packages: Tuple[str, ...]

class DialogMode(Enum):
    MENU = "menu"  # single choice
    CHECKLIST = "checklist"  # multi choice
    YESNO = "yesno"

class Outcome(Enum):
    OK = "ok"
    CANCEL = "cancel"

@dataclass(frozen=True)
class DialogItem:
    tag: str
    label: str = ""
    checked: bool = False

@dataclass(frozen=True)
class DialogRequest:
    title: str
    text: str
    items: Tuple[DialogItem, ...] = ()
    mode: DialogMode = DialogMode.MENU
    height: int = 20
    width: int = 70
    list_height: int = 10

@dataclass(frozen=True)
class DialogResult:
    outcome: Outcome
    tags: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

class MenuState(Enum):
    CATEGORY_MENU = "category_menu"
    PACKAGE_CHECKLIST = "package_checklist"
    CONFIRM = "confirm"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def terminal(self) -> bool:
        return self in (MenuState.DONE, MenuState.ABORTED)

class InstallOutcome(Enum):
    SKIPPED_EMPTY = "skipped-empty"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

@dataclass(frozen=True)
class CategoryResult:
    category: str
    outcome: InstallOutcome
    packages: Tuple[str, ...] = ()
    reason: str = ""

@dataclass
class InstallReport:
    results: List[CategoryResult] = field(default_factory=list)

    def outcome_for(self, category: str) -> Optional[InstallOutcome]:
        for r in self.results:
            if r.category == category:
                return r.outcome
        return None

    @property
    def failed(self) -> List[CategoryResult]:
        return [r for r in self.results if r.outcome is InstallOutcome.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed
