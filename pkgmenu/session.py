"""
Interactive category → checklist → confirm walk that builds a selection.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from .catalog import CategoryCatalog
from .dialog import ChoiceChannel, DialogProvider, require_provider, run_dialog
from .errors import CatalogError
from .models import DialogItem, DialogMode, DialogRequest, MenuState

INSTALL_TAG = "INSTALL"
TITLE = "pkgmenu"

class SelectionSet:
    """Chosen packages per category, always in catalog order."""

    def __init__(self, catalog: CategoryCatalog):
        self._catalog = catalog
        self._chosen: Dict[str, Tuple[str, ...]] = {}

    def set(self, cid: str, ids: Iterable[str]) -> Tuple[str, ...]:
        cat = self._catalog.get(cid)
        wanted = set(ids)
        unknown = sorted(wanted - set(cat.packages))
        if unknown:
            logger.warning(f"{cid}: ignoring unknown packages {unknown}")
        chosen = tuple(p for p in cat.packages if p in wanted)
        self._chosen[cid] = chosen
        return chosen

    def get(self, cid: str) -> Tuple[str, ...]:
        return self._chosen.get(cid, ())

    def items(self) -> List[Tuple[str, Tuple[str, ...]]]:
        return [(c.id, self.get(c.id)) for c in self._catalog.categories()]

    def packages(self) -> List[str]:
        return [p for _, pkgs in self.items() for p in pkgs]

    def __contains__(self, cid: object) -> bool:
        return cid in self._chosen

    def __len__(self) -> int:
        return sum(len(v) for v in self._chosen.values())

class SelectionSession:
    def __init__(
        self,
        catalog: CategoryCatalog,
        provider: Optional[DialogProvider],
        channel_factory: Callable[[], ChoiceChannel] = ChoiceChannel,
    ):
        if INSTALL_TAG in catalog:
            raise CatalogError(f"category id {INSTALL_TAG!r} is reserved")
        self.catalog = catalog
        self.provider = provider
        self.channel_factory = channel_factory
        self.selection = SelectionSet(catalog)
        self.state: Optional[MenuState] = None
        self.category: Optional[str] = None
        self.history: List[Tuple[MenuState, Optional[str]]] = []

    @property
    def done(self) -> bool:
        return self.state is MenuState.DONE

    def run(self) -> MenuState:
        # fail before entering any state
        self.provider = require_provider(self.provider)
        self._enter(MenuState.CATEGORY_MENU)
        while not self.state.terminal:
            self.step()
        logger.debug(f"Session finished: {self.state.value}, {len(self.selection)} packages selected")
        return self.state

    def step(self) -> None:
        if self.state is MenuState.CATEGORY_MENU:
            self._category_menu()
        elif self.state is MenuState.PACKAGE_CHECKLIST:
            self._checklist()
        elif self.state is MenuState.CONFIRM:
            self._confirm()

    def _enter(self, state: MenuState, category: Optional[str] = None) -> None:
        self.state = state
        self.category = category
        self.history.append((state, category))

    def _ask(self, request: DialogRequest):
        return run_dialog(self.provider, request, self.channel_factory)

    # ---------- states ----------
    def category_request(self) -> DialogRequest:
        items = []
        for c in self.catalog.categories():
            n = len(self.selection.get(c.id))
            items.append(DialogItem(c.id, f"{n}/{len(c.packages)} selected"))
        items.append(DialogItem(INSTALL_TAG, f"Proceed to install ({len(self.selection)} packages)"))
        return DialogRequest(
            title=TITLE,
            text="Pick a category, or INSTALL when done.",
            items=tuple(items),
            mode=DialogMode.MENU,
            list_height=min(len(items), 16),
        )

    def _category_menu(self) -> None:
        res = self._ask(self.category_request())
        if not res.ok:
            self._enter(MenuState.ABORTED)
            return
        tag = res.tags[0] if res.tags else ""
        if tag == INSTALL_TAG:
            self._enter(MenuState.CONFIRM)
        elif tag in self.catalog:
            self._enter(MenuState.PACKAGE_CHECKLIST, tag)
        else:
            logger.warning(f"Unknown menu entry {tag!r}")
            self._enter(MenuState.CATEGORY_MENU)

    def checklist_request(self, cid: str) -> DialogRequest:
        cat = self.catalog.get(cid)
        prior = set(self.selection.get(cid))
        items = tuple(DialogItem(p, "", p in prior) for p in cat.packages)
        return DialogRequest(
            title=f"{TITLE}: {cid}",
            text="Space toggles, Enter accepts.",
            items=items,
            mode=DialogMode.CHECKLIST,
            list_height=min(len(items), 16) or 1,
        )

    def _checklist(self) -> None:
        cid = self.category
        res = self._ask(self.checklist_request(cid))
        if res.ok:
            chosen = self.selection.set(cid, res.tags)
            logger.debug(f"{cid}: {len(chosen)} selected")
        self._enter(MenuState.CATEGORY_MENU)

    def confirm_request(self) -> DialogRequest:
        lines = []
        for cid, pkgs in self.selection.items():
            if pkgs:
                lines.append(f"{cid}: {' '.join(pkgs)}")
        total = len(self.selection)
        body = "\n".join(lines) if lines else "Nothing selected."
        return DialogRequest(
            title=f"{TITLE}: confirm",
            text=f"Install {total} packages?\n\n{body}",
            mode=DialogMode.YESNO,
        )

    def _confirm(self) -> None:
        res = self._ask(self.confirm_request())
        if res.ok:
            self._enter(MenuState.DONE)
        else:
            self._enter(MenuState.CATEGORY_MENU)
