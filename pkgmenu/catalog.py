from __future__ import annotations
import re
from typing import Any, Dict, Iterator, List, Mapping, Sequence, Tuple

from loguru import logger

from .config import load_json_safe
from .errors import CatalogError
from .models import Category

# install priority: dependency-adjacent first, nice-to-have last
DEFAULT_ORDER = ["core", "pip", "optional", "apps"]

DEFAULT_CATEGORIES: Dict[str, str] = {
    "core": "git vim curl wget htop tmux build-essential",
    "pip": "python3-pip python3-venv python3-dev pipx",
    "optional": "tree ncdu ranger neofetch ripgrep fzf",
    "apps": "firefox vlc gimp keepassxc",
}

def _split(value: Any) -> List[str]:
    if isinstance(value, str):
        return value.split()
    out: List[str] = []
    for it in value or []:
        if isinstance(it, dict):
            it = it.get("name", "")
        nm = str(it).strip()
        if nm:
            out.append(nm)
    return out

# ids are dialog tags; the tag transport strips quotes and splits on blanks
_BAD_CHARS = re.compile(r"""[\s'"]""")

def _check_token(value: str, what: str) -> None:
    if not value or _BAD_CHARS.search(value):
        raise CatalogError(f"{what} {value!r}: must be non-empty without spaces or quotes")

class CategoryCatalog:
    """
    Ordered, read-only set of package categories. The order is declared
    explicitly and never derived from the mapping.
    """

    def __init__(self, order: Sequence[str], categories: Mapping[str, Any]):
        order = [str(c).strip() for c in order]
        if len(set(order)) != len(order):
            raise CatalogError(f"duplicate category in order: {order}")
        stripped: Dict[str, Any] = {}
        for k, v in categories.items():
            cid = str(k).strip()
            if cid in stripped:
                raise CatalogError(f"duplicate category: {cid!r}")
            stripped[cid] = v
        missing = set(stripped) - set(order)
        unknown = set(order) - set(stripped)
        if missing or unknown:
            raise CatalogError(
                f"order must list every category exactly once (missing={sorted(missing)}, unknown={sorted(unknown)})"
            )
        cats: List[Category] = []
        for cid in order:
            _check_token(cid, "category")
            pkgs = _split(stripped[cid])
            for p in pkgs:
                _check_token(p, f"{cid}: package")
            dupes = sorted({p for p in pkgs if pkgs.count(p) > 1})
            if dupes:
                raise CatalogError(f"{cid}: duplicate packages {dupes}")
            cats.append(Category(id=cid, packages=tuple(pkgs)))
        self._cats: Tuple[Category, ...] = tuple(cats)
        self._by_id = {c.id: c for c in cats}

    def categories(self) -> Tuple[Category, ...]:
        return self._cats

    def ids(self) -> List[str]:
        return [c.id for c in self._cats]

    def get(self, cid: str) -> Category:
        try:
            return self._by_id[cid]
        except KeyError:
            raise CatalogError(f"unknown category: {cid}") from None

    def __contains__(self, cid: object) -> bool:
        return cid in self._by_id

    def __iter__(self) -> Iterator[Category]:
        return iter(self._cats)

    def __len__(self) -> int:
        return len(self._cats)

def default_catalog() -> CategoryCatalog:
    return CategoryCatalog(DEFAULT_ORDER, DEFAULT_CATEGORIES)

def load_catalog(path: str = "") -> CategoryCatalog:
    """
    {"order": ["core", ...], "categories": {"core": ["git", ...] | "git vim"}}
    A missing or empty file gives the built-in catalog.
    """
    if not path:
        return default_catalog()
    cfg = load_json_safe(path, None)
    if not cfg:
        logger.info(f"No catalog at {path}, using built-in categories")
        return default_catalog()
    if not isinstance(cfg, dict) or not isinstance(cfg.get("categories"), dict):
        raise CatalogError(f"{path}: expected an object with a 'categories' mapping")
    cats = cfg["categories"]
    order = cfg.get("order")
    if order is None:
        raise CatalogError(f"{path}: 'order' is required")
    return CategoryCatalog(list(order), cats)
