from __future__ import annotations
import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from loguru import logger

from .backends import ManagerRegistry
from .models import ManagerKind

CONFIG_DIR = os.path.expanduser("~/.config/pkgmenu")
DEFAULT_CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")
MANAGER_ENV = "PKG_MANAGER"
DIALOGS = ("textual", "whiptail")

DEFAULT_CONFIG: Dict[str, Any] = {
    "manager": "",
    "use_sudo": True,
    "assume_yes": False,
    "dialog": "textual",
    "catalog": "",
}

def load_json_safe(path: str, default: Any) -> Any:
    try:
        if not os.path.exists(path):
            return default
        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
        if not raw.strip():
            return default
        return json.loads(raw)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable JSON file {path}: {e}")
        return default

@dataclass(frozen=True)
class Settings:
    """Resolved once at startup and handed to every component that needs it."""

    manager: ManagerKind
    use_sudo: bool = True
    assume_yes: bool = False
    dialog: str = "textual"
    catalog_path: str = ""

def load_settings(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Settings:
    """
    Precedence: overrides (CLI flags) > environment > config file > defaults.
    None values in overrides are ignored.
    """
    env = os.environ if environ is None else environ
    cfg = load_json_safe(config_path or DEFAULT_CONFIG_FILE, {})
    if not isinstance(cfg, dict):
        cfg = {}
    merged = dict(DEFAULT_CONFIG)
    merged.update({k: v for k, v in cfg.items() if k in DEFAULT_CONFIG})
    if env.get(MANAGER_ENV):
        merged["manager"] = env[MANAGER_ENV]
    for k, v in (overrides or {}).items():
        if v is not None:
            merged[k] = v

    dialog = str(merged["dialog"]).strip().lower()
    if dialog not in DIALOGS:
        logger.warning(f"Unknown dialog provider {dialog!r}, using textual")
        dialog = "textual"

    return Settings(
        manager=ManagerRegistry.resolve(str(merged["manager"] or "")),
        use_sudo=bool(merged["use_sudo"]),
        assume_yes=bool(merged["assume_yes"]),
        dialog=dialog,
        catalog_path=str(merged["catalog"] or ""),
    )
