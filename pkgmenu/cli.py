"""
Command-line front end: the six package operations plus the interactive
bulk-install menu.
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from loguru import logger

from .backends import CommandRunner, GrepHighlighter, ManagerRegistry, PackageManagerAdapter
from .catalog import load_catalog
from .config import DIALOGS, Settings, load_settings
from .dialog import DialogProvider, get_provider
from .errors import DialogUnavailableError, PkgMenuError
from .log import configure_logging
from .orchestrator import InstallOrchestrator, format_report
from .session import SelectionSession

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pkgmenu",
        description="Package manager front end and interactive bulk installer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                      # interactive category menu
  %(prog)s install vim git      # one batched install
  %(prog)s search ripgrep       # highlighted search
  %(prog)s autoremove           # remove orphaned packages
        """,
    )
    ap.add_argument("--config", help="config file (default ~/.config/pkgmenu/config.json)")
    ap.add_argument("--catalog", help="category catalog JSON")
    ap.add_argument("--manager", help="package manager backend (apt-get | pacman)")
    ap.add_argument("--dialog", choices=DIALOGS, help="interactive dialog provider")
    ap.add_argument("--yes", "-y", action="store_true", help="do not ask the backend for confirmation")
    ap.add_argument("--no-sudo", action="store_true", help="never prefix privileged commands with sudo")
    ap.add_argument("--verbose", "-v", action="count", default=0, help="-v debug, -vv trace")

    sub = ap.add_subparsers(dest="command")
    sub.add_parser("menu", help="interactive category menu (default)")
    p = sub.add_parser("install", help="install packages")
    p.add_argument("packages", nargs="+")
    p = sub.add_parser("remove", help="remove packages")
    p.add_argument("packages", nargs="+")
    p = sub.add_parser("search", help="search the package index")
    p.add_argument("query")
    sub.add_parser("sync", help="refresh the package index")
    sub.add_parser("upgrade", help="upgrade all installed packages")
    sub.add_parser("autoremove", help="remove orphaned packages")
    return ap

def _settings(args: argparse.Namespace) -> Settings:
    return load_settings(
        args.config,
        overrides={
            "manager": args.manager,
            "dialog": args.dialog,
            "catalog": args.catalog,
            "assume_yes": True if args.yes else None,
            "use_sudo": False if args.no_sudo else None,
        },
    )

def run_menu(settings: Settings, adapter: PackageManagerAdapter, provider: Optional[DialogProvider] = None) -> int:
    catalog = load_catalog(settings.catalog_path)
    session = SelectionSession(catalog, provider or get_provider(settings.dialog))
    try:
        session.run()
    except DialogUnavailableError as e:
        logger.warning(f"{e}; nothing to do")
        return 1
    if not session.done:
        logger.info("Aborted, nothing installed")
        return 0
    report = InstallOrchestrator().run(session.selection, adapter)
    print(format_report(report))
    return 0 if report.ok else 1

def dispatch(args: argparse.Namespace, settings: Settings, adapter: PackageManagerAdapter,
             provider: Optional[DialogProvider] = None) -> int:
    cmd = args.command or "menu"
    if cmd == "install":
        adapter.install(args.packages)
    elif cmd == "remove":
        adapter.remove(args.packages)
    elif cmd == "search":
        for ln in adapter.search(args.query):
            print(ln)
    elif cmd == "sync":
        adapter.sync_index()
    elif cmd == "upgrade":
        adapter.upgrade_all()
    elif cmd == "autoremove":
        removed = adapter.remove_orphans()
        if not removed:
            print("Nothing to do.")
    else:
        return run_menu(settings, adapter, provider)
    return 0

def main(argv: Optional[List[str]] = None, provider: Optional[DialogProvider] = None,
         runner: Optional[CommandRunner] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        settings = _settings(args)
        if not settings.manager.supported:
            logger.warning(f"Unsupported package manager {settings.manager.raw!r}; set PKG_MANAGER to apt-get or pacman")
            return 1
        adapter = ManagerRegistry.adapter_for(
            settings.manager,
            runner or CommandRunner(settings.use_sudo),
            GrepHighlighter(),
            settings.assume_yes,
        )
        return dispatch(args, settings, adapter, provider)
    except KeyboardInterrupt:
        logger.warning("Operation cancelled by user")
        return 130
    except PkgMenuError as e:
        logger.error(str(e))
        return 1
