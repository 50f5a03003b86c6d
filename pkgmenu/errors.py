"""
Exception types for pkgmenu
"""

from __future__ import annotations
from typing import List

class PkgMenuError(Exception):
    """Base exception for all pkgmenu errors"""

class UnsupportedManagerError(PkgMenuError):
    """Raised by every operation of a backend that did not resolve"""

    def __init__(self, raw: str):
        self.raw = raw
        shown = repr(raw) if raw else "(empty)"
        super().__init__(f"Unsupported package manager: {shown}")

class DialogUnavailableError(PkgMenuError):
    """Raised when no interactive dialog collaborator can be used"""

class CommandError(PkgMenuError):
    """Exception raised when a backend command fails"""

    def __init__(self, command: List[str], return_code: int, output: str = ""):
        self.command = list(command)
        self.return_code = return_code
        self.output = output
        super().__init__(f"{' '.join(command)} (Return code: {return_code})")

class PartialInstallFailure(PkgMenuError):
    """One category's batched call failed; siblings are unaffected"""

    def __init__(self, category: str, reason: str):
        self.category = category
        self.reason = reason
        super().__init__(f"{category}: {reason}")

class CatalogError(PkgMenuError):
    """Exception raised when the category catalog is malformed"""

class ChannelError(PkgMenuError):
    """Choice channel read twice or after release"""
