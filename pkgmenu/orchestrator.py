from __future__ import annotations
from typing import List

from loguru import logger

from .backends import PackageManagerAdapter
from .errors import CommandError, PartialInstallFailure
from .models import CategoryResult, InstallOutcome, InstallReport
from .session import SelectionSet

class InstallOrchestrator:
    """
    One batched install per non-empty category, in catalog order. A failing
    category is recorded and the rest still run.
    """

    def __init__(self) -> None:
        self.failures: List[PartialInstallFailure] = []

    def run(self, selection: SelectionSet, adapter: PackageManagerAdapter) -> InstallReport:
        report = InstallReport()
        self.failures = []
        for cid, pkgs in selection.items():
            if not pkgs:
                report.results.append(CategoryResult(cid, InstallOutcome.SKIPPED_EMPTY))
                continue
            logger.info(f"[{cid}] installing {len(pkgs)} packages: {' '.join(pkgs)}")
            try:
                adapter.install(pkgs)
            except CommandError as e:
                failure = PartialInstallFailure(cid, str(e))
                self.failures.append(failure)
                logger.error(f"[{cid}] install failed: {e}")
                report.results.append(CategoryResult(cid, InstallOutcome.FAILED, pkgs, str(e)))
                continue
            report.results.append(CategoryResult(cid, InstallOutcome.SUCCEEDED, pkgs))
        return report

def format_report(report: InstallReport) -> str:
    lines = []
    for r in report.results:
        if r.outcome is InstallOutcome.SKIPPED_EMPTY:
            lines.append(f"{r.category}: skipped (nothing selected)")
        elif r.outcome is InstallOutcome.SUCCEEDED:
            lines.append(f"{r.category}: installed {' '.join(r.packages)}")
        else:
            lines.append(f"{r.category}: FAILED ({r.reason})")
    return "\n".join(lines)
