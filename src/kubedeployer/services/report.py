"""JSON report of a deployment run."""

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from kubedeployer.models import StepResult


class RunReportService:
    """Accumulates step outcomes and rewrites the report file after each one.

    Without a ``report_file`` the report is kept in memory only.
    """

    def __init__(self, report_file: Optional[str], logger):
        self.report_file = report_file
        self.logger = logger
        self.report: Dict[str, Any] = {"status": "running", "steps": []}

    def start_run(self, run_id: str, request: Dict[str, Any]):
        self.report.update(run_id=run_id, request=request, started_at=self._now())
        self.write()

    def record_step(self, result: StepResult, status: str):
        self.report["steps"].append(
            {
                "name": result.name,
                "status": status,
                "duration_seconds": round(result.duration_seconds, 3),
                "error": result.error,
            }
        )
        self.write()

    def finalize(self, status: str, error: Optional[str] = None):
        self.report.update(status=status, error=error, finished_at=self._now())
        self.write()

    def write(self):
        if not self.report_file:
            return

        target_dir = os.path.dirname(os.path.abspath(self.report_file))
        temp_path = None
        try:
            os.makedirs(target_dir, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(prefix=".run-report-", suffix=".json", dir=target_dir)
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(self.report, file_obj, indent=2, sort_keys=True)
            os.replace(temp_path, self.report_file)
        except OSError as exc:
            self.logger.warning("Could not write report file '%s': %s", self.report_file, exc)
            if temp_path and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError as cleanup_exc:
                    self.logger.debug("Could not remove %s: %s", temp_path, cleanup_exc)

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()
