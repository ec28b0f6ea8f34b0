"""JSON report generator for batch results."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..runner.outcome import BatchOutcome


class JsonReporter:
    """Generates JSON reports from a BatchOutcome."""

    def generate(self, outcome: BatchOutcome, duration_ms: int = 0) -> dict[str, Any]:
        """Generate a report dictionary.

        Args:
            outcome: Result of the batch.
            duration_ms: Wall-clock duration of the batch in milliseconds.

        Returns:
            Report dictionary ready for JSON serialization.
        """
        if outcome.cancelled:
            status = "cancelled"
        elif outcome.success:
            status = "passed"
        else:
            status = "failed"

        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "status": status,
            "summary": {
                "total": outcome.total_count,
                "passed": outcome.passed_count,
                "failed": outcome.failed_count,
                "skipped_files": len(outcome.skipped_files),
                "duration_ms": duration_ms,
            },
            "tests": [
                {
                    "label": o.label,
                    "run_id": o.run_id,
                    "status": o.status.value if o.status else None,
                    "result": "pass" if o.passed else "fail",
                    "error": o.error,
                    "duration_ms": int(o.duration_s * 1000),
                }
                for o in outcome.outcomes
            ],
            "failed": outcome.failed,
            "skipped_files": list(outcome.skipped_files),
            "message": outcome.summary(),
        }

    def save(self, report: dict[str, Any], path: Path) -> Path:
        """Save report to a JSON file, creating parent directories.

        Returns:
            Path to the saved file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def generate_cli_output(
        self,
        report: dict[str, Any],
        report_path: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate the summary printed by ``--json``.

        Format:
        {
            "success": bool,
            "command": "run",
            "data": { ... },
            "message": str
        }
        """
        summary = report["summary"]
        data: dict[str, Any] = {
            "total_tests": summary["total"],
            "passed": summary["passed"],
            "failed": summary["failed"],
            "failed_tests": report["failed"],
            "skipped_files": report["skipped_files"],
            "cancelled": report["status"] == "cancelled",
            "duration_ms": summary["duration_ms"],
        }
        if report_path:
            data["report_path"] = report_path

        return {
            "success": report["status"] == "passed",
            "command": "run",
            "data": data,
            "message": report["message"],
        }
