"""
Report Writer
=============
Serializes a SessionReport into the compilation-fix report JSON.
"""
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict

from app.models.session_report import SessionReport

logger = logging.getLogger(__name__)


class ReportWriter:
    """
    Compiles a finished repair session into a JSON file for later review.
    """

    @staticmethod
    def build_report(report: SessionReport) -> Dict[str, Any]:
        data = report.model_dump(mode="json")
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "success": data["success"],
            "attempts": data["attempts"],
            "stop_reason": data["stop_reason"],
            "fixed_files": data["fixed_files"],
            "errors": data["errors"] or [],
            "unfixed": data["unfixed"],
            "summary": {
                "total_fixed": len(report.fixed_files),
                "total_errors": len(report.errors or []),
                "total_unfixed": len(report.unfixed),
            },
        }

    @staticmethod
    def write_report(report: SessionReport, output_path: str) -> bool:
        """Write the report JSON. Returns False instead of raising on I/O failure."""
        try:
            data = ReportWriter.build_report(report)
            abs_output = os.path.abspath(output_path)
            logger.info("Writing repair report to %s", abs_output)

            with open(abs_output, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)

            return True

        except OSError as e:
            logger.error("Failed to write repair report: %s", e, exc_info=True)
            return False
