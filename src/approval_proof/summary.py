"""Human-readable summary of a verification batch."""
from __future__ import annotations

import logging
from typing import Optional

from .models import BatchVerificationReport, VerificationOutcome

logger = logging.getLogger(__name__)


def summary_line(outcome: VerificationOutcome) -> str:
    status = "valid" if outcome.is_valid else "invalid"
    return f"-- Signature of result {outcome.id} is {status}"


def summary_lines(report: BatchVerificationReport) -> list[str]:
    """One line per validation result, in input order."""
    return [summary_line(outcome) for outcome in report.outcomes]


def log_summary(report: BatchVerificationReport, log: Optional[logging.Logger] = None) -> None:
    """Log one DEBUG line per result, a WARNING per errored result and an INFO total."""
    log = log or logger
    for outcome in report.outcomes:
        log.debug(
            summary_line(outcome),
            extra={"result_id": outcome.id, "is_valid": outcome.is_valid},
        )
        if outcome.errored:
            log.warning(
                "Result %s could not be verified: %s",
                outcome.id,
                outcome.error_message,
                extra={"result_id": outcome.id, "error_code": outcome.error_code},
            )
    log.info(
        "Verified %d results: %d valid, %d invalid",
        report.total,
        report.valid,
        report.invalid,
        extra={"errored": report.errored},
    )


__all__ = [
    "summary_line",
    "summary_lines",
    "log_summary",
]
