from __future__ import annotations

from dataclasses import dataclass

from log_config.logger import get_logger

LOGGER = get_logger("telemetry")


@dataclass(frozen=True)
class TimingRecord:
    backend: str
    blobs: int
    elapsed_ms: float
    budget_ms: float


def log_timing(backend: str, blobs: int, elapsed_ms: float, budget_ms: float) -> TimingRecord:
    record = TimingRecord(
        backend=backend, blobs=blobs, elapsed_ms=elapsed_ms, budget_ms=budget_ms
    )
    LOGGER.debug(
        "detect.timing backend={} blobs={} elapsed_ms={:.3f} budget_ms={:.3f}",
        record.backend,
        record.blobs,
        record.elapsed_ms,
        record.budget_ms,
    )
    if elapsed_ms > budget_ms:
        LOGGER.warning(
            "detect.timing_budget_exceeded backend={} blobs={} elapsed_ms={:.3f} budget_ms={:.3f}",
            record.backend,
            record.blobs,
            record.elapsed_ms,
            record.budget_ms,
        )
    return record
