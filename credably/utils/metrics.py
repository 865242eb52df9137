"""
In-process counters and duration samples for provider API calls, OpenAI calls,
sync outcomes and HTTP responses. GET /metrics serves get_snapshot().
"""

import time
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Dict, Any

from credably.utils.logger import get_logger

logger = get_logger()

_counters: Dict[str, int] = defaultdict(int)
_histograms: Dict[str, list] = defaultdict(list)

MAX_HISTOGRAM_SAMPLES = 500


def inc(name: str, value: int = 1) -> None:
    _counters[name] += value


def observe(name: str, value: float) -> None:
    samples = _histograms[name]
    samples.append(value)
    if len(samples) > MAX_HISTOGRAM_SAMPLES:
        del samples[:-MAX_HISTOGRAM_SAMPLES]


def _record_call(service: str, operation: str, started: float, outcome: str) -> None:
    duration_ms = (time.monotonic() - started) * 1000
    observe(f"{service}.{operation}.duration_ms", duration_ms)
    inc(f"{service}.{operation}.{outcome}")
    log = logger.warning if outcome == "error" else logger.debug
    log(
        "metrics.call",
        extra={
            "service": service,
            "operation": operation,
            "duration_ms": round(duration_ms, 1),
            "status": outcome,
        },
    )


@asynccontextmanager
async def track_duration(service: str, operation: str = "call"):
    """
    Time an outbound call and count its outcome.

        async with track_duration("github", "repos"):
            response = await client.get(...)
    """
    started = time.monotonic()
    try:
        yield
    except Exception:
        _record_call(service, operation, started, "error")
        raise
    _record_call(service, operation, started, "success")


def _percentile(ordered: list, fraction: float) -> float:
    return round(ordered[min(int(len(ordered) * fraction), len(ordered) - 1)], 1)


def get_snapshot() -> Dict[str, Any]:
    histograms = {
        name: {
            "count": len(ordered),
            "p50": _percentile(ordered, 0.5),
            "p95": _percentile(ordered, 0.95),
            "p99": _percentile(ordered, 0.99),
            "max": round(ordered[-1], 1),
        }
        for name, ordered in ((name, sorted(samples)) for name, samples in _histograms.items() if samples)
    }
    return {"counters": dict(_counters), "histograms": histograms}
