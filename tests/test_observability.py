import json
import logging

import pytest

from credably.utils import metrics
from credably.utils.logger import (
    StructuredFormatter,
    correlation_id_var,
    logger,
    request_user_id_var,
)


def test_log_records_carry_request_context(caplog):
    cid_token = correlation_id_var.set("cid-42")
    user_token = request_user_id_var.set("user-9")
    try:
        with caplog.at_level(logging.INFO, logger="credably"):
            logger.info("score.calculated", extra={"service": "scoring"})
    finally:
        correlation_id_var.reset(cid_token)
        request_user_id_var.reset(user_token)

    record = caplog.records[-1]
    entry = json.loads(StructuredFormatter().format(record))
    assert entry["correlation_id"] == "cid-42"
    assert entry["user_id"] == "user-9"
    assert entry["service"] == "scoring"
    assert "source" not in entry


async def test_track_duration_counts_outcomes():
    async with metrics.track_duration("github", "user"):
        pass

    with pytest.raises(ValueError):
        async with metrics.track_duration("github", "user"):
            raise ValueError("rate limited")

    snapshot = metrics.get_snapshot()
    assert snapshot["counters"]["github.user.success"] >= 1
    assert snapshot["counters"]["github.user.error"] >= 1
    assert snapshot["histograms"]["github.user.duration_ms"]["count"] >= 2
