"""Unit tests for moderation_gateway/utils/logger.py request-id context."""

from __future__ import annotations

import structlog

from moderation_gateway.utils.logger import clear_request_id, set_request_id


class TestRequestIdContext:
    def teardown_method(self) -> None:
        structlog.contextvars.clear_contextvars()

    def test_set_request_id_merged_into_event(self) -> None:
        set_request_id("01HZX3K8Q9V7M2N4P6R8T0W2Y4")
        event = structlog.contextvars.merge_contextvars(None, "info", {"event": "x"})
        assert event["request_id"] == "01HZX3K8Q9V7M2N4P6R8T0W2Y4"

    def test_clear_request_id_removes_it(self) -> None:
        set_request_id("01HZX3K8Q9V7M2N4P6R8T0W2Y4")
        clear_request_id()
        event = structlog.contextvars.merge_contextvars(None, "info", {"event": "x"})
        assert "request_id" not in event

    def test_clear_without_set_is_harmless(self) -> None:
        clear_request_id()
        assert "request_id" not in structlog.contextvars.get_contextvars()
