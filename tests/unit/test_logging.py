"""Unit tests for structured operation logging."""

import logging

import pytest

from steer_ops_gateway.observability.logging import OperationLogger, configure_logging


class TestOperationLogger:
    """Test the ``[operation=... tenant=...]`` prefix format."""

    def test_prefix(self, caplog):
        op_log = OperationLogger("listUsers", "t1")

        with caplog.at_level(logging.INFO, logger="steer_ops_gateway.operations"):
            op_log.info("Served", attempts=2, skipped=None)

        assert caplog.records[-1].getMessage() == "[operation=listUsers tenant=t1 attempts=2] Served"

    def test_error_appends_exception(self, caplog):
        op_log = OperationLogger("createUser")

        with caplog.at_level(logging.ERROR, logger="steer_ops_gateway.operations"):
            op_log.error("Failed", error=ValueError("bad email"))

        message = caplog.records[-1].getMessage()
        assert message.startswith("[operation=createUser ")
        assert "error_type=ValueError" in message
        assert "error_msg=bad email" in message

    def test_track_operation_logs_outcome(self, caplog):
        op_log = OperationLogger("listFiles", "t1")

        with caplog.at_level(logging.DEBUG, logger="steer_ops_gateway.operations"):
            with op_log.track_operation(request_id="req-1") as tracking:
                tracking["outcome"] = "success"

        messages = [record.getMessage() for record in caplog.records]
        assert any("request_id=req-1" in m and "Starting invocation" in m for m in messages)
        assert any("outcome=success" in m and "Completed invocation" in m for m in messages)

    def test_track_operation_reraises(self, caplog):
        op_log = OperationLogger("listFiles")

        with caplog.at_level(logging.ERROR, logger="steer_ops_gateway.operations"):
            with pytest.raises(RuntimeError):
                with op_log.track_operation():
                    raise RuntimeError("boom")

        assert "Failed invocation" in caplog.records[-1].getMessage()

    def test_configure_logging_accepts_names(self):
        configure_logging("warning")
        configure_logging("not-a-level")
