"""Tests for base handler functionality."""

from __future__ import annotations

import json
import logging
from unittest.mock import Mock, patch

import pytest

from power_monitor_operator.handlers.base import BaseHandler, ReconcileResult
from power_monitor_operator.utils.errors import StoreError


class TestReconcileResult:
    """Test cases for ReconcileResult labels."""

    def test_result_labels(self):
        """Test that the metric label reflects the outcome."""
        assert ReconcileResult().result_label == "success"
        assert ReconcileResult(requeue_after=5.0).result_label == "requeue"
        assert ReconcileResult(requeue_after=5.0, error=StoreError("x")).result_label == "error"


class TestBaseHandler:
    """Test cases for BaseHandler class."""

    def test_init(self):
        """Test handler initialization."""
        handler = BaseHandler(kind="TestKind")
        assert handler.kind == "TestKind"
        assert handler.logger is not None

    def test_log_error_sanitizes(self, caplog):
        """Test that error logs are structured and sanitized."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "test-resource", "uid": "uid-1"}

        with caplog.at_level(logging.ERROR):
            handler.log_error(meta, "Failed", error=StoreError("password: hunter2"))

        record = json.loads(caplog.records[-1].getMessage())
        assert record["resource"] == "TestKind"
        assert record["name"] == "test-resource"
        assert record["namespace"] == ""
        assert record["error_type"] == "StoreError"
        assert "hunter2" not in record["error"]

    @patch("power_monitor_operator.handlers.base.metrics")
    def test_reconcile_with_metrics_success(self, mock_metrics):
        """Test successful reconciliation with metrics."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "test-resource"}
        reconcile_fn = Mock(return_value=ReconcileResult())

        result = handler.reconcile_with_metrics(meta, reconcile_fn)

        reconcile_fn.assert_called_once()
        assert result == ReconcileResult()
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="started")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="success")
        assert mock_metrics.reconcile_duration_seconds.labels.called
        mock_metrics.error_total.labels.assert_not_called()

    @patch("power_monitor_operator.handlers.base.metrics")
    def test_reconcile_with_metrics_requeue(self, mock_metrics):
        """Test that a requeue result is counted as such."""
        handler = BaseHandler(kind="TestKind")

        handler.reconcile_with_metrics({"name": "r"}, lambda: ReconcileResult(requeue_after=5.0))

        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="requeue")

    @patch("power_monitor_operator.handlers.base.metrics")
    def test_reconcile_with_metrics_error_result(self, mock_metrics):
        """Test that an error result is counted and returned."""
        handler = BaseHandler(kind="TestKind")
        error = StoreError("create failed")

        result = handler.reconcile_with_metrics({"name": "r"}, lambda: ReconcileResult(error=error))

        assert result.error is error
        mock_metrics.error_total.labels.assert_called_with(kind="TestKind", error_type="StoreError")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="error")

    @patch("power_monitor_operator.handlers.base.metrics")
    @patch("power_monitor_operator.handlers.base.sanitize_exception")
    def test_reconcile_with_metrics_failure(self, mock_sanitize, mock_metrics):
        """Test that unexpected exceptions are counted, logged and re-raised."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "test-resource"}
        test_error = ValueError("Test error")
        mock_sanitize.return_value = "Sanitized error"

        def failing_fn():
            raise test_error

        with pytest.raises(ValueError):
            handler.reconcile_with_metrics(meta, failing_fn)

        mock_sanitize.assert_called_once_with(test_error)
        mock_metrics.error_total.labels.assert_called_with(kind="TestKind", error_type="ValueError")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="error")
        assert mock_metrics.reconcile_duration_seconds.labels.called
