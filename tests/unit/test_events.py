"""Tests for Kubernetes event utilities."""

from __future__ import annotations

from unittest.mock import patch

from power_monitor_operator.utils.events import (
    emit_event,
    emit_invalid_resource,
    emit_reconcile_failed,
    emit_reconcile_requeued,
    emit_reconcile_started,
    emit_reconcile_succeeded,
)

BODY = {
    "apiVersion": "kepler.system.sustainable.computing.io/v1alpha1",
    "kind": "PowerMonitor",
    "metadata": {"name": "power-monitor", "uid": "uid-1"},
}


class TestEmitEvent:
    """Test cases for emit_event function."""

    @patch("power_monitor_operator.utils.events.kopf.event")
    def test_emit_event_normal(self, mock_event):
        """Test emitting normal event."""
        emit_event(BODY, "TestReason", "Test message")

        mock_event.assert_called_once_with(
            BODY,
            reason="TestReason",
            message="Test message",
            type="Normal",
        )

    @patch("power_monitor_operator.utils.events.kopf.event")
    def test_emit_event_warning(self, mock_event):
        """Test emitting warning event."""
        emit_event(BODY, "ErrorReason", "Error occurred", type_="Warning")

        mock_event.assert_called_once_with(
            BODY,
            reason="ErrorReason",
            message="Error occurred",
            type="Warning",
        )


class TestReconcileEvents:
    """Test cases for reconciliation events."""

    @patch("power_monitor_operator.utils.events.kopf.event")
    def test_emit_reconcile_started(self, mock_event):
        """Test emitting reconcile started event."""
        emit_reconcile_started(BODY)

        call_args = mock_event.call_args
        assert call_args[0][0] == BODY
        assert "started" in call_args[1]["message"].lower()
        assert call_args[1]["type"] == "Normal"

    @patch("power_monitor_operator.utils.events.kopf.event")
    def test_emit_reconcile_succeeded(self, mock_event):
        """Test emitting reconcile succeeded event."""
        emit_reconcile_succeeded(BODY)

        call_args = mock_event.call_args
        assert "succeeded" in call_args[1]["message"].lower()
        assert call_args[1]["type"] == "Normal"

    @patch("power_monitor_operator.utils.events.kopf.event")
    def test_emit_reconcile_requeued(self, mock_event):
        """Test emitting reconcile requeued event."""
        emit_reconcile_requeued(BODY, "Reconciliation requeued after 5.0s")

        call_args = mock_event.call_args
        assert call_args[1]["reason"] == "ReconcileRequeued"
        assert "5.0s" in call_args[1]["message"]

    @patch("power_monitor_operator.utils.events.kopf.event")
    def test_emit_reconcile_failed(self, mock_event):
        """Test emitting reconcile failed event."""
        error_msg = "namespace create failed"

        emit_reconcile_failed(BODY, error_msg)

        call_args = mock_event.call_args
        assert error_msg in call_args[1]["message"]
        assert call_args[1]["type"] == "Warning"

    @patch("power_monitor_operator.utils.events.kopf.event")
    def test_emit_invalid_resource(self, mock_event):
        """Test emitting invalid resource event."""
        emit_invalid_resource(BODY, "Only one instance is reconciled")

        call_args = mock_event.call_args
        assert call_args[1]["type"] == "Warning"
        assert "Only one instance" in call_args[1]["message"]
