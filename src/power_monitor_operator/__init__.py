"""Power Monitor Operator: declarative reconciliation of power monitoring deployments."""

__version__ = "0.1.0"
