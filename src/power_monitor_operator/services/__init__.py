"""External services consumed by the operator."""
