"""Health module - liveness and diagnostics."""
