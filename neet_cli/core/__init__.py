"""Access gating and session orchestration."""
