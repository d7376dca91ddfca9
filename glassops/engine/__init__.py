"""Policy engine, contract validation and phase orchestration."""
