"""Room membership, host succession, and orchestration."""
