"""Long-form document orchestration service."""
