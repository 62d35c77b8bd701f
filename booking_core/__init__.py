"""Hotel booking orchestration core."""
