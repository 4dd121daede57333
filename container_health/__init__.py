"""Container health monitor — polls Docker, classifies, caches and persists."""
