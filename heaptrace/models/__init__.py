"""Data models for heap snapshots and query results."""
