"""heaptrace - retention analysis for memory-profiler heap snapshots."""

# Keep in sync with pyproject.toml [project] version.
__version__ = "0.1.0"
