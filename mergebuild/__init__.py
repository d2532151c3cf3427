"""merge-builder: content-addressed compaction of web assets."""

__version__ = "0.1.0"
