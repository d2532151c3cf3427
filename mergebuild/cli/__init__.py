"""Command line interface for merge-builder."""
