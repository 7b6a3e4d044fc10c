"""Command line interface for buildkeeper."""
