"""Command line interface for querying audit log files."""
