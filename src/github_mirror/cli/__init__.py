"""Command-line interface for GitHub Mirror."""
