"""Command line interface for bump-py."""
