"""Command-line interface for google-workspace-server."""
