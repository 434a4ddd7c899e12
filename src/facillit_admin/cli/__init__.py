"""Command-line interface for the admin console."""
