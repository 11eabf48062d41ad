"""Command line interface for xmlbind."""
