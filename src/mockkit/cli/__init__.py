"""Command-line interface for mockkit."""
