"""Command-line interface for the music catalog."""
