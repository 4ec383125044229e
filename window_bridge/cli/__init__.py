"""Command-line interface for window-bridge."""
