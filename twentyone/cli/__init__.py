"""Command-line interface for Twenty-One."""
