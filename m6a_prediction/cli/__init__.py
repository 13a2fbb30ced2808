"""Command-line interfaces for m6A prediction."""
