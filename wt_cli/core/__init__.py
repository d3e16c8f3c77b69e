"""Core workout tracker logic."""
