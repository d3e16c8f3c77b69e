"""Workout tracker command-line client with offline sync."""

__version__ = "0.1.0"
