"""Version information for db-changelog."""

__version__ = "1.0.0"
