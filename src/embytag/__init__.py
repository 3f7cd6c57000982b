"""Local tags, comments and ratings for an Emby media catalog."""

__version__ = "0.1.0"
