"""Bluesky labeler that tags accounts for liking trigger posts."""

__version__ = "0.1.0"
