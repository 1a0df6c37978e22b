"""podcaster - fetch the latest episodes of your podcasts."""

__version__ = "0.1.0"
