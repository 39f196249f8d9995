"""nextwipe: upcoming wipe, league and season dates for online games."""

__version__ = "1.0.0"
