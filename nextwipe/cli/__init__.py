"""Operator CLI for nextwipe (``python -m nextwipe.cli``)."""
