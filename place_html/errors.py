"""Exceptions raised by place-html."""


class PlaceError(Exception):
    """A fatal condition that aborts the whole run."""
