"""Errors raised by the pub-sub registry."""


class InvalidArgument(TypeError, ValueError):
    """Raised synchronously when a registry call receives an unusable argument.

    Subclasses both TypeError and ValueError so callers can catch whichever
    fits the argument they got wrong.
    """
