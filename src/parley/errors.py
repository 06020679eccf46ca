"""Root of the exception hierarchy."""


class ParleyError(Exception):
    """Base class for all recoverable errors raised by parley."""
