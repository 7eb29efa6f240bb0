"""Exceptions shared by the loaders and the exception-rule table."""


class LoaderError(ValueError):
    """Raised when an input file is missing or does not have the expected shape."""
