"""Exceptions raised while parsing procfs data."""


class ProcError(Exception):
    """Base class for every error reported by procfskit."""


class IncompleteError(ProcError):
    """The data ended early or a required field was missing."""


class InternalError(ProcError):
    """A field was present but its value could not be interpreted."""