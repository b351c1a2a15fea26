"""Errors raised by the ripper. Every stage has its own class so the caller can
report where a run stopped."""


class RipError(Exception):
    stage = 'rip'


class InvalidInput(RipError, ValueError):
    """The identifier, URL or option given by the user cannot be used."""
    stage = 'input'


class NotFound(RipError):
    """The identifier is well formed but the archive does not know it."""
    stage = 'manifest'


class UpstreamError(RipError):
    """The archive failed or answered with data we cannot use."""
    stage = 'manifest'


class TileFetchError(RipError):
    """One tile could not be fetched, decoded or had the wrong size."""
    stage = 'tiles'

    def __init__(self, coordinate, cause):
        self.coordinate = coordinate
        self.cause = cause
        super().__init__(f"tile (row={coordinate.row}, col={coordinate.col}): {cause}")


class CompositionError(RipError):
    """A tile does not fit the canvas. Indicates a geometry bug."""
    stage = 'compose'
