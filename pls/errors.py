"""Exception hierarchy shared by the pls modules."""


class PlsError(Exception):
    """Base class for every error raised by pls."""


class MalformedInput(PlsError, ValueError):
    """The ingestion document could not be decoded or failed validation."""


class StoreUnavailable(PlsError):
    """The record store could not be opened or queried."""


class NoMatch(PlsError):
    """A query produced no result where one was required."""


class InvalidTemplate(PlsError, ValueError):
    """A format template references placeholders the record does not have."""

    def __init__(self, message: str, placeholders=None):
        super().__init__(message)
        self.placeholders = list(placeholders or [])


class NotAStruct(PlsError, TypeError):
    """A value passed to the formatter is not a record instance."""


class InvalidUrl(PlsError, ValueError):
    """A URL is not the kind of YouTube URL the caller expects."""


class FetchFailed(PlsError):
    """Fetching playlist metadata from the remote site failed."""


class SelectorUnavailable(PlsError):
    """The external interactive selector could not be run."""
