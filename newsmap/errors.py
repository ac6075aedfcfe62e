"""Exception taxonomy for the sitemap service.

Infrastructure failures (:class:`ConfigurationError`, :class:`StoreQueryError`)
abort the request and surface as HTTP 500 with a generic body.  Data-quality
problems never abort a batch: a :class:`MalformedRecordError` is caught per
record and the record is skipped, while validation findings are collected as
plain strings in the report.
"""


class NewsmapError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(NewsmapError):
    """Backend credentials or connection settings are missing."""


class StoreQueryError(NewsmapError):
    """The content store could not be queried or returned unusable data."""


class MalformedRecordError(NewsmapError):
    """A single article or category lacks a field required for output."""

    def __init__(self, kind: str, record_id: object, reason: str) -> None:
        self.kind = kind
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"{kind} {record_id}: {reason}")
