from __future__ import annotations


class ExporterError(Exception):
    """Base class for exporter errors."""


class FetchError(ExporterError):
    """Per-scrape data for a modem could not be retrieved."""

    def __init__(self, what: str, device_id: str, cause: BaseException) -> None:
        super().__init__(f"failed to get {what} for modem {device_id!r}: {cause}")
        self.what = what
        self.device_id = device_id


class ScrapeError(ExporterError):
    """A scrape failed and produced no samples."""

    def __init__(self, metric: str, err: BaseException) -> None:
        super().__init__(f'error collecting metric "{metric}": {err}')
        self.metric = str(metric)
        self.err = err


class ScrapeTimeoutError(ScrapeError):
    """A scrape exceeded its time budget."""


class UnhandledMetricError(AssertionError):
    """The metric catalog and the scrape dispatch have drifted apart."""
