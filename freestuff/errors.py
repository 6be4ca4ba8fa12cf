# freestuff/errors.py

class FetchError(Exception):
    """A source could not be fetched or its body could not be parsed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"fetch failed for {url}: {reason}")
        self.url = url
        self.reason = reason

class RunInProgressError(RuntimeError):
    """Raised when a scrape run is requested while another one is still going."""
