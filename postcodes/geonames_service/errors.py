"""Exceptions raised by the GeoNames postal code pipeline."""


class PostcodeError(Exception):
    """Base exception for postal code fetch failures."""
    pass


class InvalidCountryCode(PostcodeError):
    """Raised when a country code is not exactly two bytes long."""

    def __init__(self, country_code: str, length: int):
        self.country_code = country_code
        self.length = length
        super().__init__(
            f"country code {country_code!r} has {length} bytes, want 2"
        )


class DownloadError(PostcodeError):
    """Raised when the archive download fails."""
    pass


class TransportError(DownloadError):
    """Raised when the request or the body read fails below HTTP."""
    pass


class UnexpectedStatus(DownloadError):
    """Raised when the download answers with neither 200 nor 304."""

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(f"GET {url}: status = {status_code}, want 200")


class ArchiveError(PostcodeError):
    """Raised when the downloaded archive cannot be unpacked."""
    pass


class MalformedArchive(ArchiveError):
    """Raised when the downloaded bytes are not a zip archive."""
    pass


class MemberNotFound(ArchiveError):
    """Raised when the archive lacks the expected member."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"zipfile missing {filename}")


class ExtractionError(ArchiveError):
    """Raised when the matched member cannot be read."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"read zipped {filename} failed")


class MalformedRecord(PostcodeError):
    """Raised when the tab separated data cannot be parsed."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
