"""Error taxonomy shared by the codechat core and its outer surfaces."""

from __future__ import annotations


class CodechatError(Exception):
    """Base class for every error raised by codechat."""


class ConfigurationError(CodechatError):
    """Provider selection or credentials are missing or invalid."""


class UnknownProviderError(ConfigurationError):
    """The configured provider has no request/response translation."""


class ValidationError(CodechatError):
    """A required request field is missing."""


class FileAccessError(CodechatError):
    """A referenced file could not be read.

    Never escapes the file reader: it is converted to an error-content entry.
    """


class UpstreamError(CodechatError):
    """The provider call failed or returned something unusable."""

    def __init__(self, status: int | None, body: str) -> None:
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"AI API request failed: {body}")
        else:
            super().__init__(f"AI API request failed: {status} {body}")
