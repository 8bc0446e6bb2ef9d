"""Error taxonomy for clipboard uploads."""

from dataclasses import dataclass
from typing import Optional


class ClipRelayError(Exception):
    """Base class for every failure that ends an upload run."""

    kind = "error"
    open_preferences = False

    def __init__(
        self,
        title: str,
        message: str,
        original_error: Optional[Exception] = None,
        open_preferences: Optional[bool] = None
    ):
        super().__init__(message)
        self.title = title
        self.message = message
        self.original_error = original_error
        if open_preferences is not None:
            self.open_preferences = open_preferences

    def __str__(self):
        return self.message


class ConfigurationError(ClipRelayError):
    """Missing or malformed storage settings or size limit."""

    kind = "configuration"
    open_preferences = True


class PolicyError(ClipRelayError):
    """Content rejected by the admission policy."""

    kind = "policy"


class ClipboardError(ClipRelayError):
    """Clipboard content is unreadable or unsupported."""

    kind = "clipboard"


class TransportError(ClipRelayError):
    """The storage transport failed; message is passed through verbatim."""

    kind = "transport"


@dataclass(frozen=True)
class PersistenceRecoveryWarning:
    """Non-fatal notice that stored state was reset to a clean equivalent."""

    title: str
    message: str
