# src/check_certs/exceptions.py

class CheckCertsError(Exception):
    """Base class for all check-certs errors."""


class ValidationError(CheckCertsError, ValueError):
    """The request batch itself is unusable (e.g. no hosts at all)."""


class HostSpecError(CheckCertsError, ValueError):
    """A host[:port] string could not be split."""


class FetchError(CheckCertsError):
    """Connecting to a host or completing the TLS handshake failed."""

    def __init__(self, host: str, port: str, message: str):
        super().__init__(message)
        self.host = host
        self.port = port


class TemplateRenderError(CheckCertsError):
    """A user supplied output template is malformed."""
