"""
Error taxonomy for the gateway.

Every error carries a machine-checkable ``code`` and an HTTP-style
``status_code`` so the boundary can turn it into a response.
"""

from typing import Optional


class GatewayError(Exception):
    """Base exception for gateway errors."""

    code = "gateway_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class RequestError(GatewayError):
    """The incoming payload has no usable query."""

    code = "invalid_request"
    status_code = 400


class ConfigurationError(GatewayError):
    """Site credentials are missing or incomplete."""

    code = "configuration_error"
    status_code = 500


class ResolutionError(GatewayError):
    """No strategy produced an interpretable operation."""

    code = "resolution_failed"
    status_code = 400

    def __init__(self, message: str, *, query: str = "", strategy: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.query = query
        self.strategy = strategy


class ExecutionError(GatewayError):
    """A resolved operation cannot be executed as given."""

    code = "execution_failed"
    status_code = 400


class UpstreamError(GatewayError):
    """The CMS REST call itself failed."""

    code = "upstream_error"
    status_code = 502

    def __init__(self, message: str, *, operation: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
