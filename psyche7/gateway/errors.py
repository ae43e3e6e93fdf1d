"""Exceptions raised by the analysis gateway."""


class GatewayError(Exception):
    """Base class for every failure of a gateway call."""


class ConfigurationError(GatewayError):
    """The gateway cannot be used because a credential is missing."""


class EmptyPayloadError(GatewayError):
    """The model answered without any usable text."""


class MalformedPayloadError(GatewayError):
    """The model's text is not valid JSON for the requested schema."""
