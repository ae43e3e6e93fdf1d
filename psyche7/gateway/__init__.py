from .errors import ConfigurationError, EmptyPayloadError, GatewayError, MalformedPayloadError
from .gemini import DEFAULT_MODEL, GeminiGateway

__all__ = [
    "ConfigurationError",
    "EmptyPayloadError",
    "GatewayError",
    "MalformedPayloadError",
    "DEFAULT_MODEL",
    "GeminiGateway",
]
