class CareerBridgeError(Exception):
    """Base class for errors raised by the CareerBridge service."""


class ProviderError(CareerBridgeError):
    """The call to the external model provider failed (transport, HTTP status, SDK)."""


class SchemaParseError(CareerBridgeError):
    """The provider answered, but the payload does not match the requested schema."""


class CVAnalysisFailed(SchemaParseError):
    def __init__(self, message: str = "Failed to analyze CV content."):
        super().__init__(message)


class FileImportError(CareerBridgeError):
    """Text could not be extracted from an uploaded CV file."""
