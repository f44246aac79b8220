"""
Error kinds surfaced by the rules gateway.
"""


class RulesEngineError(Exception):
    """Base exception for rules gateway errors"""

    default_message = "rules engine error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class MalformedEntityError(RulesEngineError):
    """Malformed entity specification (bad input or undecodable response)"""

    default_message = "malformed entity specification"


class UnauthorizedAccessError(RulesEngineError):
    """Missing or invalid credentials provided when accessing a protected resource"""

    default_message = "missing or invalid credentials provided"


class KuiperServerError(RulesEngineError):
    """Kuiper rules engine could not be reached or misbehaved"""

    default_message = "kuiper internal server error"


class NotFoundError(KuiperServerError):
    """Non-existent entity requested"""

    default_message = "non-existent entity"


class TokenValidationError(Exception):
    """Token validation failed"""
    pass


class ChannelLookupError(Exception):
    """Channel does not exist or is not accessible with the given token"""
    pass
