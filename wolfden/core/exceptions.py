"""Custom exceptions for wolfden."""


class WolfdenError(Exception):
    """Base exception for all wolfden errors."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidActionError(WolfdenError):
    """Raised when an action breaks a game rule."""

    pass


class InvalidStateError(WolfdenError):
    """Raised when the game state is invalid or inconsistent."""

    pass


class HumanInputError(WolfdenError):
    """Raised when the host breaks the human-input contract.

    Submitting with no pending rendezvous, submitting twice, or submitting
    a target outside the published valid-target set all raise this.
    """

    pass


class AgentError(WolfdenError):
    """Raised when an agent fails or behaves incorrectly."""

    pass


class ConfigurationError(WolfdenError):
    """Raised when configuration is invalid."""

    pass


class LLMError(WolfdenError):
    """Raised when LLM API calls fail."""

    pass
