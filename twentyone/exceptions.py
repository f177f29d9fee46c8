"""Exception hierarchy for the twenty-one engine."""


class TwentyOneError(Exception):
    """Base class for all engine errors."""


class InvalidOperation(TwentyOneError):
    """A mutating operation was called while its guard does not hold.

    Only raised when the engine runs with ``RuleSet(strict=True)``;
    otherwise the call is a no-op that returns ``False``.
    """

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"{operation}: {reason}")
        self.operation = operation
        self.reason = reason


class ExhaustedDeck(TwentyOneError, IndexError):
    """The deck has no cards left to draw."""


class PersistenceFailure(TwentyOneError):
    """Saving or loading a game failed."""
