"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidTransactionDataError(DomainException):
    """Ledger entry is malformed; carries the skip reason code"""

    def __init__(self, reason: str, detail: str = ""):
        super().__init__(detail or reason)
        self.reason = reason
        self.detail = detail


class ConfigurationError(DomainException):
    """Caller supplied an invalid goal or option; nothing was computed"""

    pass


class InvalidGoalError(ConfigurationError):
    """Goal amounts are negative"""

    pass


class InvalidWindowError(ConfigurationError):
    """Bucketing window or top-K size is out of range"""

    pass


class InvalidSubtypeError(ConfigurationError):
    """Caller tagged an expense category with an unknown subtype"""

    pass


class InvariantViolationError(DomainException):
    """Derived views disagree with each other - a programming error"""

    pass
