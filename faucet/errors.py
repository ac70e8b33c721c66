from typing import Optional


class FaucetError(Exception):
    code = "FaucetError"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class UnauthorizedError(FaucetError):
    code = "Unauthorized"


class InvalidArgumentError(FaucetError):
    code = "InvalidArgument"


class FaucetPausedError(FaucetError):
    code = "FaucetPaused"


class CooldownActiveError(FaucetError):
    code = "CooldownActive"

    def __init__(self, message: Optional[str] = None, retry_after: int = 0):
        super().__init__(message)
        self.retry_after = retry_after

    def to_dict(self) -> dict:
        return {**super().to_dict(), "retry_after": self.retry_after}


class LifetimeLimitReachedError(FaucetError):
    code = "LifetimeLimitReached"


class InsufficientAllowanceError(FaucetError):
    code = "InsufficientAllowance"


class CapExceededError(FaucetError):
    code = "CapExceeded"


class InsufficientBalanceError(FaucetError):
    code = "InsufficientBalance"


class AllowanceExceededError(FaucetError):
    code = "AllowanceExceeded"


class ConfigurationError(FaucetError):
    code = "ConfigurationError"
