"""
Rate-Limited Token Faucet

This package provides:
- A capped credit ledger with a single authorized issuer
- A faucet that hands out a fixed amount per claim
- Per-address cooldowns and lifetime caps, plus an owner kill-switch
- All-or-nothing claims: faucet records and ledger balances move together
- An ordered event log for external observers
"""

from .clock import ManualClock, SystemClock
from .deployment import Deployment, deploy
from .errors import (
    AllowanceExceededError,
    CapExceededError,
    ConfigurationError,
    CooldownActiveError,
    FaucetError,
    FaucetPausedError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidArgumentError,
    LifetimeLimitReachedError,
    UnauthorizedError,
)
from .events import EventLog
from .models import (
    MINT_ORIGIN,
    WEI_PER_TOKEN,
    ClaimRecord,
    ClaimState,
    Eligibility,
    FaucetConfig,
)
from .service import FaucetService
from .token import CreditLedger

__all__ = [
    "ManualClock",
    "SystemClock",
    "Deployment",
    "deploy",
    "FaucetError",
    "UnauthorizedError",
    "InvalidArgumentError",
    "FaucetPausedError",
    "CooldownActiveError",
    "LifetimeLimitReachedError",
    "InsufficientAllowanceError",
    "CapExceededError",
    "InsufficientBalanceError",
    "AllowanceExceededError",
    "ConfigurationError",
    "EventLog",
    "MINT_ORIGIN",
    "WEI_PER_TOKEN",
    "ClaimRecord",
    "ClaimState",
    "Eligibility",
    "FaucetConfig",
    "FaucetService",
    "CreditLedger",
]
