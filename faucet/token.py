import logging
import threading
from typing import Optional

from .errors import (
    AllowanceExceededError,
    CapExceededError,
    InsufficientBalanceError,
    InvalidArgumentError,
    UnauthorizedError,
)
from .events import EventLog, deferred_notifications
from .models import (
    DEFAULT_SUPPLY_CAP,
    MINT_ORIGIN,
    Approval,
    IssuerUpdated,
    Transfer,
)

logger = logging.getLogger(__name__)


def require_identity(identity: Optional[str], label: str = "identity") -> str:
    if not isinstance(identity, str) or not identity.strip():
        raise InvalidArgumentError(f"{label} must be a non-empty address")
    return identity


def require_amount(amount: int, allow_zero: bool = False) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidArgumentError(f"amount must be an integer, got {type(amount).__name__}")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidArgumentError(f"amount must be {'non-negative' if allow_zero else 'positive'}, got {amount}")
    return amount


class TokenStorage:
    def __init__(self):
        self.balances: dict[str, int] = {}
        self.allowances: dict[tuple[str, str], int] = {}
        self.total_supply: int = 0
        self.issuer: Optional[str] = None


class CreditLedger:
    """Capped fungible credit with a single authorized issuer.

    The supply cap is checked here on every issuance, independently of
    whatever bookkeeping the issuer keeps, so a faulty issuer can never
    push total supply past the cap.
    """

    def __init__(
        self,
        owner: str,
        supply_cap: int = DEFAULT_SUPPLY_CAP,
        name: str = "Faucet Token",
        symbol: str = "FCT",
        decimals: int = 18,
        events: Optional[EventLog] = None,
        storage: Optional[TokenStorage] = None,
    ):
        self.owner = require_identity(owner, "owner")
        self.supply_cap = require_amount(supply_cap)
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.events = events if events is not None else EventLog()
        self.storage = storage or TokenStorage()
        self.lock = threading.RLock()

    @property
    def issuer(self) -> Optional[str]:
        with self.lock:
            return self.storage.issuer

    @property
    def total_supply(self) -> int:
        with self.lock:
            return self.storage.total_supply

    def balance_of(self, identity: str) -> int:
        with self.lock:
            return self.storage.balances.get(identity, 0)

    def allowance(self, owner: str, spender: str) -> int:
        with self.lock:
            return self.storage.allowances.get((owner, spender), 0)

    def set_issuer(self, caller: str, identity: str) -> None:
        with deferred_notifications(), self.lock:
            if caller != self.owner:
                raise UnauthorizedError(f"{caller} is not the token owner")
            require_identity(identity, "issuer")
            previous = self.storage.issuer
            self.storage.issuer = identity
            self.events.emit(IssuerUpdated(identity=identity))

        logger.info("Issuer changed from %s to %s", previous, identity)

    def issue(self, caller: str, to: str, amount: int) -> None:
        with deferred_notifications(), self.lock:
            if self.storage.issuer is None or caller != self.storage.issuer:
                raise UnauthorizedError(f"{caller} is not allowed to issue {self.symbol}")
            require_identity(to, "recipient")
            require_amount(amount)
            if self.storage.total_supply + amount > self.supply_cap:
                raise CapExceededError(
                    f"Issuing {amount} would raise supply to {self.storage.total_supply + amount}, "
                    f"above the cap of {self.supply_cap}"
                )

            self.storage.balances[to] = self.storage.balances.get(to, 0) + amount
            self.storage.total_supply += amount
            supply = self.storage.total_supply
            # Recorded under the lock so the log lists issuances in supply order.
            self.events.emit(Transfer(sender=MINT_ORIGIN, recipient=to, amount=amount))

        logger.debug("Issued %d to %s (supply %d)", amount, to, supply)

    def transfer(self, caller: str, to: str, amount: int) -> None:
        with deferred_notifications(), self.lock:
            require_identity(caller, "sender")
            self._move(caller, to, amount)

    def approve(self, caller: str, spender: str, amount: int) -> None:
        with deferred_notifications(), self.lock:
            require_identity(caller, "owner")
            require_identity(spender, "spender")
            require_amount(amount, allow_zero=True)
            self.storage.allowances[(caller, spender)] = amount
            self.events.emit(Approval(owner=caller, spender=spender, amount=amount))

    def transfer_from(self, caller: str, sender: str, to: str, amount: int) -> None:
        with deferred_notifications(), self.lock:
            require_identity(caller, "spender")
            require_identity(sender, "sender")
            if sender == MINT_ORIGIN:
                raise InvalidArgumentError("the mint origin cannot send tokens")
            require_amount(amount, allow_zero=True)
            allowed = self.storage.allowances.get((sender, caller), 0)
            if allowed < amount:
                raise AllowanceExceededError(f"{caller} may spend {allowed} of {sender}'s balance, not {amount}")

            self._move(sender, to, amount)
            self.storage.allowances[(sender, caller)] = allowed - amount

    def snapshot(self) -> dict:
        with self.lock:
            return {
                "balances": dict(self.storage.balances),
                "total_supply": self.storage.total_supply,
                "issuer": self.storage.issuer,
            }

    def _move(self, sender: str, to: str, amount: int) -> None:
        if sender == MINT_ORIGIN:
            raise InvalidArgumentError("the mint origin cannot send tokens")
        require_identity(to, "recipient")
        if to == MINT_ORIGIN:
            raise InvalidArgumentError("cannot transfer to the mint origin")
        require_amount(amount, allow_zero=True)
        available = self.storage.balances.get(sender, 0)
        if available < amount:
            raise InsufficientBalanceError(f"{sender} holds {available}, cannot send {amount}")

        self.storage.balances[sender] = available - amount
        self.storage.balances[to] = self.storage.balances.get(to, 0) + amount
        self.events.emit(Transfer(sender=sender, recipient=to, amount=amount))
