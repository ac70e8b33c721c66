import logging
import threading
from typing import Optional

from .clock import Clock, SystemClock
from .errors import (
    CooldownActiveError,
    FaucetError,
    FaucetPausedError,
    InsufficientAllowanceError,
    LifetimeLimitReachedError,
    UnauthorizedError,
)
from .events import EventLog, deferred_notifications
from .models import (
    ClaimRecord,
    ClaimState,
    Claimed,
    Eligibility,
    FaucetConfig,
    PausedChanged,
)
from .token import CreditLedger, require_identity

logger = logging.getLogger(__name__)


class InMemoryStorage:
    def __init__(self):
        self.records: dict[str, ClaimRecord] = {}
        self.paused: bool = False


class FaucetService:
    """Rate-limited issuer in front of a CreditLedger.

    A claim passes four guards in a fixed order (pause, cooldown, lifetime
    cap, remaining allowance). The claimant's record is committed before the
    ledger is asked to issue, and restored if issuance fails, so the record
    and the balance always move together.
    """

    def __init__(
        self,
        token: CreditLedger,
        config: Optional[FaucetConfig] = None,
        clock: Optional[Clock] = None,
        events: Optional[EventLog] = None,
        storage: Optional[InMemoryStorage] = None,
    ):
        self.token = token
        self.config = config or FaucetConfig()
        self.clock = clock or SystemClock()
        self.events = events if events is not None else EventLog()
        self.storage = storage or InMemoryStorage()
        self._lock = threading.RLock()

    @property
    def owner(self) -> str:
        return self.config.owner

    @property
    def address(self) -> str:
        return self.config.faucet_address

    @property
    def claim_amount(self) -> int:
        return self.config.claim_amount

    @property
    def cooldown(self) -> int:
        return self.config.cooldown

    @property
    def lifetime_cap(self) -> int:
        return self.config.lifetime_cap

    @property
    def supply_cap(self) -> int:
        return self.token.supply_cap

    @property
    def is_paused(self) -> bool:
        return self.storage.paused

    def request_claim(self, caller: str) -> int:
        require_identity(caller, "caller")
        amount = self.config.claim_amount

        with deferred_notifications(), self._lock, self.token.lock:
            now = self.clock.now()
            try:
                previous = self._check_eligibility(caller, now)
            except FaucetError as e:
                logger.info("Claim by %s rejected: %s", caller, e.code)
                raise

            committed = ClaimRecord(
                last_claim_at=now,
                total_claimed=(previous.total_claimed if previous else 0) + amount,
            )
            self.storage.records[caller] = committed
            try:
                self.token.issue(self.address, caller, amount)
            except Exception as e:
                self._rollback(caller, previous, committed, amount)
                logger.warning("Issuance to %s failed, claim rolled back: %s", caller, e)
                raise

            self.events.emit(Claimed(identity=caller, amount=amount, timestamp=now))

        logger.info("Claim by %s: %d issued at %d", caller, amount, now)
        return amount

    def can_claim(self, identity: str) -> bool:
        with self._lock:
            return self._eligible(identity, self.clock.now())

    def claim_state(self, identity: str) -> ClaimState:
        with self._lock:
            return self._state(self.storage.records.get(identity), self.clock.now())

    def remaining_allowance(self, identity: str) -> int:
        with self._lock:
            return self._remaining(self.storage.records.get(identity))

    def time_until_next_claim(self, identity: str) -> int:
        with self._lock:
            return self._wait(self.storage.records.get(identity), self.clock.now())

    def last_claim_at(self, identity: str) -> int:
        with self._lock:
            record = self.storage.records.get(identity)
            return record.last_claim_at if record else 0

    def total_claimed(self, identity: str) -> int:
        with self._lock:
            record = self.storage.records.get(identity)
            return record.total_claimed if record else 0

    def eligibility(self, identity: str) -> Eligibility:
        with self._lock:
            now = self.clock.now()
            record = self.storage.records.get(identity)
            return Eligibility(
                identity=identity,
                state=self._state(record, now),
                can_claim=self._eligible(identity, now),
                paused=self.storage.paused,
                remaining_allowance=self._remaining(record),
                time_until_next_claim=self._wait(record, now),
                last_claim_at=record.last_claim_at if record else 0,
                total_claimed=record.total_claimed if record else 0,
                evaluated_at=now,
            )

    def set_paused(self, caller: str, paused: bool) -> None:
        with deferred_notifications(), self._lock:
            if caller != self.owner:
                raise UnauthorizedError(f"{caller} is not the faucet owner")
            self.storage.paused = bool(paused)
            self.events.emit(PausedChanged(paused=self.storage.paused))

        logger.info("Faucet %s by %s", "paused" if paused else "resumed", caller)

    def _check_eligibility(self, identity: str, now: int) -> Optional[ClaimRecord]:
        require_identity(identity, "caller")
        if self.storage.paused:
            raise FaucetPausedError("Faucet is paused")

        record = self.storage.records.get(identity)
        wait = self._wait(record, now)
        if wait > 0:
            raise CooldownActiveError(f"Cooldown period not elapsed, retry in {wait}s", retry_after=wait)
        if record and record.total_claimed >= self.config.lifetime_cap:
            raise LifetimeLimitReachedError("Lifetime claim limit reached")
        if self._remaining(record) < self.config.claim_amount:
            raise InsufficientAllowanceError(
                f"Remaining allowance {self._remaining(record)} is below the claim amount {self.config.claim_amount}"
            )
        return record

    def _eligible(self, identity: str, now: int) -> bool:
        try:
            self._check_eligibility(identity, now)
        except FaucetError:
            return False
        # The ledger runs its own checks on issue; mirror them so a True here
        # means request_claim would succeed at this instant.
        with self.token.lock:
            return (
                self.token.issuer == self.address
                and self.token.total_supply + self.config.claim_amount <= self.token.supply_cap
            )

    def _state(self, record: Optional[ClaimRecord], now: int) -> ClaimState:
        if record is None:
            return ClaimState.NEVER_CLAIMED
        if record.total_claimed >= self.config.lifetime_cap:
            return ClaimState.EXHAUSTED
        if self._wait(record, now) > 0:
            return ClaimState.COOLDOWN
        return ClaimState.READY

    def _remaining(self, record: Optional[ClaimRecord]) -> int:
        claimed = record.total_claimed if record else 0
        return max(self.config.lifetime_cap - claimed, 0)

    def _wait(self, record: Optional[ClaimRecord], now: int) -> int:
        if record is None:
            return 0
        return max(record.last_claim_at + self.config.cooldown - now, 0)

    def _rollback(
        self,
        caller: str,
        previous: Optional[ClaimRecord],
        committed: ClaimRecord,
        amount: int,
    ) -> None:
        current = self.storage.records.get(caller)
        if current is committed:
            if previous is None:
                del self.storage.records[caller]
            else:
                self.storage.records[caller] = previous
        elif current is not None:
            # A nested claim landed on top of ours; only undo our own share.
            self.storage.records[caller] = ClaimRecord(
                last_claim_at=current.last_claim_at,
                total_claimed=current.total_claimed - amount,
            )
