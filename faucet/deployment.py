import logging
from dataclasses import dataclass
from typing import Optional

from .clock import Clock
from .events import EventLog
from .models import FaucetConfig
from .service import FaucetService
from .token import CreditLedger

logger = logging.getLogger(__name__)


@dataclass
class Deployment:
    config: FaucetConfig
    token: CreditLedger
    faucet: FaucetService
    events: EventLog


def deploy(
    config: Optional[FaucetConfig] = None,
    clock: Optional[Clock] = None,
    events: Optional[EventLog] = None,
) -> Deployment:
    """Create the ledger and the faucet, then make the faucet the sole issuer."""
    config = config or FaucetConfig()
    events = events if events is not None else EventLog()

    token = CreditLedger(
        owner=config.owner,
        supply_cap=config.supply_cap,
        name=config.token_name,
        symbol=config.token_symbol,
        decimals=config.token_decimals,
        events=events,
    )
    logger.info("Deployed %s (%s) owned by %s", token.name, token.symbol, token.owner)

    faucet = FaucetService(token, config=config, clock=clock, events=events)
    logger.info("Deployed faucet at %s", faucet.address)

    token.set_issuer(config.owner, faucet.address)
    return Deployment(config=config, token=token, faucet=faucet, events=events)
