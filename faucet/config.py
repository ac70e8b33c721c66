import logging
import os
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import ValidationError

from .errors import ConfigurationError
from .models import WEI_PER_TOKEN, FaucetConfig


def parse_amount(raw: str) -> int:
    """Parse a whole-token amount ("10", "0.5") or a base-unit one ("wei:1000")."""
    text = raw.strip()
    try:
        if text.lower().startswith("wei:"):
            return int(text[4:])
        value = Decimal(text) * WEI_PER_TOKEN
    except (ValueError, InvalidOperation):
        raise ConfigurationError(f"Invalid amount: {raw!r}")
    if not value.is_finite():
        raise ConfigurationError(f"Invalid amount: {raw!r}")
    if value != value.to_integral_value():
        raise ConfigurationError(f"Amount {raw!r} is finer than one base unit")
    return int(value)


def _get_amount(name: str) -> Optional[int]:
    raw = os.getenv(name)
    return parse_amount(raw) if raw else None


def _get_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def load_config() -> FaucetConfig:
    values = {
        "claim_amount": _get_amount("FAUCET_CLAIM_AMOUNT"),
        "cooldown": _get_int("FAUCET_COOLDOWN_SECONDS"),
        "lifetime_cap": _get_amount("FAUCET_LIFETIME_CAP"),
        "supply_cap": _get_amount("FAUCET_SUPPLY_CAP"),
        "owner": os.getenv("FAUCET_OWNER"),
        "faucet_address": os.getenv("FAUCET_ADDRESS"),
        "token_name": os.getenv("FAUCET_TOKEN_NAME"),
        "token_symbol": os.getenv("FAUCET_TOKEN_SYMBOL"),
    }
    try:
        return FaucetConfig(**{k: v for k, v in values.items() if v is not None})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid faucet configuration: {e}")


def configure_logging(level: Optional[str] = None) -> None:
    level = (level or os.getenv("FAUCET_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
