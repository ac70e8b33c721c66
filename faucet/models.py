from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, model_validator


WEI_PER_TOKEN = 10 ** 18
MINT_ORIGIN = "0x0000000000000000000000000000000000000000"

DEFAULT_CLAIM_AMOUNT = 10 * WEI_PER_TOKEN
DEFAULT_COOLDOWN = 24 * 60 * 60
DEFAULT_LIFETIME_CAP = 100 * WEI_PER_TOKEN
DEFAULT_SUPPLY_CAP = 100_000_000 * WEI_PER_TOKEN

# Base-unit amounts overflow JavaScript numbers, so they travel as strings.
Amount = Annotated[int, PlainSerializer(str, return_type=str, when_used="json")]


class ClaimState(str, Enum):
    NEVER_CLAIMED = "NEVER_CLAIMED"
    COOLDOWN = "COOLDOWN"
    READY = "READY"
    EXHAUSTED = "EXHAUSTED"


class ClaimRecord(BaseModel):
    last_claim_at: int = Field(..., ge=0)
    total_claimed: Amount = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)


class FaucetConfig(BaseModel):
    claim_amount: Amount = Field(default=DEFAULT_CLAIM_AMOUNT, gt=0)
    cooldown: int = Field(default=DEFAULT_COOLDOWN, ge=0, description="Seconds between claims")
    lifetime_cap: Amount = Field(default=DEFAULT_LIFETIME_CAP, gt=0)
    supply_cap: Amount = Field(default=DEFAULT_SUPPLY_CAP, gt=0)
    token_name: str = "Faucet Token"
    token_symbol: str = "FCT"
    token_decimals: int = Field(default=18, ge=0, le=36)
    owner: str = Field(default="owner", min_length=1)
    faucet_address: str = Field(default="faucet", min_length=1)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_limits(self) -> "FaucetConfig":
        if self.claim_amount > self.lifetime_cap:
            raise ValueError("claim_amount must not exceed lifetime_cap")
        if self.lifetime_cap > self.supply_cap:
            raise ValueError("lifetime_cap must not exceed supply_cap")
        if self.owner == self.faucet_address:
            raise ValueError("owner and faucet_address must differ")
        return self


class Eligibility(BaseModel):
    identity: str
    state: ClaimState
    can_claim: bool
    paused: bool
    remaining_allowance: Amount
    time_until_next_claim: int
    last_claim_at: int
    total_claimed: Amount
    evaluated_at: int


class Claimed(BaseModel):
    name: Literal["Claimed"] = "Claimed"
    sequence: int = 0
    identity: str
    amount: Amount
    timestamp: int

    model_config = ConfigDict(frozen=True)


class PausedChanged(BaseModel):
    name: Literal["PausedChanged"] = "PausedChanged"
    sequence: int = 0
    paused: bool

    model_config = ConfigDict(frozen=True)


class IssuerUpdated(BaseModel):
    name: Literal["IssuerUpdated"] = "IssuerUpdated"
    sequence: int = 0
    identity: str

    model_config = ConfigDict(frozen=True)


class Transfer(BaseModel):
    name: Literal["Transfer"] = "Transfer"
    sequence: int = 0
    sender: str
    recipient: str
    amount: Amount

    model_config = ConfigDict(frozen=True)


class Approval(BaseModel):
    name: Literal["Approval"] = "Approval"
    sequence: int = 0
    owner: str
    spender: str
    amount: Amount

    model_config = ConfigDict(frozen=True)


Event = Annotated[
    Union[Claimed, PausedChanged, IssuerUpdated, Transfer, Approval],
    Field(discriminator="name"),
]


class PauseRequest(BaseModel):
    paused: bool


class IssuerRequest(BaseModel):
    issuer: str = Field(..., description="Identity allowed to mint")


class TransferRequest(BaseModel):
    to: str
    amount: int = Field(..., ge=0, description="Amount in base units")

    model_config = ConfigDict(json_schema_extra={
        "example": {"to": "0x70997970C51812dc3A010C7d01b50e0d17dc79C8", "amount": "5000000000000000000"}
    })


class ClaimResponse(BaseModel):
    identity: str
    amount: Amount
    timestamp: int
    balance: Amount
    remaining_allowance: Amount
    next_claim_at: Optional[int] = None
    message: str


class BalanceResponse(BaseModel):
    identity: str
    balance: Amount
    symbol: str


class TokenInfo(BaseModel):
    name: str
    symbol: str
    decimals: int
    total_supply: Amount
    supply_cap: Amount
    issuer: Optional[str] = None
    paused: bool


class EventPage(BaseModel):
    events: list[Event]
    total_count: int
