from typing import Optional
from fastapi import FastAPI, Header, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware

from .config import configure_logging, load_config
from .deployment import Deployment, deploy
from .errors import (
    AllowanceExceededError,
    CapExceededError,
    CooldownActiveError,
    FaucetError,
    FaucetPausedError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidArgumentError,
    LifetimeLimitReachedError,
    UnauthorizedError,
)
from .models import (
    BalanceResponse,
    ClaimResponse,
    Eligibility,
    EventPage,
    FaucetConfig,
    IssuerRequest,
    PauseRequest,
    TokenInfo,
    TransferRequest,
)


ERROR_STATUS = {
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    LifetimeLimitReachedError: status.HTTP_409_CONFLICT,
    InsufficientAllowanceError: status.HTTP_409_CONFLICT,
    CapExceededError: status.HTTP_409_CONFLICT,
    InsufficientBalanceError: status.HTTP_409_CONFLICT,
    AllowanceExceededError: status.HTTP_409_CONFLICT,
    CooldownActiveError: status.HTTP_429_TOO_MANY_REQUESTS,
    FaucetPausedError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def http_error(e: FaucetError) -> HTTPException:
    headers = None
    if isinstance(e, CooldownActiveError):
        headers = {"Retry-After": str(e.retry_after)}
    code = ERROR_STATUS.get(type(e), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=code, detail=e.to_dict(), headers=headers)


def create_app(deployment: Optional[Deployment] = None, root_path: str = "") -> FastAPI:
    deployment = deployment or deploy(load_config())
    token = deployment.token
    faucet = deployment.faucet

    app = FastAPI(
        title="Token Faucet API",
        description="Rate-limited token faucet with per-address cooldowns and lifetime caps",
        version="1.0.0",
        root_path=root_path,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.deployment = deployment

    @app.get("/health", tags=["System"])
    def health_check():
        return {"status": "healthy", "service": "token-faucet"}

    @app.get("/config", response_model=FaucetConfig, tags=["System"])
    def get_config() -> FaucetConfig:
        return deployment.config

    @app.get("/token", response_model=TokenInfo, tags=["Token"])
    def get_token() -> TokenInfo:
        return TokenInfo(
            name=token.name,
            symbol=token.symbol,
            decimals=token.decimals,
            total_supply=token.total_supply,
            supply_cap=token.supply_cap,
            issuer=token.issuer,
            paused=faucet.is_paused,
        )

    @app.get("/users/{address}/balance", response_model=BalanceResponse, tags=["Users"])
    def get_balance(address: str) -> BalanceResponse:
        return BalanceResponse(identity=address, balance=token.balance_of(address), symbol=token.symbol)

    @app.get("/users/{address}/eligibility", response_model=Eligibility, tags=["Users"])
    def get_eligibility(address: str) -> Eligibility:
        return faucet.eligibility(address)

    @app.post("/claims", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED, tags=["Claims"])
    def request_claim(x_caller: str = Header(...)) -> ClaimResponse:
        try:
            amount = faucet.request_claim(x_caller)
        except FaucetError as e:
            raise http_error(e)

        snapshot = faucet.eligibility(x_caller)
        next_claim_at = None
        if snapshot.remaining_allowance >= faucet.claim_amount:
            next_claim_at = snapshot.last_claim_at + faucet.cooldown
        return ClaimResponse(
            identity=x_caller,
            amount=amount,
            timestamp=snapshot.last_claim_at,
            balance=token.balance_of(x_caller),
            remaining_allowance=snapshot.remaining_allowance,
            next_claim_at=next_claim_at,
            message="Tokens claimed successfully",
        )

    @app.post("/transfers", response_model=BalanceResponse, tags=["Token"])
    def transfer(request: TransferRequest, x_caller: str = Header(...)) -> BalanceResponse:
        try:
            token.transfer(x_caller, request.to, request.amount)
        except FaucetError as e:
            raise http_error(e)
        return BalanceResponse(identity=x_caller, balance=token.balance_of(x_caller), symbol=token.symbol)

    @app.post("/admin/pause", tags=["Admin"])
    def set_paused(request: PauseRequest, x_caller: str = Header(...)):
        try:
            faucet.set_paused(x_caller, request.paused)
        except FaucetError as e:
            raise http_error(e)
        return {"paused": faucet.is_paused}

    @app.post("/admin/issuer", tags=["Admin"])
    def set_issuer(request: IssuerRequest, x_caller: str = Header(...)):
        try:
            token.set_issuer(x_caller, request.issuer)
        except FaucetError as e:
            raise http_error(e)
        return {"issuer": token.issuer}

    @app.get("/events", response_model=EventPage, tags=["Events"])
    def list_events(name: Optional[str] = None, limit: int = Query(50, ge=0), offset: int = Query(0, ge=0)) -> EventPage:
        return EventPage(
            events=deployment.events.history(name=name, limit=limit, offset=offset),
            total_count=deployment.events.count(name=name),
        )

    return app


if __name__ == "__main__":
    import uvicorn
    configure_logging()
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
