"""FastAPI backend: oracle operations over HTTP."""

from __future__ import annotations

from contextlib import asynccontextmanager
from threading import Lock

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from predoracle.api.schemas import (
    BalanceResponse,
    BondReleaseResponse,
    CreateEventRequest,
    DepositRequest,
    DisputeRequest,
    DueProposalsResponse,
    EventsListResponse,
    HealthResponse,
    InitializeRequest,
    NotificationsResponse,
    OracleStatusResponse,
    ProposalResponse,
    ProposalsListResponse,
    ProposeRequest,
    ResolveRequest,
    WithdrawRequest,
)
from predoracle.config import get_settings
from predoracle.core.service import OracleService
from predoracle.errors import OracleError
from predoracle.models import Event, ProposalState

# Set by run_api() before the server starts.
_config_profile: str | None = None
_service: OracleService | None = None
_service_lock = Lock()


def get_service() -> OracleService:
    """Process-wide OracleService on the configured database (created on first use)."""
    global _service
    with _service_lock:
        if _service is None:
            _service = OracleService.from_settings(get_settings(_config_profile))
        return _service


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    global _service
    with _service_lock:
        if _service is not None:
            _service.close()
            _service = None


app = FastAPI(title="predoracle API", version="0.1.0", lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


@app.exception_handler(OracleError)
async def _oracle_error_handler(request: Request, exc: OracleError) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok")


# --- Oracle ---
@app.post("/oracle/initialize", response_model=OracleStatusResponse, status_code=201)
def oracle_initialize(body: InitializeRequest, service: OracleService = Depends(get_service)) -> OracleStatusResponse:
    service.initialize(body.authority, body.bond_amount, body.liveness_period)
    return oracle_status(service)


@app.get("/oracle", response_model=OracleStatusResponse)
def oracle_status(service: OracleService = Depends(get_service)) -> OracleStatusResponse:
    config = service.get_config()
    return OracleStatusResponse(
        authority=config.authority,
        bond_amount=config.bond_amount,
        liveness_period=config.liveness_period,
        active_proposals=config.active_proposals,
        total_resolved=config.total_resolved,
        event_count=config.event_seq,
        proposals=service.proposal_stats(),
    )


# --- Events ---
@app.get("/events", response_model=EventsListResponse)
def events_list(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: OracleService = Depends(get_service),
) -> EventsListResponse:
    events = service.list_events(limit=limit, offset=offset)
    return EventsListResponse(events=events, total=len(events))


@app.post("/events", response_model=Event, status_code=201)
def events_create(body: CreateEventRequest, service: OracleService = Depends(get_service)) -> Event:
    return service.create_event(body.description, body.creator, resolution=body.resolution, market_ref=body.market_ref)


@app.get("/events/{event_id}", response_model=Event)
def events_get(event_id: int, service: OracleService = Depends(get_service)) -> Event:
    return service.get_event(event_id)


# --- Proposals ---
@app.get("/proposals", response_model=ProposalsListResponse)
def proposals_list(
    state: ProposalState | None = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: OracleService = Depends(get_service),
) -> ProposalsListResponse:
    proposals = service.list_proposals(state=state, limit=limit, offset=offset)
    return ProposalsListResponse(
        proposals=[ProposalResponse.from_proposal(p) for p in proposals],
        total=len(proposals),
    )


@app.get("/proposals/due", response_model=DueProposalsResponse)
def proposals_due(service: OracleService = Depends(get_service)) -> DueProposalsResponse:
    """Proposals still disputable and proposals ready to resolve, at one `now` snapshot."""
    now = service.clock()
    return DueProposalsResponse(
        now=now,
        disputable=[ProposalResponse.from_proposal(p) for p in service.disputable_proposals(now)],
        resolvable=[ProposalResponse.from_proposal(p) for p in service.resolvable_proposals(now)],
    )


@app.post("/proposals", response_model=ProposalResponse, status_code=201)
def proposals_create(body: ProposeRequest, service: OracleService = Depends(get_service)) -> ProposalResponse:
    p = service.propose(body.event_id, body.proposer, body.outcome, body.evidence_hash)
    return ProposalResponse.from_proposal(p)


@app.get("/proposals/{proposal_id}", response_model=ProposalResponse)
def proposals_get(proposal_id: int, service: OracleService = Depends(get_service)) -> ProposalResponse:
    return ProposalResponse.from_proposal(service.get_proposal(proposal_id))


@app.post("/proposals/{proposal_id}/dispute", response_model=ProposalResponse)
def proposals_dispute(
    proposal_id: int, body: DisputeRequest, service: OracleService = Depends(get_service)
) -> ProposalResponse:
    p = service.dispute(proposal_id, body.disputer, body.counter_evidence_hash)
    return ProposalResponse.from_proposal(p)


@app.post("/proposals/{proposal_id}/resolve", response_model=ProposalResponse)
def proposals_resolve(
    proposal_id: int, body: ResolveRequest, service: OracleService = Depends(get_service)
) -> ProposalResponse:
    p = service.resolve(proposal_id, body.caller, body.final_outcome)
    return ProposalResponse.from_proposal(p)


@app.post("/proposals/{proposal_id}/withdraw", response_model=BondReleaseResponse)
def proposals_withdraw(
    proposal_id: int, body: WithdrawRequest, service: OracleService = Depends(get_service)
) -> BondReleaseResponse:
    release = service.withdraw_bond(proposal_id, body.withdrawer)
    return BondReleaseResponse(
        proposal_id=release.proposal_id,
        principal=release.principal,
        role=release.role,
        amount=release.amount,
    )


# --- Notifications ---
@app.get("/notifications", response_model=NotificationsResponse)
def notifications_list(
    kind: str | None = None,
    proposal_id: int | None = None,
    after_seq: int = Query(0, ge=0, description="Return notifications with seq greater than this"),
    limit: int = Query(100, ge=1, le=1000),
    service: OracleService = Depends(get_service),
) -> NotificationsResponse:
    items = service.notifications(kind=kind, proposal_id=proposal_id, after_seq=after_seq, limit=limit)
    return NotificationsResponse(notifications=items, total=len(items))


# --- Ledger ---
@app.get("/ledger/{principal}", response_model=BalanceResponse)
def ledger_balance(principal: str, service: OracleService = Depends(get_service)) -> BalanceResponse:
    return BalanceResponse(principal=principal, **service.balances(principal))


@app.post("/ledger/{principal}/deposit", response_model=BalanceResponse)
def ledger_deposit(
    principal: str, body: DepositRequest, service: OracleService = Depends(get_service)
) -> BalanceResponse:
    service.deposit(principal, body.amount)
    return BalanceResponse(principal=principal, **service.balances(principal))


def run_api(host: str = "127.0.0.1", port: int = 8000, profile: str | None = None) -> None:
    """Run the API with uvicorn."""
    import uvicorn

    from predoracle.config.settings import configure_logging

    global _config_profile
    _config_profile = profile
    configure_logging(get_settings(profile))
    uvicorn.run(app, host=host, port=port)
