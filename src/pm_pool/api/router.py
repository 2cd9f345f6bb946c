"""pm_pool REST endpoints.

POST /pools                           create a pool
GET  /pools/{pool_id}                 totals, fees, category breakdown, levels
GET  /pools/{pool_id}/positions       ledger snapshot, ascending id
POST /pools/{pool_id}/stakes          stake an amount on an event
POST /pools/{pool_id}/settle          settle at a resolved outcome (read-only)
POST /pools/{pool_id}/pro-forma       hypothetical return of a stake
POST /pools/{pool_id}/payoff-curve    pro-forma payoff at every outcome level
"""

from fastapi import APIRouter, Request

from src.pm_common.response import ApiResponse, success_response
from src.pm_pool.application.schemas import (
    CreatePoolRequest,
    PayoffCurveRequest,
    ProFormaRequest,
    SettleRequest,
    StakeRequest,
)
from src.pm_pool.application.service import PoolApplicationService

router = APIRouter(prefix="/pools", tags=["pools"])

_service = PoolApplicationService()


def _respond(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=201)
async def create_pool(body: CreatePoolRequest, request: Request) -> ApiResponse:
    result = _service.create_pool(body)
    return _respond(request, result.model_dump())


@router.get("/{pool_id}")
async def get_pool(pool_id: str, request: Request) -> ApiResponse:
    result = _service.get_summary(pool_id)
    return _respond(request, result.model_dump())


@router.get("/{pool_id}/positions")
async def list_positions(pool_id: str, request: Request) -> ApiResponse:
    result = _service.list_positions(pool_id)
    return _respond(request, [p.model_dump() for p in result])


@router.post("/{pool_id}/stakes", status_code=201)
async def stake(pool_id: str, body: StakeRequest, request: Request) -> ApiResponse:
    result = _service.stake(pool_id, body)
    return _respond(request, result.model_dump())


@router.post("/{pool_id}/settle")
async def settle(pool_id: str, body: SettleRequest, request: Request) -> ApiResponse:
    result = _service.settle(pool_id, body)
    return _respond(request, result.model_dump())


@router.post("/{pool_id}/pro-forma")
async def pro_forma(pool_id: str, body: ProFormaRequest, request: Request) -> ApiResponse:
    result = _service.pro_forma(pool_id, body)
    return _respond(request, result.model_dump())


@router.post("/{pool_id}/payoff-curve")
async def payoff_curve(pool_id: str, body: PayoffCurveRequest, request: Request) -> ApiResponse:
    result = _service.payoff_curve(pool_id, body)
    return _respond(request, result.model_dump())
