"""
Rules Gateway - API Routes

Stream and rule management endpoints forwarded to Kuiper.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .errors import (
    KuiperServerError,
    MalformedEntityError,
    NotFoundError,
    RulesEngineError,
    UnauthorizedAccessError,
)
from .models import (
    Info,
    ResultResponse,
    RuleRequest,
    Stream,
    StreamListResponse,
    StreamRequest,
    StreamUpdateRequest,
)
from .service import RulesEngineService


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(tags=["Rules Engine"])

security = HTTPBearer(auto_error=False)


# =============================================================================
# Dependencies
# =============================================================================

def get_service(request: Request) -> RulesEngineService:
    """Service instance built by the application factory."""
    return request.app.state.service


def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


# =============================================================================
# Error mapping
# =============================================================================

_ERROR_STATUS = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (MalformedEntityError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedAccessError, status.HTTP_401_UNAUTHORIZED),
    (KuiperServerError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: RulesEngineError) -> int:
    for error_class, status_code in _ERROR_STATUS:
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def rules_engine_error_handler(request: Request, exc: RulesEngineError) -> JSONResponse:
    status_code = status_for(exc)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content={"detail": str(exc)}, headers=headers)


# =============================================================================
# Routes
# =============================================================================

@router.get("/info", response_model=Info)
def info(service: RulesEngineService = Depends(get_service)):
    """Kuiper version, OS and uptime."""
    return service.info()


@router.post("/streams", response_model=ResultResponse, status_code=status.HTTP_201_CREATED)
def create_stream(
    data: StreamRequest,
    token: str = Depends(get_token),
    service: RulesEngineService = Depends(get_service),
):
    """
    Create a stream reading from a channel.

    The outcome reported by Kuiper is returned in ``result``.
    """
    return ResultResponse(result=service.create_stream(token, data.name, data.topic, data.row))


@router.put("/streams/{name}", response_model=ResultResponse)
def update_stream(
    name: str,
    data: StreamUpdateRequest,
    token: str = Depends(get_token),
    service: RulesEngineService = Depends(get_service),
):
    return ResultResponse(result=service.update_stream(token, name, data.topic, data.row))


@router.get("/streams", response_model=StreamListResponse)
def list_streams(
    token: str = Depends(get_token),
    service: RulesEngineService = Depends(get_service),
):
    return StreamListResponse(streams=service.list_streams(token))


@router.get("/streams/{name}", response_model=Stream, response_model_by_alias=True)
def view_stream(
    name: str,
    token: str = Depends(get_token),
    service: RulesEngineService = Depends(get_service),
):
    return service.view_stream(token, name)


@router.delete("/streams/{name}", response_model=ResultResponse)
def delete_stream(
    name: str,
    token: str = Depends(get_token),
    service: RulesEngineService = Depends(get_service),
):
    return ResultResponse(result=service.delete_stream(token, name))


@router.post("/rules", response_model=ResultResponse, status_code=status.HTTP_201_CREATED)
def create_rule(
    rule: RuleRequest,
    token: str = Depends(get_token),
    service: RulesEngineService = Depends(get_service),
):
    """
    Create a rule.

    The rule id and the stream in the ``from`` clause are namespaced for
    the caller; only the first action's channel is checked.
    """
    return ResultResponse(result=service.create_rule(token, rule))
