"""FastAPI routes for the mock OpenAI API."""

from __future__ import annotations

from typing import Annotated, Any, Awaitable, Callable, Dict, Optional

from fastapi import APIRouter, Header, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from openai_mock.core.models import ModelCard, ModelList
from openai_mock.core.service import MockService

MODEL_CREATED_AT = 1677610602
AVAILABLE_MODELS = (
    "text-davinci-003",
    "gpt-3.5-turbo",
    "gpt-4",
    "text-embedding-ada-002",
)

router = APIRouter()


def build_router(service: MockService) -> APIRouter:
    """Expose every entry of the service routing table as an API route."""

    api_router = APIRouter()
    for (method, path), endpoint in service.routes.items():
        api_router.add_api_route(
            path,
            _endpoint_handler(service, method, path),
            methods=[method],
            name=endpoint.name,
        )
    return api_router


def _endpoint_handler(
    service: MockService, method: str, path: str
) -> Callable[..., Awaitable[JSONResponse]]:
    async def handle(
        request: Request,
        authorization: Annotated[Optional[str], Header(alias="Authorization")] = None,
    ) -> JSONResponse:
        body = await request.body()
        status_code, payload = await run_in_threadpool(service.handle, method, path, authorization, body)
        return JSONResponse(payload, status_code=status_code)

    return handle


@router.get("/health")
def health_check(request: Request) -> Dict[str, Any]:
    """Liveness probe; never requires authentication."""

    service: MockService = request.app.state.service
    return {
        "status": "healthy",
        "service": "openai-mock",
        "version": request.app.version,
        "endpoints": sorted(path for _, path in service.routes),
    }


@router.get("/")
def server_info(request: Request) -> Dict[str, Any]:
    return {
        "message": "OpenAI Mock API Server",
        "version": request.app.version,
        "endpoints": {
            "completions": "/v1/completions",
            "chat_completions": "/v1/chat/completions",
            "embeddings": "/v1/embeddings",
            "models": "/v1/models",
            "health": "/health",
        },
        "authentication": {
            "type": "Bearer",
            "header": "Authorization",
            "api_key": request.app.state.settings.masked_api_key,
        },
        "documentation": "https://platform.openai.com/docs/api-reference",
    }


@router.get("/v1/models", response_model=ModelList)
def list_models() -> ModelList:
    return ModelList(data=[ModelCard(id=model, created=MODEL_CREATED_AT) for model in AVAILABLE_MODELS])
