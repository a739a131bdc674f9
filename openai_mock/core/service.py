"""Routing table and request pipeline of the mock API.

The HTTP layer hands over the method, path, ``Authorization`` header and raw
body; the service runs auth, validation and synthesis and returns a status
code with a JSON-ready body.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel

from .auth import AuthGate
from .config import MockConfig
from .errors import MethodNotAllowedError, MockAPIError, NotFoundError
from .identifiers import IdentifierGenerator
from .synthesis import ResponseSynthesizer
from .validation import (
    parse_json_body,
    validate_chat_completion_request,
    validate_completion_request,
    validate_embedding_request,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Endpoint:
    """A validator/synthesizer pair bound to one route."""

    name: str
    validate: Callable[[Any], BaseModel]
    synthesize: Callable[[Any], BaseModel]


class MockService:
    def __init__(
        self,
        config: MockConfig,
        *,
        identifiers: Optional[IdentifierGenerator] = None,
    ) -> None:
        self.config = config
        self.auth_gate = AuthGate(config.api_key)
        self.synthesizer = ResponseSynthesizer(config, identifiers=identifiers)
        self.routes: Mapping[Tuple[str, str], Endpoint] = MappingProxyType(
            {
                ("POST", "/v1/completions"): Endpoint(
                    "completions", validate_completion_request, self.synthesizer.completion
                ),
                ("POST", "/v1/chat/completions"): Endpoint(
                    "chat.completions", validate_chat_completion_request, self.synthesizer.chat_completion
                ),
                ("POST", "/v1/embeddings"): Endpoint(
                    "embeddings", validate_embedding_request, self.synthesizer.embedding
                ),
            }
        )

    def handle(
        self,
        method: str,
        path: str,
        authorization: Optional[str],
        body: bytes,
    ) -> Tuple[int, Dict[str, Any]]:
        try:
            endpoint = self.resolve(method, path)
            self.auth_gate.require(authorization)
            request = endpoint.validate(parse_json_body(body))
            response = endpoint.synthesize(request)
        except MockAPIError as exc:
            logger.debug("%s %s -> %s %s", method, path, exc.status_code, exc.message)
            return exc.status_code, exc.to_dict()
        return 200, response.model_dump(mode="json")

    def resolve(self, method: str, path: str) -> Endpoint:
        endpoint = self.routes.get((method.upper(), path))
        if endpoint is not None:
            return endpoint
        if any(route_path == path for _, route_path in self.routes):
            raise MethodNotAllowedError(f"Method {method.upper()} is not allowed for {path}.")
        raise NotFoundError(f"Invalid URL ({method.upper()} {path})")
