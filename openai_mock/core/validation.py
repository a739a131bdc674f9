"""Request validation for the three generation endpoints.

Each validator takes the decoded JSON body and returns the parsed request
model, or raises :class:`InvalidRequestError` for the first violated
constraint. The error envelope has room for a single ``param``, so only the
first violation (in field declaration order) is reported.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .errors import InvalidRequestError
from .models import ChatCompletionRequest, CompletionRequest, EmbeddingRequest

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)

_UNPARSEABLE_BODY = (
    "We could not parse the JSON body of your request. (HINT: This likely means you aren't "
    "using your HTTP library correctly. The OpenAI API expects a JSON payload, but what was "
    "sent was not valid JSON.)"
)


def parse_json_body(body: bytes) -> Any:
    try:
        payload = json.loads(body)
        # escaped lone surrogates decode fine but cannot be re-encoded as UTF-8
        json.dumps(payload, ensure_ascii=False).encode("utf-8")
    except (UnicodeError, json.JSONDecodeError) as exc:
        raise InvalidRequestError(_UNPARSEABLE_BODY) from exc
    return payload


def validate_completion_request(payload: Any) -> CompletionRequest:
    return _validate(CompletionRequest, payload)


def validate_chat_completion_request(payload: Any) -> ChatCompletionRequest:
    return _validate(ChatCompletionRequest, payload)


def validate_embedding_request(payload: Any) -> EmbeddingRequest:
    return _validate(EmbeddingRequest, payload)


def _validate(model_cls: Type[RequestT], payload: Any) -> RequestT:
    if not isinstance(payload, dict):
        raise InvalidRequestError("The request body must be a JSON object.")
    try:
        return model_cls.model_validate(payload)
    except ValidationError as exc:
        error = _first_violation(exc)
        logger.debug("Rejected %s: %s (param=%s)", model_cls.__name__, error.message, error.param)
        raise error from None


def _first_violation(exc: ValidationError) -> InvalidRequestError:
    details: Dict[str, Any] = exc.errors(include_url=False)[0]
    location: List[Union[str, int]] = list(details["loc"])
    context = details.get("ctx") or {}
    if context.get("param"):
        location.append(context["param"])
    param = format_param(location)

    if details["type"] == "missing":
        message = f"you must provide a {param} parameter"
    elif details["type"] == "invalid_value" or param is None:
        message = details["msg"]
    else:
        message = f"Invalid value for '{param}': {details['msg']}."
    return InvalidRequestError(message, param=param)


def format_param(location: List[Union[str, int]]) -> Optional[str]:
    """Render a pydantic error location as ``messages[0].content``."""

    rendered = ""
    for part in location:
        if isinstance(part, int):
            rendered += f"[{part}]"
        elif part == "str" or "[" in part:
            # union branch tag, not a field
            continue
        else:
            rendered += f".{part}" if rendered else part
    return rendered or None
