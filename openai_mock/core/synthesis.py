"""Deterministic response synthesis for completions, chat completions and embeddings.

Text is picked from the configured template pools by a SHA-256 digest of the
request content, so identical requests always produce identical choices. Only
``id`` and ``created`` vary between calls.
"""

from __future__ import annotations

import functools
import hashlib
import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar

from .config import MockConfig
from .errors import InternalServerError, MockAPIError
from .identifiers import IdentifierGenerator
from .models import (
    ChatCompletionChoice,
    ChatCompletionMessage,
    ChatCompletionRequest,
    ChatCompletionResponse,
    CompletionChoice,
    CompletionLogprobs,
    CompletionRequest,
    CompletionResponse,
    EmbeddingData,
    EmbeddingRequest,
    EmbeddingResponse,
    FunctionCall,
    StopSequences,
    Tool,
    ToolCall,
)
from .usage import UsageCalculator
from .vectors import DeterministicVectorGenerator, encode_base64

logger = logging.getLogger(__name__)

# Chat accounting overheads, in tokens
MESSAGE_OVERHEAD_TOKENS = 3
REPLY_PRIMING_TOKENS = 3

F = TypeVar("F", bound=Callable[..., Any])


def stable_hash(*parts: Any) -> int:
    """Process-independent hash of JSON-serializable parts."""

    encoded = json.dumps(parts, sort_keys=True, ensure_ascii=False, default=str)
    return int.from_bytes(hashlib.sha256(encoded.encode("utf-8")).digest()[:8], "big")


def _synthesis_boundary(method: F) -> F:
    """Downgrade unexpected faults to a generic :class:`InternalServerError`."""

    @functools.wraps(method)
    def wrapper(self: "ResponseSynthesizer", request: Any) -> Any:
        try:
            return method(self, request)
        except MockAPIError:
            raise
        except Exception:
            logger.exception("Failed to synthesize %s response", method.__name__)
            raise InternalServerError() from None

    return wrapper  # type: ignore[return-value]


class ResponseSynthesizer:
    def __init__(
        self,
        config: MockConfig,
        identifiers: Optional[IdentifierGenerator] = None,
        usage: Optional[UsageCalculator] = None,
        vectors: Optional[DeterministicVectorGenerator] = None,
    ) -> None:
        self._config = config
        self._ids = identifiers or IdentifierGenerator()
        self._usage = usage or UsageCalculator()
        self._vectors = vectors or DeterministicVectorGenerator(config)

    # -- legacy completions -------------------------------------------------

    @_synthesis_boundary
    def completion(self, request: CompletionRequest) -> CompletionResponse:
        prompt_items = list(request.prompt.items)
        choices: List[CompletionChoice] = []
        completion_tokens = 0

        for index in range(request.n):
            template = _pick(self._config.completion_text_pool, "completion", prompt_items, index)
            generated, finish_reason = self._shape(template, request.max_tokens, request.stop)
            completion_tokens += self._usage.estimate(generated)

            text = prompt_items[0] + generated if request.echo else generated
            logprobs = fake_logprobs(text, request.logprobs) if request.logprobs else None
            choices.append(
                CompletionChoice(text=text, index=index, logprobs=logprobs, finish_reason=finish_reason)
            )

        return CompletionResponse(
            id=self._ids.next("completion"),
            created=self._ids.timestamp(),
            model=request.model,
            choices=choices,
            usage=self._usage.usage(self._usage.estimate_many(prompt_items), completion_tokens),
        )

    # -- chat completions ---------------------------------------------------

    @_synthesis_boundary
    def chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        conversation = [message.model_dump(mode="json", exclude_none=True) for message in request.messages]
        tool = self.select_tool(request)
        choices: List[ChatCompletionChoice] = []
        completion_tokens = 0

        for index in range(request.n):
            if tool is not None:
                arguments = json.dumps(placeholder_arguments(tool.function.parameters))
                call = ToolCall(
                    id=self._ids.next("tool_call"),
                    function=FunctionCall(name=tool.function.name, arguments=arguments),
                )
                message = ChatCompletionMessage(content=None, tool_calls=[call])
                finish_reason = "tool_calls"
                completion_tokens += self._usage.estimate_many((tool.function.name, arguments))
            else:
                template = _pick(self._config.chat_text_pool, "chat", conversation, index)
                content, finish_reason = self._shape(template, request.max_tokens, request.stop)
                message = ChatCompletionMessage(content=content)
                completion_tokens += self._usage.estimate(content)
            choices.append(ChatCompletionChoice(index=index, message=message, finish_reason=finish_reason))

        return ChatCompletionResponse(
            id=self._ids.next("chat"),
            created=self._ids.timestamp(),
            model=request.model,
            choices=choices,
            usage=self._usage.usage(self.chat_prompt_tokens(request), completion_tokens),
        )

    def select_tool(self, request: ChatCompletionRequest) -> Optional[Tool]:
        """Return the tool to call, or ``None`` for a plain content reply."""

        mode = request.resolved_tool_choice
        tools = request.tools or []
        if mode == "none" or not tools:
            return None
        if mode == "function":
            wanted = request.tool_choice.function_name
            return next(tool for tool in tools if tool.function.name == wanted)
        if mode == "auto":
            if request.messages[-1].role == "tool":
                return None
            if not self.wants_tool_call(request):
                return None
        return tools[stable_hash("tool", _last_user_text(request), request.tool_names) % len(tools)]

    def wants_tool_call(self, request: ChatCompletionRequest) -> bool:
        """Hash-derived ``auto`` decision over the last user message and tool names."""

        return stable_hash("decision", _last_user_text(request), request.tool_names) % 2 == 0

    def chat_prompt_tokens(self, request: ChatCompletionRequest) -> int:
        total = REPLY_PRIMING_TOKENS
        for message in request.messages:
            total += MESSAGE_OVERHEAD_TOKENS + self._usage.estimate(message.text)
            for call in message.tool_calls or []:
                total += self._usage.estimate_many((call.function.name, call.function.arguments))
        return total

    # -- embeddings ---------------------------------------------------------

    @_synthesis_boundary
    def embedding(self, request: EmbeddingRequest) -> EmbeddingResponse:
        units = request.input.units
        data = []
        for index, unit in enumerate(units):
            vector = self._vectors.vector(
                unit, request.model, request.dimensions, kind=request.input.unit_kind
            )
            embedding = encode_base64(vector) if request.encoding_format == "base64" else vector
            data.append(EmbeddingData(index=index, embedding=embedding))

        if request.input.token_counts is not None:
            prompt_tokens = sum(request.input.token_counts)
        else:
            prompt_tokens = self._usage.estimate_many(units)

        return EmbeddingResponse(
            id=self._ids.next("embedding"),
            created=self._ids.timestamp(),
            data=data,
            model=request.model,
            usage=self._usage.embedding_usage(prompt_tokens),
        )

    # -- helpers ------------------------------------------------------------

    def _shape(
        self, template: str, max_tokens: Optional[int], stop: Optional[StopSequences]
    ) -> Tuple[str, str]:
        """Apply stop sequences and the ``max_tokens`` cap to a template."""

        text = template
        if stop is not None:
            positions = [text.find(sequence) for sequence in stop.items if sequence and sequence in text]
            if positions:
                text = text[: min(positions)]
        if max_tokens is not None and self._usage.estimate(text) > max_tokens:
            return truncate_at_word(text, self._usage.max_chars(max_tokens)), "length"
        return text, "stop"


def _pick(pool: Sequence[str], namespace: str, key: Any, index: int) -> str:
    return pool[stable_hash(namespace, key, index) % len(pool)]


def _last_user_text(request: ChatCompletionRequest) -> str:
    for message in reversed(request.messages):
        if message.role == "user":
            return message.text
    return ""


def truncate_at_word(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    cut = text[:max_chars]
    boundary = cut.rfind(" ")
    if boundary > 0:
        return cut[:boundary]
    return cut


def placeholder_arguments(schema: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Fake arguments covering the ``required`` properties of a JSON schema."""

    if not isinstance(schema, Mapping):
        return {}
    properties = schema.get("properties")
    if not isinstance(properties, Mapping):
        properties = {}
    required = schema.get("required")
    if not isinstance(required, list):
        return {}
    return {
        name: _placeholder(name, properties.get(name))
        for name in required
        if isinstance(name, str)
    }


def _placeholder(name: str, schema: Any) -> Any:
    if not isinstance(schema, Mapping):
        return None
    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        return enum[0]
    kind = schema.get("type")
    if isinstance(kind, list):
        kind = next((candidate for candidate in kind if candidate != "null"), None)
    if kind == "string":
        return f"example_{name}"
    if kind == "integer":
        return 1
    if kind == "number":
        return 1.0
    if kind == "boolean":
        return True
    if kind == "array":
        return []
    if kind == "object":
        return placeholder_arguments(schema)
    return None


def fake_logprobs(text: str, count: int) -> CompletionLogprobs:
    """Structured, deterministic log probabilities for each word of ``text``."""

    tokens: List[str] = []
    token_logprobs: List[float] = []
    top_logprobs: List[Dict[str, float]] = []
    text_offset: List[int] = []

    offset = 0
    for word in text.split():
        offset = text.index(word, offset)
        logprob = round(-0.1 - 0.05 * len(word), 4)
        alternatives = {word: logprob}
        for variant in (f"{word}s", f"un{word}", word.upper(), word.lower()):
            if len(alternatives) >= count:
                break
            if variant not in alternatives:
                alternatives[variant] = round(logprob - 0.5 * len(alternatives), 4)

        tokens.append(word)
        token_logprobs.append(logprob)
        top_logprobs.append(alternatives)
        text_offset.append(offset)
        offset += len(word)

    return CompletionLogprobs(
        tokens=tokens,
        token_logprobs=token_logprobs,
        top_logprobs=top_logprobs,
        text_offset=text_offset,
    )
