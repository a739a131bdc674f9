"""Pydantic models for the mock API's request and response bodies.

Request models carry the parameter contract of each endpoint: ranges are
declared with ``Field`` constraints and cross-field rules live in
``model_validator`` hooks. Fields are declared in the order they are checked.
Unknown fields are ignored.

Inputs that the real API accepts in several shapes (a string or a list, token
ids or text) are parsed into explicit variant models that all expose the same
normalized tuple of strings.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer, model_validator
from pydantic_core import PydanticCustomError

MAX_STOP_SEQUENCES = 4


def _violation(message: str, param: Optional[str] = None) -> PydanticCustomError:
    # ``param`` names the offending field relative to the model raising it.
    context = {"param": param} if param else None
    return PydanticCustomError("invalid_value", message, context)


def _require_model_name(value: str) -> str:
    if not value.strip():
        raise _violation("Model cannot be empty")
    return value


# --- tagged inputs ---------------------------------------------------------


class PromptInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text", "text_list"]
    items: Tuple[str, ...]

    @classmethod
    def parse(cls, value: Any) -> "PromptInput":
        if isinstance(value, PromptInput):
            return value
        if isinstance(value, str):
            return cls(kind="text", items=(value,))
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return cls(kind="text_list", items=tuple(value))
        raise _violation("Prompt must be a string or an array of strings")


class StopSequences(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text", "text_list"]
    items: Tuple[str, ...]

    @classmethod
    def parse(cls, value: Any) -> Optional["StopSequences"]:
        if value is None or isinstance(value, StopSequences):
            return value
        if isinstance(value, str):
            return cls(kind="text", items=(value,))
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return cls(kind="text_list", items=tuple(value))
        raise _violation("stop must be a string or an array of strings")


def _is_token(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class EmbeddingInput(BaseModel):
    """Embedding input normalized to ordered text units.

    Token-id arrays are opaque units: they are never decoded, their canonical
    list text stands in for them and their length is their token count.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["text", "text_list", "tokens", "token_list"]
    units: Tuple[str, ...]
    token_counts: Optional[Tuple[int, ...]] = None

    @classmethod
    def parse(cls, value: Any) -> "EmbeddingInput":
        if isinstance(value, EmbeddingInput):
            return value
        if isinstance(value, str):
            return cls(kind="text", units=(value,))
        if isinstance(value, list):
            if all(isinstance(item, str) for item in value):
                return cls(kind="text_list", units=tuple(value))
            if all(_is_token(item) for item in value):
                return cls(kind="tokens", units=(str(value),), token_counts=(len(value),))
            if all(isinstance(item, list) and all(_is_token(t) for t in item) for item in value):
                return cls(
                    kind="token_list",
                    units=tuple(str(item) for item in value),
                    token_counts=tuple(len(item) for item in value),
                )
        raise _violation(
            "Input must be a string, an array of strings, an array of integers "
            "or an array of integer arrays"
        )

    @property
    def unit_kind(self) -> str:
        return "tokens" if self.token_counts is not None else "text"


# --- shared message pieces -------------------------------------------------


class FunctionCall(BaseModel):
    name: str
    arguments: str


class ToolCall(BaseModel):
    id: str
    type: Literal["function"] = "function"
    function: FunctionCall


class FunctionDefinition(BaseModel):
    name: str
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise _violation("Function name cannot be empty")
        return value


class Tool(BaseModel):
    type: Literal["function"] = "function"
    function: FunctionDefinition


class ToolChoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["none", "auto", "required", "function"]
    function_name: Optional[str] = None

    @classmethod
    def parse(cls, value: Any) -> Optional["ToolChoice"]:
        if value is None or isinstance(value, ToolChoice):
            return value
        if value in ("none", "auto", "required"):
            return cls(mode=value)
        if isinstance(value, dict) and value.get("type") == "function":
            function = value.get("function")
            name = function.get("name") if isinstance(function, dict) else None
            if isinstance(name, str) and name:
                return cls(mode="function", function_name=name)
        raise _violation(
            "tool_choice must be 'none', 'auto', 'required' or a named function object"
        )


class ContentPart(BaseModel):
    type: str
    text: Optional[str] = None


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant", "tool"]
    content: Optional[Union[str, List[ContentPart]]] = None
    name: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None

    @property
    def text(self) -> str:
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "".join(part.text or "" for part in self.content if part.type == "text")

    @model_validator(mode="after")
    def check_role_requirements(self) -> "ChatMessage":
        has_text = bool(self.text.strip())
        if self.role in ("system", "user") and not has_text:
            raise _violation("Content cannot be empty for system and user messages", "content")
        if self.role == "assistant" and self.content is None and not self.tool_calls:
            raise _violation("Assistant messages must have either content or tool_calls", "content")
        if self.role == "tool":
            if not has_text:
                raise _violation("Tool messages must have content", "content")
            if not self.tool_call_id:
                raise _violation("Tool messages must have tool_call_id", "tool_call_id")
        return self


# --- requests --------------------------------------------------------------


class CompletionRequest(BaseModel):
    model: str
    prompt: PromptInput
    max_tokens: int = Field(default=16, ge=1, le=4096)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    n: int = Field(default=1, ge=1, le=20)
    logprobs: Optional[int] = Field(default=None, ge=0, le=5)
    echo: bool = False
    stop: Optional[StopSequences] = None
    presence_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    frequency_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    best_of: Optional[int] = Field(default=None, ge=1, le=20)
    logit_bias: Optional[Dict[str, float]] = None
    user: Optional[str] = None
    suffix: Optional[str] = None
    stream: Optional[bool] = None

    check_model = field_validator("model")(_require_model_name)

    @field_validator("prompt", mode="before")
    @classmethod
    def parse_prompt(cls, value: Any) -> PromptInput:
        return PromptInput.parse(value)

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, value: PromptInput) -> PromptInput:
        if value.kind == "text" and not value.items[0].strip():
            raise _violation("Prompt cannot be empty")
        if not value.items:
            raise _violation("Prompt array cannot be empty")
        if any(not item.strip() for item in value.items):
            raise _violation("Prompt array cannot contain empty strings")
        return value

    @field_validator("stop", mode="before")
    @classmethod
    def parse_stop(cls, value: Any) -> Optional[StopSequences]:
        return StopSequences.parse(value)

    @field_validator("stop")
    @classmethod
    def validate_stop(cls, value: Optional[StopSequences]) -> Optional[StopSequences]:
        return _check_stop_count(value)

    @model_validator(mode="after")
    def check_best_of(self) -> "CompletionRequest":
        if self.best_of is not None and self.best_of < self.n:
            raise _violation("best_of must be greater than or equal to n", "best_of")
        return self


class ChatCompletionRequest(BaseModel):
    model: str
    messages: List[ChatMessage]
    tools: Optional[List[Tool]] = None
    tool_choice: Optional[ToolChoice] = None
    max_tokens: Optional[int] = Field(default=None, ge=1, le=4096)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    n: int = Field(default=1, ge=1, le=20)
    stop: Optional[StopSequences] = None
    presence_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    frequency_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    logit_bias: Optional[Dict[str, float]] = None
    user: Optional[str] = None
    stream: Optional[bool] = None

    check_model = field_validator("model")(_require_model_name)

    @field_validator("messages")
    @classmethod
    def validate_messages(cls, value: List[ChatMessage]) -> List[ChatMessage]:
        if not value:
            raise _violation("Messages array cannot be empty")
        return value

    @field_validator("tool_choice", mode="before")
    @classmethod
    def parse_tool_choice(cls, value: Any) -> Optional[ToolChoice]:
        return ToolChoice.parse(value)

    @field_validator("stop", mode="before")
    @classmethod
    def parse_stop(cls, value: Any) -> Optional[StopSequences]:
        return StopSequences.parse(value)

    @field_validator("stop")
    @classmethod
    def validate_stop(cls, value: Optional[StopSequences]) -> Optional[StopSequences]:
        return _check_stop_count(value)

    @model_validator(mode="after")
    def check_tool_choice(self) -> "ChatCompletionRequest":
        choice = self.tool_choice
        if choice is None or choice.mode == "none":
            return self
        if not self.tools:
            raise _violation("tool_choice is only allowed when tools are specified", "tool_choice")
        if choice.mode == "function" and choice.function_name not in self.tool_names:
            raise _violation(
                f"Tool choice '{choice.function_name}' does not match any of the specified tools",
                "tool_choice",
            )
        return self

    @property
    def tool_names(self) -> List[str]:
        return [tool.function.name for tool in self.tools or []]

    @property
    def resolved_tool_choice(self) -> str:
        """``tool_choice`` mode with the API default applied (auto when tools exist)."""

        if self.tool_choice is not None:
            return self.tool_choice.mode
        return "auto" if self.tools else "none"


class EmbeddingRequest(BaseModel):
    model: str
    input: EmbeddingInput
    encoding_format: Literal["float", "base64"] = "float"
    dimensions: Optional[int] = Field(default=None, ge=1, le=3072)
    user: Optional[str] = None

    check_model = field_validator("model")(_require_model_name)

    @field_validator("input", mode="before")
    @classmethod
    def parse_input(cls, value: Any) -> EmbeddingInput:
        return EmbeddingInput.parse(value)

    @field_validator("input")
    @classmethod
    def validate_input(cls, value: EmbeddingInput) -> EmbeddingInput:
        if value.kind == "text" and not value.units[0].strip():
            raise _violation("Input cannot be empty")
        if not value.units:
            raise _violation("Input array cannot be empty")
        if value.kind == "text_list" and any(not unit.strip() for unit in value.units):
            raise _violation("Input array cannot contain empty strings")
        if value.token_counts is not None and 0 in value.token_counts:
            if value.kind == "tokens":
                raise _violation("Input array cannot be empty")
            raise _violation("Input array cannot contain empty arrays")
        return value


def _check_stop_count(value: Optional[StopSequences]) -> Optional[StopSequences]:
    if value is not None and len(value.items) > MAX_STOP_SEQUENCES:
        raise _violation(f"stop cannot contain more than {MAX_STOP_SEQUENCES} sequences")
    return value


# --- responses -------------------------------------------------------------


class Usage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class EmbeddingUsage(BaseModel):
    prompt_tokens: int
    total_tokens: int


class CompletionLogprobs(BaseModel):
    tokens: List[str]
    token_logprobs: List[float]
    top_logprobs: List[Dict[str, float]]
    text_offset: List[int]


class CompletionChoice(BaseModel):
    text: str
    index: int
    logprobs: Optional[CompletionLogprobs] = None
    finish_reason: Literal["stop", "length"]


class CompletionResponse(BaseModel):
    id: str
    object: Literal["text_completion"] = "text_completion"
    created: int
    model: str
    choices: List[CompletionChoice]
    usage: Usage


class ChatCompletionMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None

    @model_serializer(mode="wrap")
    def omit_missing_tool_calls(self, handler: Any) -> Dict[str, Any]:
        data = handler(self)
        if data.get("tool_calls") is None:
            data.pop("tool_calls", None)
        return data


class ChatCompletionChoice(BaseModel):
    index: int
    message: ChatCompletionMessage
    logprobs: None = None
    finish_reason: Literal["stop", "length", "tool_calls"]


class ChatCompletionResponse(BaseModel):
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    choices: List[ChatCompletionChoice]
    usage: Usage


class EmbeddingData(BaseModel):
    object: Literal["embedding"] = "embedding"
    index: int
    embedding: Union[List[float], str]


class EmbeddingResponse(BaseModel):
    id: str
    object: Literal["list"] = "list"
    created: int
    data: List[EmbeddingData]
    model: str
    usage: EmbeddingUsage


class ModelCard(BaseModel):
    id: str
    object: Literal["model"] = "model"
    created: int
    owned_by: str = "openai"


class ModelList(BaseModel):
    object: Literal["list"] = "list"
    data: List[ModelCard]
