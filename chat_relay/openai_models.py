# OpenAI-compatible schema models for the chat completions API

from typing import List, Optional, Literal, Dict, Any, Union
from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    # String, array-of-parts (forwarded upstream untouched) or null per OpenAI SDKs
    content: Optional[Union[str, List[Union[str, Dict[str, Any]]]]] = None
    # tool_calls, name, etc. travel upstream as sent
    model_config = {"extra": "allow"}


class ChatCompletionsRequest(BaseModel):
    model: Optional[str] = None
    messages: Optional[List[ChatMessage]] = None
    stream: Optional[bool] = False
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    model_config = {"extra": "allow"}


class ChatMessageResponse(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str


class ChatChoice(BaseModel):
    index: int = 0
    message: ChatMessageResponse
    logprobs: Optional[Any] = None
    finish_reason: Optional[str] = None


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    # Upstream may add details (e.g. prompt_tokens_details); keep them
    model_config = {"extra": "allow"}


class ChatCompletion(BaseModel):
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    choices: List[ChatChoice]
    usage: Usage = Field(default_factory=Usage)


class ModelData(BaseModel):
    id: str
    object: Literal["model"] = "model"
    created: int
    owned_by: str = "custom"
    permission: List[Any] = Field(default_factory=list)
    root: Optional[str] = None
    parent: Optional[str] = None


class ModelList(BaseModel):
    object: Literal["list"] = "list"
    data: List[ModelData]


class ErrorDetail(BaseModel):
    message: str
    type: str
    param: Optional[Any] = None
    code: Optional[Union[str, int]] = None


class ErrorEnvelope(BaseModel):
    error: ErrorDetail
