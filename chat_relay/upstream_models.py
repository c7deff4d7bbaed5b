"""Pydantic models for the upstream chat service and its failures."""

from typing import Optional, Any, Dict, List
from pydantic import BaseModel, Field


class UpstreamParameters(BaseModel):
    """Sampling parameters; streaming is never requested from upstream."""
    temperature: float = 0
    max_tokens: int = 8192
    stream: bool = False
    stream_options: Dict[str, Any] = Field(default_factory=lambda: {"include_usage": True})
    stop_sequences: List[str] = Field(default_factory=list)


class UserTask(BaseModel):
    objective: str


class Environment(BaseModel):
    """Workspace description the upstream persona expects."""
    working_directory: str
    open_tabs: List[str] = Field(default_factory=list)
    visible_files: List[str] = Field(default_factory=list)


class UpstreamRequest(BaseModel):
    """Request body sent to the upstream service."""
    model: str
    parameters: UpstreamParameters
    persona: str
    user_task: UserTask
    workflow_guidelines: List[str]
    environment: Environment
    messages: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = {"frozen": True}


class UpstreamError(Exception):
    """Upstream call failed: non-2xx status or transport fault (no status)."""
    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(self.message)

    @property
    def error_body(self) -> Optional[Dict[str, Any]]:
        """The structured ``error`` object of an OpenAI-style failure body, if any."""
        if isinstance(self.body, dict) and isinstance(self.body.get("error"), dict):
            return self.body["error"]
        return None
