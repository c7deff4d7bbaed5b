"""Translate an OpenAI chat-completions request into the upstream request schema."""

from typing import List

from .config import Settings
from .openai_models import ChatCompletionsRequest
from .upstream_models import Environment, UpstreamParameters, UpstreamRequest, UserTask

DEFAULT_TEMPERATURE = 0
DEFAULT_MAX_TOKENS = 8192

STOP_SEQUENCES: List[str] = ["<plan_result>", "</plan>"]

PERSONA = "You are a custom model, a highly skilled software engineer."

USER_TASK_OBJECTIVE = "Respond to the user query based on the conversation."

WORKFLOW_GUIDELINES: List[str] = [
    "Understand the user task by analyzing it.",
    "If the environment has many files, search for relevant ones. (Skip if < 10 files).",
    "Read potential files related to the query.",
    "After understanding the files, create a comprehensive plan. This is a mandatory step.",
    "Confirm the plan with the user before executing.",
]


def build_upstream_request(body: ChatCompletionsRequest, settings: Settings) -> UpstreamRequest:
    """
    Build the upstream payload for one inbound request.

    Missing or falsy values fall back to defaults. ``parameters.stream`` is always
    False: streaming toward the caller is synthesized locally from the full reply.
    """
    return UpstreamRequest(
        model=body.model or settings.DEFAULT_MODEL,
        parameters=UpstreamParameters(
            temperature=body.temperature or DEFAULT_TEMPERATURE,
            max_tokens=body.max_tokens or DEFAULT_MAX_TOKENS,
            stream=False,
            stop_sequences=list(STOP_SEQUENCES),
        ),
        persona=PERSONA,
        user_task=UserTask(objective=USER_TASK_OBJECTIVE),
        workflow_guidelines=list(WORKFLOW_GUIDELINES),
        environment=Environment(working_directory=settings.WORKING_DIRECTORY),
        messages=[m.model_dump() for m in (body.messages or [])],
    )
