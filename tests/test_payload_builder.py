"""
Tests for the upstream payload builder.
Run with: pytest tests/test_payload_builder.py
"""

from chat_relay.openai_models import ChatCompletionsRequest
from chat_relay.payload_builder import (
    build_upstream_request,
    PERSONA,
    STOP_SEQUENCES,
    WORKFLOW_GUIDELINES,
)


def test_defaults_for_empty_request(settings):
    payload = build_upstream_request(ChatCompletionsRequest(), settings)
    assert payload.model == "gpt-5"
    assert payload.parameters.temperature == 0
    assert payload.parameters.max_tokens == 8192
    assert payload.parameters.stream is False
    assert payload.messages == []


def test_caller_values_are_used(settings):
    body = ChatCompletionsRequest(
        model="custom-model",
        temperature=0.7,
        max_tokens=256,
        messages=[
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "hi"},
        ],
    )
    payload = build_upstream_request(body, settings)
    assert payload.model == "custom-model"
    assert payload.parameters.temperature == 0.7
    assert payload.parameters.max_tokens == 256
    assert payload.messages == [
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": "hi"},
    ]


def test_stream_never_requested_upstream(settings):
    body = ChatCompletionsRequest(stream=True, messages=[{"role": "user", "content": "hi"}])
    payload = build_upstream_request(body, settings)
    assert payload.parameters.stream is False
    assert payload.model_dump()["parameters"]["stream_options"] == {"include_usage": True}


def test_fixed_sections(settings):
    payload = build_upstream_request(ChatCompletionsRequest(), settings).model_dump()
    assert payload["persona"] == PERSONA
    assert payload["workflow_guidelines"] == WORKFLOW_GUIDELINES
    assert payload["parameters"]["stop_sequences"] == STOP_SEQUENCES
    assert payload["user_task"] == {"objective": "Respond to the user query based on the conversation."}
    assert payload["environment"] == {
        "working_directory": settings.WORKING_DIRECTORY,
        "open_tabs": [],
        "visible_files": [],
    }


def test_builder_is_deterministic(settings):
    body = ChatCompletionsRequest(messages=[{"role": "user", "content": "same"}])
    assert build_upstream_request(body, settings) == build_upstream_request(body, settings)


def test_default_model_follows_settings(settings):
    custom = settings.model_copy(update={"DEFAULT_MODEL": "house-model"})
    payload = build_upstream_request(ChatCompletionsRequest(), custom)
    assert payload.model == "house-model"


def test_content_parts_forwarded_untouched(settings):
    parts = [
        {"type": "text", "text": "what is this?"},
        {"type": "image_url", "image_url": {"url": "https://example.test/cat.png", "detail": "low"}},
    ]
    body = ChatCompletionsRequest(messages=[{"role": "user", "content": parts}])
    payload = build_upstream_request(body, settings)
    assert payload.messages == [{"role": "user", "content": parts}]


def test_null_content_and_extra_fields_forwarded(settings):
    tool_calls = [{"id": "call_1", "type": "function", "function": {"name": "f", "arguments": "{}"}}]
    body = ChatCompletionsRequest(
        messages=[{"role": "assistant", "content": None, "tool_calls": tool_calls}]
    )
    payload = build_upstream_request(body, settings)
    assert payload.messages == [{"role": "assistant", "content": None, "tool_calls": tool_calls}]


def test_null_messages_default_to_empty(settings):
    payload = build_upstream_request(ChatCompletionsRequest(messages=None), settings)
    assert payload.messages == []
