"""
Tests for the Bedrock tutor client. The boto3 client is mocked.
"""

import io
import json
from unittest.mock import MagicMock

import pytest

from errors import ErrorKind, TutorError
from llm import EMPTY_REPLY, LLM, SYSTEM_INSTRUCTION
from request import build


def bedrock_reply(payload: dict) -> dict:
    return {"body": io.BytesIO(json.dumps(payload).encode())}


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def llm(client):
    return LLM(model="test-model", temperature=0.7, client=client)


def test_complete_posts_request_and_joins_text(llm, client, attachment):
    client.invoke_model.return_value = bedrock_reply({
        "content": [
            {"type": "text", "text": "What is "},
            {"type": "text", "text": "the first step?"},
        ]
    })
    request = build((), "help", attachment)

    assert llm.complete(request) == "What is the first step?"

    kwargs = client.invoke_model.call_args.kwargs
    assert kwargs["modelId"] == "test-model"
    body = json.loads(kwargs["body"])
    assert body["system"] == SYSTEM_INSTRUCTION
    assert body["temperature"] == 0.7
    assert body["messages"] == json.loads(json.dumps(list(request.messages)))


def test_empty_completion_gets_fallback(llm, client):
    client.invoke_model.return_value = bedrock_reply({"content": []})
    assert llm.complete(build((), "hi", None)) == EMPTY_REPLY


def test_failure_raises_remote_call_failure(llm, client):
    client.invoke_model.side_effect = ConnectionError("no route to host")
    with pytest.raises(TutorError) as exc_info:
        llm.complete(build((), "hi", None))
    assert exc_info.value.kind is ErrorKind.REMOTE_CALL_FAILURE
    assert isinstance(exc_info.value.__cause__, ConnectionError)


def test_system_instruction_keeps_tutor_contract():
    assert "NEVER to give the answer" in SYSTEM_INSTRUCTION
    assert "clearer photo" in SYSTEM_INSTRUCTION
    assert "$$" in SYSTEM_INSTRUCTION
