import json
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import WebSocket

from clinic_agent.config.settings import Settings
from clinic_agent.models.conversation import CallSession


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


class Chunks:
    """Builders for objects shaped like OpenAI ChatCompletionChunk."""

    @staticmethod
    def _chunk(delta):
        return SimpleNamespace(choices=[SimpleNamespace(delta=delta, finish_reason=None)])

    @classmethod
    def text(cls, content):
        return cls._chunk(SimpleNamespace(content=content, tool_calls=None))

    @classmethod
    def tool_start(cls, call_id, name, arguments="", index=0):
        return cls.tool_deltas(cls.tool_call(index, call_id, name, arguments))

    @classmethod
    def tool_args(cls, arguments, index=0):
        return cls.tool_deltas(cls.tool_call(index, None, None, arguments))

    @staticmethod
    def tool_call(index, call_id, name, arguments):
        return SimpleNamespace(
            index=index,
            id=call_id,
            function=SimpleNamespace(name=name, arguments=arguments),
        )

    @classmethod
    def tool_deltas(cls, *tool_calls):
        """One chunk carrying several tool call deltas."""
        return cls._chunk(SimpleNamespace(content=None, tool_calls=list(tool_calls)))

    @staticmethod
    def empty():
        return SimpleNamespace(choices=[])


class FakeStream:
    """Async iterable standing in for an openai AsyncStream."""

    def __init__(self, chunks, error=None):
        self.chunks = list(chunks)
        self.error = error
        self.consumed = 0
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self.chunks:
            self.consumed += 1
            yield chunk
        if self.error is not None:
            raise self.error

    async def close(self):
        self.closed = True


def make_openai_client(*streams, side_effect=None):
    """A fake AsyncOpenAI whose chat.completions.create returns the given streams in order."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        side_effect=side_effect if side_effect is not None else list(streams)
    )
    return client


def sent_messages(websocket):
    """Decode every message written with send_text on a mocked websocket."""
    return [json.loads(c.args[0]) for c in websocket.send_text.call_args_list]


@pytest.fixture
def chunks():
    return Chunks


@pytest.fixture
def settings():
    return Settings(
        retell_api_key="retell-test-key",
        openai_api_key="sk-test",
        scheduling_webhook_url="http://hooks.test/clinic",
    )


@pytest.fixture
def websocket():
    return AsyncMock(spec=WebSocket)


@pytest.fixture
def session(websocket):
    return CallSession("call-123", websocket)


@pytest.fixture
def stream():
    return FakeStream


@pytest.fixture
def openai_client():
    return make_openai_client


@pytest.fixture
def sent():
    return sent_messages
