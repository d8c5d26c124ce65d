import random

import pytest
from fastapi.testclient import TestClient

from app.core.errors import ModelGatewayError
from app.main import app
from app.services.lucky_service import get_rng
from app.services.model_gateway import ModelGateway, get_model_gateway


class FakeGateway(ModelGateway):
    """Replays scripted responses; an Exception instance in the script is raised instead."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def run(self, model, messages, *, temperature, max_tokens, response_format=None):
        self.calls.append({
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "response_format": response_format,
        })
        if not self.responses:
            raise ModelGatewayError("no scripted response")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def gateway():
    fake = FakeGateway()
    app.dependency_overrides[get_model_gateway] = lambda: fake
    app.dependency_overrides[get_rng] = lambda: random.Random(1234)
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client(gateway):
    return TestClient(app)
