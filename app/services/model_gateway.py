"""
Model gateway for LLM inference.
The handlers only depend on ModelGateway.run; WorkersAIGateway talks to the
Cloudflare Workers AI REST API.
See: https://developers.cloudflare.com/workers-ai/
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from app.core.config import settings
from app.core.errors import ModelGatewayError

logger = logging.getLogger(__name__)

Message = Dict[str, str]


class ModelGateway(ABC):
    """Abstract base class for model inference backends."""

    @abstractmethod
    def run(
        self,
        model: str,
        messages: List[Message],
        *,
        temperature: float,
        max_tokens: int,
        response_format: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Run one chat completion and return the model's response value.
        Structured calls return an object, free-text calls a string.
        Raises ModelGatewayError on any failure.
        """
        pass

    def close(self) -> None:
        pass


class WorkersAIGateway(ModelGateway):
    """
    Cloudflare Workers AI REST client.
    Requires an account id and an API token with Workers AI permissions.
    """

    def __init__(
        self,
        account_id: Optional[str] = None,
        api_token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.account_id = account_id or settings.cloudflare_account_id
        self.api_token = api_token or settings.cloudflare_api_token
        self.base_url = (base_url or settings.ai_base_url).rstrip("/")
        self.timeout = timeout or settings.ai_timeout

        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": "TweetSentimentAPI/1.0"
        })
        if self.api_token:
            self.session.headers.update({
                "Authorization": f"Bearer {self.api_token}"
            })

    def run(
        self,
        model: str,
        messages: List[Message],
        *,
        temperature: float,
        max_tokens: int,
        response_format: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if not self.account_id or not self.api_token:
            raise ModelGatewayError("Workers AI credentials are not configured")

        url = f"{self.base_url}/accounts/{self.account_id}/ai/run/{model}"
        payload: Dict[str, Any] = {
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if response_format is not None:
            payload["response_format"] = response_format

        try:
            resp = self.session.post(url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            raise ModelGatewayError(f"Workers AI request failed: {e}") from e
        except ValueError as e:
            raise ModelGatewayError("Workers AI returned a non-JSON body") from e

        if not isinstance(data, dict) or not data.get("success", False):
            errors = data.get("errors") if isinstance(data, dict) else None
            raise ModelGatewayError(f"Workers AI reported failure: {errors}")

        result = data.get("result")
        if not isinstance(result, dict):
            raise ModelGatewayError("Workers AI response has no result")

        logger.debug(f"Workers AI call to {model} succeeded")
        return result.get("response")

    def close(self) -> None:
        self.session.close()


_gateway: Optional[ModelGateway] = None


def get_model_gateway() -> ModelGateway:
    """FastAPI dependency returning the process-wide gateway."""
    global _gateway
    if _gateway is None:
        _gateway = WorkersAIGateway()
    return _gateway


def close_model_gateway() -> None:
    global _gateway
    if _gateway is not None:
        _gateway.close()
        _gateway = None
