import json
import logging
import random

from fastapi import APIRouter, Depends, Request, Response
from starlette.concurrency import run_in_threadpool

from app.api.responses import json_response
from app.core.errors import ModelGatewayError
from app.schemas.lucky import LuckyRequest, LuckyResponse
from app.services.lucky_service import generate_lucky_tweet, get_rng
from app.services.model_gateway import ModelGateway, get_model_gateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["lucky"])


@router.options("/lucky", status_code=204)
def lucky_preflight() -> Response:
    return Response(status_code=204)


@router.post(
    "/lucky",
    response_model=LuckyResponse,
    responses={500: {"description": "Model call failed"}},
)
async def lucky(
    request: Request,
    gateway: ModelGateway = Depends(get_model_gateway),
    rng: random.Random = Depends(get_rng),
):
    """
    Generate a fictional tweet from an optional seed and a random flavor profile.
    A missing or malformed body falls back to a random topic.
    """
    try:
        body = json.loads(await request.body())
    except ValueError:
        body = None

    payload = LuckyRequest.model_validate(body) if isinstance(body, dict) else LuckyRequest()
    try:
        return await run_in_threadpool(generate_lucky_tweet, payload, gateway, rng)
    except ModelGatewayError as e:
        logger.error(f"AI call failed in /lucky: {e}")
        return json_response({"error": "AI call failed generating tweet"}, 500)
