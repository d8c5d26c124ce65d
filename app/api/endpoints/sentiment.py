import json

from fastapi import APIRouter, Depends, Request, Response
from starlette.concurrency import run_in_threadpool

from app.core.errors import InvalidInputError
from app.schemas.sentiment import SentimentRequest, SentimentResponse
from app.services.model_gateway import ModelGateway, get_model_gateway
from app.services.sentiment_service import analyze_tweets

router = APIRouter(tags=["sentiment"])


@router.options("/sentiment", status_code=204)
def sentiment_preflight() -> Response:
    return Response(status_code=204)


@router.post("/sentiment", response_model=SentimentResponse)
async def sentiment(
    request: Request, gateway: ModelGateway = Depends(get_model_gateway)
) -> SentimentResponse:
    """
    Score one or more tweets across the requested sentiment categories.
    """
    try:
        body = json.loads(await request.body())
    except ValueError:
        raise InvalidInputError("Invalid JSON") from None

    payload = SentimentRequest.model_validate(body) if isinstance(body, dict) else SentimentRequest()
    return await run_in_threadpool(analyze_tweets, payload, gateway)
