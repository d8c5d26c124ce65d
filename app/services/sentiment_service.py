import logging
import math
from typing import Any, Dict, List, Optional

from app.core.categories import DEFAULT_CATEGORIES, MAX_CATEGORIES
from app.core.config import settings
from app.core.errors import InvalidInputError, ModelGatewayError
from app.schemas.sentiment import (
    CategoryScore,
    SentimentRequest,
    SentimentResponse,
    SentimentSummary,
    TweetAnalysis,
)
from app.services.model_gateway import Message, ModelGateway

logger = logging.getLogger(__name__)

# JSON schema passed to the model's JSON mode.
SENTIMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "explanation": {
            "type": "string",
            "description": "One-sentence overall explanation of the tweet sentiment across all categories.",
        },
        "categories": {
            "type": "array",
            "description": "Per-category scores for the requested analysis dimensions.",
            "items": {
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Category name exactly as provided in the input.",
                    },
                    "score": {
                        "type": "integer",
                        "description": "Category intensity from 0 (not present) to 10 (extremely strong).",
                        "minimum": 0,
                        "maximum": 10,
                    },
                },
                "required": ["name", "score"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["explanation", "categories"],
    "additionalProperties": False,
}

SYSTEM_PROMPT = " ".join([
    "You are a precise classifier for financial tweets.",
    "You MUST output a JSON object that matches the provided JSON schema.",
    "",
    "Per-category analysis:",
    "- You will be given a list of categories (e.g., Bullishness, Fear, Hype).",
    "- For each category, output exactly one entry in the 'categories' array.",
    "- Each entry must have 'name' equal to the input category name.",
    "- Each entry must have 'score' as an integer from 0 to 10.",
    "",
    "Overall explanation:",
    "- Provide exactly ONE sentence summarizing the tweet's sentiment across all categories.",
    "- It MUST be concise, factual, and directly reference the tweet content.",
    "- It MUST be 10-30 words and contain a summary of your overall analysis.",
    "",
    "IMPORTANT:",
    "- The 'categories' array must contain ALL categories provided in the input, no more and no less.",
    "- Do NOT add categories.",
    "- Do NOT output anything except valid JSON that fits the schema.",
])

TEMPERATURE = 0
MAX_TOKENS = 256


def _clean_strings(values: List[Any]) -> List[str]:
    cleaned = [v.strip() for v in values if isinstance(v, str)]
    return [v for v in cleaned if v]


def resolve_tweets(request: SentimentRequest) -> List[str]:
    """
    Pick posts from the first present shape: tweets[], tweet, text.
    Raises InvalidInputError when nothing usable remains.
    """
    if isinstance(request.tweets, list):
        candidates = request.tweets
    elif isinstance(request.tweet, str):
        candidates = [request.tweet]
    elif isinstance(request.text, str):
        candidates = [request.text]
    else:
        candidates = []

    tweets = _clean_strings(candidates)
    if not tweets:
        raise InvalidInputError("No valid tweets found. Provide 'tweet' or 'tweets'.")
    return tweets


def resolve_categories(raw: Any) -> List[str]:
    """Trim, default, dedupe (first occurrence wins) and cap to MAX_CATEGORIES."""
    categories = _clean_strings(raw) if isinstance(raw, list) else []
    if not categories:
        categories = list(DEFAULT_CATEGORIES)
    return list(dict.fromkeys(categories))[:MAX_CATEGORIES]


def clamp_score(value: Any) -> Optional[int]:
    """Round half up and clamp to [0, 10]. Non-numbers (strings, bools) give None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, int):
        return min(10, max(0, value))
    if not math.isfinite(value):
        return None
    return min(10, max(0, math.floor(value + 0.5)))


def build_messages(text: str, categories: List[str]) -> List[Message]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": (
                f'Tweet: "{text}"\n\n'
                f"Categories: {', '.join(categories)}\n\n"
                "Return ONLY valid JSON according to the schema."
            ),
        },
    ]


def reconcile_categories(payload: Any, categories: List[str]) -> List[CategoryScore]:
    """
    Rebuild the category list from the requested names, in request order.
    The model's own list only supplies scores for exact name matches.
    """
    returned = payload.get("categories") if isinstance(payload, dict) else None
    if not isinstance(returned, list):
        return [CategoryScore(name=name, score=None) for name in categories]

    items: List[CategoryScore] = []
    for name in categories:
        match = next(
            (c for c in returned
             if isinstance(c, dict) and isinstance(c.get("name"), str) and c["name"] == name),
            None,
        )
        score = clamp_score(match.get("score")) if match is not None else None
        items.append(CategoryScore(name=name, score=score))
    return items


def analyze_tweet(
    index: int, text: str, categories: List[str], gateway: ModelGateway
) -> TweetAnalysis:
    try:
        payload = gateway.run(
            settings.ai_model,
            build_messages(text, categories),
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
            response_format={"type": "json_schema", "json_schema": SENTIMENT_SCHEMA},
        )
    except ModelGatewayError as e:
        logger.error(f"AI call failed for tweet {index}: {e}")
        return TweetAnalysis(
            index=index,
            text=text,
            explanation=None,
            categories=[],
            raw=None,
            error="AI call failed",
        )

    explanation = None
    if isinstance(payload, dict) and isinstance(payload.get("explanation"), str):
        explanation = payload["explanation"]

    return TweetAnalysis(
        index=index,
        text=text,
        explanation=explanation,
        categories=reconcile_categories(payload, categories),
        raw=payload,
    )


def build_summary(results: List[TweetAnalysis], categories: List[str]) -> SentimentSummary:
    averages: Dict[str, Optional[float]] = {}
    for name in categories:
        scores = [
            c.score
            for r in results
            for c in r.categories
            if c.name == name and c.score is not None
        ]
        averages[name] = sum(scores) / len(scores) if scores else None
    return SentimentSummary(total=len(results), avg_by_category=averages)


def analyze_tweets(request: SentimentRequest, gateway: ModelGateway) -> SentimentResponse:
    """
    Score every post against the resolved categories, one model call per post.
    A failed call is recorded on its own result and never aborts the batch.
    """
    tweets = resolve_tweets(request)
    categories = resolve_categories(request.categories)
    logger.info(f"Analyzing {len(tweets)} tweet(s) across {len(categories)} categories")

    results = [
        analyze_tweet(i, text, categories, gateway)
        for i, text in enumerate(tweets)
    ]
    return SentimentResponse(
        model=settings.ai_model,
        requested_categories=categories,
        count=len(results),
        results=results,
        summary=build_summary(results, categories),
    )
