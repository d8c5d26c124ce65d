import logging
import random
from typing import Any, List

from app.core.categories import LUCKY_FLAVOR_CATEGORIES, LUCKY_TOPICS
from app.core.config import settings
from app.schemas.lucky import FlavorScore, LuckyRequest, LuckyResponse
from app.services.model_gateway import Message, ModelGateway

logger = logging.getLogger(__name__)

TEMPERATURE = 0.9
MAX_TOKENS = 64

# Opening/closing pairs stripped from generated tweets.
QUOTE_PAIRS = (('"', '"'), ("'", "'"), ("“", "”"), ("‘", "’"))

_rng = random.Random()


def get_rng() -> random.Random:
    """FastAPI dependency for the seed/flavor randomness source."""
    return _rng


def resolve_seed(seed: Any, rng: random.Random) -> str:
    """Client seed if it is a non-empty string, else a random topic."""
    if isinstance(seed, str) and seed.strip():
        return seed.strip()
    return rng.choice(LUCKY_TOPICS)


def build_flavor_profile(rng: random.Random) -> List[FlavorScore]:
    return [FlavorScore(name=name, score=rng.randint(0, 10)) for name in LUCKY_FLAVOR_CATEGORIES]


def build_messages(seed: str, flavor_profile: List[FlavorScore]) -> List[Message]:
    flavor_lines = "\n".join(f"{f.name}: {f.score}/10" for f in flavor_profile)
    system = " ".join([
        "You generate realistic but fictional financial tweets.",
        "The tweet should sound like a retail trader commenting on markets or a specific stock, "
        "or something a touch random.",
        "Do not give financial advice.",
        "Do not use emojis or hashtags.",
        "Keep it under 25 words.",
        "",
        "You are given a random 'flavor profile' of categories with intensity scores from 0 to 10.",
        "Write the tweet so that, overall, it roughly matches these intensities.",
        "0 means not present at all, 10 means extremely strong.",
        "",
        "Flavor profile:",
        flavor_lines,
        "",
        "Return only the tweet text with no quotes or extra commentary.",
    ])
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": f"Generate one tweet about: {seed}"},
    ]


def clean_tweet(raw: Any) -> str:
    """Trim and strip one layer of wrapping quotes."""
    if raw is None:
        text = ""
    elif isinstance(raw, str):
        text = raw
    else:
        text = str(raw)

    text = text.strip()
    for opening, closing in QUOTE_PAIRS:
        if len(text) >= 2 and text.startswith(opening) and text.endswith(closing):
            return text[1:-1].strip()
    return text


def generate_lucky_tweet(request: LuckyRequest, gateway: ModelGateway, rng: random.Random) -> LuckyResponse:
    """
    Generate one fictional tweet about a seed topic, biased by a random flavor profile.
    ModelGatewayError propagates to the caller.
    """
    seed = resolve_seed(request.seed, rng)
    flavor_profile = build_flavor_profile(rng)
    logger.info(f"Generating lucky tweet about {seed!r}")

    raw = gateway.run(
        settings.ai_model,
        build_messages(seed, flavor_profile),
        temperature=TEMPERATURE,
        max_tokens=MAX_TOKENS,
    )
    return LuckyResponse(tweet=clean_tweet(raw), flavor_profile=flavor_profile)
