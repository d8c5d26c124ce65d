from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SentimentRequest(BaseModel):
    # Shapes are checked by the service, so loosely typed clients still get
    # the documented fallbacks instead of a validation error.
    model_config = ConfigDict(extra="ignore")

    tweets: Any = None
    tweet: Any = None
    text: Any = None
    categories: Any = None


class CategoryScore(CamelModel):
    name: str
    score: Optional[int] = None


class TweetAnalysis(CamelModel):
    index: int
    text: str
    explanation: Optional[str] = None
    categories: List[CategoryScore] = Field(default_factory=list)
    raw: Any = None
    error: Optional[str] = None


class SentimentSummary(CamelModel):
    total: int
    avg_by_category: Dict[str, Optional[float]]


class SentimentResponse(CamelModel):
    model: str
    requested_categories: List[str]
    count: int
    results: List[TweetAnalysis]
    summary: SentimentSummary
