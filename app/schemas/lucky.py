from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, List


class LuckyRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    seed: Any = None


class FlavorScore(BaseModel):
    name: str
    score: int


class LuckyResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tweet: str
    flavor_profile: List[FlavorScore]
