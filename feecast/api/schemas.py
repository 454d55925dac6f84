from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class RecommendQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    priority_gwei: Optional[float] = Field(default=None, gt=0, le=1000, alias="priorityGwei")


def parse_recommend_query(args) -> Optional[float]:
    """
    priorityGwei from the query string, or None when absent / invalid
    (invalid input falls back to the configured default, never a 4xx).
    """
    raw = args.get("priorityGwei")
    if raw is None or raw == "":
        return None
    try:
        return RecommendQuery(priorityGwei=raw).priority_gwei
    except ValidationError:
        return None
