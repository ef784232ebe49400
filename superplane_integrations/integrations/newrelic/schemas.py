"""Pydantic models for NerdGraph and the Metric API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

METRIC_TYPE_GAUGE = "gauge"
METRIC_TYPE_COUNT = "count"
METRIC_TYPE_SUMMARY = "summary"

METRIC_TYPES = (METRIC_TYPE_GAUGE, METRIC_TYPE_COUNT, METRIC_TYPE_SUMMARY)


class NewRelicModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Account(NewRelicModel):
    id: int
    name: str = ""


class GraphQLError(NewRelicModel):
    message: str = ""
    path: list[Any] | None = None


class GraphQLResponse(NewRelicModel):
    data: dict[str, Any] | None = None
    errors: list[GraphQLError] = Field(default_factory=list)


class TimeWindow(NewRelicModel):
    begin: int = 0
    end: int = 0


class NRQLMetadata(NewRelicModel):
    event_types: list[str] | None = None
    facets: list[str] | None = None
    messages: list[str] | None = None
    time_window: TimeWindow | None = None


class NRQLQueryResponse(NewRelicModel):
    results: list[dict[str, Any]] = Field(default_factory=list)
    total_result: dict[str, Any] | None = None
    metadata: NRQLMetadata | None = None


class Metric(NewRelicModel):
    """
    One data point for the Metric API.

    Gauges carry a number; counts carry a number over interval.ms;
    summaries carry {count, sum, min, max} over interval.ms.
    """

    name: str
    type: str
    value: Any
    timestamp: int | None = None
    interval_ms: int | None = Field(default=None, alias="interval.ms")
    attributes: dict[str, Any] | None = None


class MetricBatch(NewRelicModel):
    common: dict[str, Any] | None = None
    metrics: list[Metric] = Field(default_factory=list)

    def to_api_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
