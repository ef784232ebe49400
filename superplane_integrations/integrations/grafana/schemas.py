"""Pydantic models for the Grafana HTTP API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_REF_ID = "A"


class GrafanaModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class HealthResponse(GrafanaModel):
    database: str = ""
    version: str = ""
    commit: str = ""


class DataSourceRef(GrafanaModel):
    uid: str


class DataSourceQuery(GrafanaModel):
    """
    One entry of the queries list.

    The query text is sent both as expr (Prometheus, Loki) and as
    rawSql/query for the data sources that read those keys instead.
    """

    ref_id: str = DEFAULT_REF_ID
    datasource: DataSourceRef
    expr: str = ""
    query: str = ""
    raw_sql: str = ""


class DataSourceQueryRequest(GrafanaModel):
    queries: list[DataSourceQuery]
    from_: str = Field(default="now-1h", alias="from")
    to: str = "now"

    @classmethod
    def single(cls, data_source_uid: str, query: str, start: str, end: str) -> DataSourceQueryRequest:
        return cls(
            queries=[
                DataSourceQuery(
                    datasource=DataSourceRef(uid=data_source_uid),
                    expr=query,
                    query=query,
                    raw_sql=query,
                )
            ],
            from_=start,
            to=end,
        )

    def to_api_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class QueryResult(GrafanaModel):
    status: int | None = None
    error: str | None = None
    frames: list[dict[str, Any]] = Field(default_factory=list)


class DataSourceQueryResponse(GrafanaModel):
    results: dict[str, QueryResult] = Field(default_factory=dict)

    def errors(self) -> list[str]:
        return [
            f"{ref_id}: {result.error}"
            for ref_id, result in self.results.items()
            if result.error
        ]
