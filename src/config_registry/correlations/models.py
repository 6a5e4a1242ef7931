"""
Correlation data models.

A correlation is a saved configuration that joins and filters records
across several streams.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TableConfig(BaseModel):
    """One stream taking part in a correlation."""

    model_config = ConfigDict(frozen=True)

    table_name: str = Field(description="Stream name")
    selected_fields: list[str] = Field(default_factory=list, description="Fields projected from the stream")


class JoinCondition(BaseModel):
    """A join key: a field of one of the correlated streams."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    field: str


class JoinConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    join_conditions: list[JoinCondition] = Field(default_factory=list)


class CorrelationConfig(BaseModel):
    """A stored correlation."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(default="v1", description="Configuration schema version")
    id: str | None = Field(default=None, description="Caller-chosen id; generated when omitted")
    title: str = Field(default="", description="Display title")
    user_id: str | None = Field(default=None, description="Owner identity hash, set by the server")
    table_configs: list[TableConfig] = Field(default_factory=list)
    join_config: JoinConfig = Field(default_factory=JoinConfig)
    filter: dict[str, Any] | None = Field(default=None, description="Opaque filter query")
    start_time: datetime | None = None
    end_time: datetime | None = None

    def stream_names(self) -> list[str]:
        """Referenced streams in table_configs order, without repeats."""
        return list(dict.fromkeys(t.table_name for t in self.table_configs))
