"""Shared model configuration.

Feed records are coerced into these models at the ingestion boundary;
state stores and the prediction engine only ever see the normalized form.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class FeedRecord(BaseModel):
    """Immutable normalized record."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )


class MutableState(BaseModel):
    """Mutable per-key state owned by a single store."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)
