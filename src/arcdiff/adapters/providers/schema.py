"""Response envelopes of the item providers.

Only the paging and versioning fields are modelled; item records stay raw.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProviderBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ArdbEnvelope(ProviderBaseModel):
    data: list[Any] | None = None


class MetaForgePagination(ProviderBaseModel):
    total_pages: int | None = Field(default=None, alias="totalPages")
    has_next_page: bool | None = Field(default=None, alias="hasNextPage")


class MetaForgePage(ProviderBaseModel):
    data: list[Any] | None = None
    pagination: MetaForgePagination | None = None


class GitHubCommit(ProviderBaseModel):
    sha: str | None = None


class GitHubContentEntry(ProviderBaseModel):
    name: str | None = None
    type: str | None = None
    download_url: str | None = None


class GitHubError(ProviderBaseModel):
    message: str | None = None


class MahcksInfo(ProviderBaseModel):
    version: str | int | float | None = None


class MahcksPage(ProviderBaseModel):
    items: list[Any] | None = None
    count: int | None = None
    next: str | None = None
