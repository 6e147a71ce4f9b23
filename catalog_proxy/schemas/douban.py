from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CatalogItem(BaseModel):
    id: str
    title: str
    poster: str
    rate: str = ""
    year: str = ""


class CatalogResult(BaseModel):
    # "list" on the wire; a field named list would shadow the builtin here.
    model_config = ConfigDict(populate_by_name=True)

    code: int = 200
    message: str
    items: list[CatalogItem] = Field(default_factory=list, alias="list")


class CatalogQuery(BaseModel):
    type: Literal["tv", "movie"]
    tag: str = Field(min_length=1)
    page_size: int = Field(default=16, ge=1, le=100)
    page_start: int = Field(default=0, ge=0)

    @property
    def is_top250(self) -> bool:
        return self.tag == "top250"


class DoubanSubject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    cover: str = ""
    rate: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: object) -> object:
        # search_subjects has served ids both as strings and as numbers
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("cover", "rate", mode="before")
    @classmethod
    def none_to_blank(cls, value: object) -> object:
        return "" if value is None else value


class DoubanSearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    subjects: list[DoubanSubject]
