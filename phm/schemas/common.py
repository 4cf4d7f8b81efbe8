# phm/schemas/common.py
from datetime import datetime
from typing import Annotated, Dict, List, Optional

from fastapi import Query
from pydantic import AfterValidator, BaseModel, ConfigDict, JsonValue
from pydantic.alias_generators import to_camel

from phm.core.clock import as_utc

# string-keyed map whose values are str/number/bool/null or nested maps/lists
JsonMap = Dict[str, JsonValue]

UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; reads straight from ORM rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class PageParams:
    """Query dependency: 1-indexed page, pageSize bounded to 1..100."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    ):
        self.page = page
        self.page_size = page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]
