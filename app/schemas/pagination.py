# app/schemas/pagination.py
from typing import Generic, List, TypeVar
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar('T')

class Pagination(BaseModel, Generic[T]):
    data: List[T]
    total: int
    total_pages: int = Field(alias="totalPages")
    current_page: int = Field(alias="currentPage")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
