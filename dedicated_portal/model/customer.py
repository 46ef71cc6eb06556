"""Customer models."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 100

# Largest LIMIT/OFFSET value SQLite and PostgreSQL accept (signed 64-bit).
MAX_ROW_INDEX = 2**63 - 1


class CustomerSpec(BaseModel):
    """Body of a customer creation request."""

    name: str
    owner_id: Optional[str] = None


class Customer(CustomerSpec):
    """A stored customer record."""

    id: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Customer":
        return cls(id=row["id"], name=row["name"], owner_id=row.get("owner_id"))


class CustomersList(BaseModel):
    """One page of customers."""

    page: int = Field(ge=1)
    size: int = Field(ge=1)
    total: int = Field(ge=0)
    items: List[Customer] = []


def page_offset(page: int, size: int) -> int:
    """Row offset of a 1-based page."""
    return (page - 1) * size
