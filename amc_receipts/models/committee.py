"""Agricultural market committee as read from the backend."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class Committee(BaseModel):
    """Committee record.

    Committees are owned by the backend; the service only reads them.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Opaque backend identifier")
    name: str = Field(..., description="Display / legal name")
    district: Optional[str] = None
    code: Optional[str] = Field(None, description="Short code, e.g. TUN")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Committee:
        return cls(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            district=row.get("district") or None,
            code=row.get("code") or None,
        )
