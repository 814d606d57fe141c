from pydantic import BaseModel, Field
from typing import Any, Optional


class PlayerModel(BaseModel):
    name: str = Field(min_length=1)
    auth: Optional[str] = Field(default=None, min_length=1)


class PlotModel(BaseModel):
    # Left untyped so every value reaches Item.parse unconverted and
    # anything outside the enumeration fails as InvalidItem.
    item: Any
