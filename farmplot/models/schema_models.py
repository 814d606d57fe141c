from pydantic import BaseModel
from typing import Dict

from farmplot.domain.plot_rules import Item, Plot


class PlotSchema(BaseModel):
    id: int
    item: Item = Item.NONE
    transition: int = 0

    @classmethod
    def from_plot(cls, plot: Plot) -> "PlotSchema":
        return cls(id=plot.id, item=plot.item, transition=plot.transition_at)


class PlayerSchema(BaseModel):
    id: int
    name: str
    plots: Dict[int, PlotSchema] = {}


class NewPlayerSchema(BaseModel):
    """Returned once on registration; auth is the only copy of the token."""
    id: int
    name: str
    auth: str
