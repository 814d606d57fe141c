"""DB service layer for player and plot use cases.

- Routers should not touch DB sessions directly; they call this module.
- This layer owns session/transaction boundaries.
- CRUD helpers do NOT commit; each call here runs inside one session.begin().
- The current instant always comes from the injected clock.
"""

import logging
from typing import Dict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from farmplot.authentication.token_authentication import new_token_hash, verify_token
from farmplot.crud import CreateData, ReadData, UpdateData, row_to_plot
from farmplot.domain import plot_rules
from farmplot.domain.clock import Clock
from farmplot.domain.plot_rules import PLOTS_PER_PLAYER, Item, Plot
from farmplot.models.schema_models import PlayerSchema, PlotSchema


class PlotService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], clock: Clock):
        self.Session = session_factory
        self.clock = clock

    async def resolve_and_maybe_persist(self, player_id: int, plot_id: int) -> PlotSchema:
        """Read a plot at the current instant, storing any growth that happened

        Args:
            player_id (int): Owner of the plot
            plot_id (int): Index of the plot

        Raises:
            NotFound: No such player or plot
            InvalidItem: The stored item code is unknown
            StorageFailure: Database error

        Returns:
            PlotSchema: The effective plot
        """
        now = self.clock.now()
        async with self.Session() as session:
            async with session.begin():
                row = await ReadData.read_plot(player_id, plot_id, session, for_update=True)
                stored = row_to_plot(row)
                plot = plot_rules.effective(stored, now)
                if plot != stored:
                    logging.info(
                        f"Plot {plot_id} of player {player_id} advanced: "
                        f"{stored.item.name} -> {plot.item.name}"
                    )
                    await UpdateData.update_plot(row, plot, session)
        return PlotSchema.from_plot(plot)

    async def plant(self, player_id: int, plot_id: int, requested_item) -> PlotSchema:
        """Place an item in a plot and schedule its growth

        Args:
            player_id (int): Owner of the plot
            plot_id (int): Index of the plot
            requested_item: Item or integer item code

        Raises:
            InvalidItem: requested_item is unknown; nothing is stored
            NotFound: No such player or plot
            StorageFailure: Database error

        Returns:
            PlotSchema: The planted plot
        """
        item = Item.parse(requested_item)
        now = self.clock.now()
        async with self.Session() as session:
            async with session.begin():
                row = await ReadData.read_plot(player_id, plot_id, session, for_update=True)
                plot = plot_rules.plant(Plot(id=row.plot_id), item, now)
                await UpdateData.update_plot(row, plot, session)
        logging.info(f"Planted {item.name} in plot {plot_id} of player {player_id}")
        return PlotSchema.from_plot(plot)

    async def list_players(self) -> Dict[int, PlayerSchema]:
        """Every player with its plots as seen right now. Nothing is written."""
        now = self.clock.now()
        async with self.Session() as session:
            players = await ReadData.read_players(session)
            return {
                player.id: PlayerSchema(
                    id=player.id,
                    name=player.name,
                    plots={
                        row.plot_id: PlotSchema.from_plot(
                            plot_rules.effective(row_to_plot(row), now)
                        )
                        for row in player.plots
                    },
                )
                for player in players
            }

    async def create_player(self, name: str, token: str) -> PlayerSchema:
        """Register a player together with its empty plots in one transaction

        Raises:
            PlayerExists: The name is already taken
            StorageFailure: Database error
        """
        hashed, salt = new_token_hash(token)
        plots = [Plot(id=plot_id) for plot_id in range(PLOTS_PER_PLAYER)]
        async with self.Session() as session:
            async with session.begin():
                player = await CreateData.create_player(name, hashed, salt, session)
                await CreateData.create_plots(player.id, plots, session)
                player_id = player.id
        logging.info(f"Created player {name} with id {player_id}")
        return PlayerSchema(
            id=player_id,
            name=name,
            plots={plot.id: PlotSchema.from_plot(plot) for plot in plots},
        )

    async def authenticate(self, name: str, token: str) -> bool:
        async with self.Session() as session:
            player = await ReadData.read_player_by_name(name, session)
        if player is None:
            return False
        return verify_token(token, player.hash_token, player.salt)
