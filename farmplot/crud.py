from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from typing import List
import logging

from farmplot.domain.plot_rules import Item, Plot
from farmplot.errors import NotFound, PlayerExists, StorageFailure
from farmplot.models.schemas import Base, Player, PlotRow


def row_to_plot(row: PlotRow) -> Plot:
    """Convert a stored row, rejecting item codes outside the enumeration."""
    return Plot(id=row.plot_id, item=Item.parse(row.item), transition_at=row.transition_at)


async def create_table(engine) -> None:
    """Create tables if not exists"""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError as e:
        logging.error(f"Failed to create tables: {e}")
        raise StorageFailure("Failed to create tables") from e


class CreateData:
    """Insert helpers. They flush but never commit; the caller owns the transaction."""

    @staticmethod
    async def create_player(name: str, hash_token: str, salt: str, session: AsyncSession) -> Player:
        """Insert a player row

        Args:
            name (str): Unique player name
            hash_token (str): Salted hash of the player's token
            salt (str): Salt used for hash_token

        Raises:
            PlayerExists: The name is already taken
            StorageFailure: Any other database error

        Returns:
            Player: The new row with its id assigned
        """
        try:
            new_player = Player(name=name, hash_token=hash_token, salt=salt)
            session.add(new_player)
            await session.flush()
            return new_player
        except IntegrityError as e:
            logging.info(f"Player name already taken: {name}")
            raise PlayerExists(f"Player {name!r} already exists") from e
        except SQLAlchemyError as e:
            logging.error(f"Failed to create player data: {e}")
            raise StorageFailure("Failed to create player data") from e

    @staticmethod
    async def create_plots(player_id: int, plots: List[Plot], session: AsyncSession) -> None:
        try:
            session.add_all(
                [
                    PlotRow(
                        player_id=player_id,
                        plot_id=plot.id,
                        item=int(plot.item),
                        transition_at=plot.transition_at,
                    )
                    for plot in plots
                ]
            )
            await session.flush()
        except SQLAlchemyError as e:
            logging.error(f"Failed to create plot data: {e}")
            raise StorageFailure("Failed to create plot data") from e


class ReadData:
    @staticmethod
    async def read_plot(
        player_id: int, plot_id: int, session: AsyncSession, for_update: bool = False
    ) -> PlotRow:
        """Read one plot row

        Args:
            player_id (int): Owner of the plot
            plot_id (int): Index of the plot within the player's set
            for_update (bool): Lock the row until the transaction ends

        Raises:
            NotFound: No such player or plot
            StorageFailure: Database error

        Returns:
            PlotRow: The stored row
        """
        try:
            stmt = select(PlotRow).where(
                PlotRow.player_id == player_id, PlotRow.plot_id == plot_id
            )
            if for_update:
                stmt = stmt.with_for_update()
            result = await session.execute(stmt)
            result = result.scalars().first()
        except SQLAlchemyError as e:
            logging.error(f"Failed to read plot data: {e}")
            raise StorageFailure("Failed to read plot data") from e

        if result is None:
            raise NotFound(f"Plot {plot_id} of player {player_id} not found")
        return result

    @staticmethod
    async def read_players(session: AsyncSession) -> List[Player]:
        """Read every player together with its plots"""
        try:
            stmt = select(Player).options(selectinload(Player.plots)).order_by(Player.id)
            result = await session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logging.error(f"Failed to read player data: {e}")
            raise StorageFailure("Failed to read player data") from e

    @staticmethod
    async def read_player_by_name(name: str, session: AsyncSession) -> Player | None:
        try:
            stmt = select(Player).where(Player.name == name)
            result = await session.execute(stmt)
            return result.scalars().first()
        except SQLAlchemyError as e:
            logging.error(f"Failed to read player data: {e}")
            raise StorageFailure("Failed to read player data") from e


class UpdateData:
    @staticmethod
    async def update_plot(row: PlotRow, plot: Plot, session: AsyncSession) -> None:
        """Write a plot state onto its row

        Args:
            row (PlotRow): Row loaded in the current session
            plot (Plot): New state to store
        """
        try:
            row.item = int(plot.item)
            row.transition_at = plot.transition_at
            await session.flush()
        except SQLAlchemyError as e:
            logging.error(f"Failed to update plot data: {e}")
            raise StorageFailure("Failed to update plot data") from e
