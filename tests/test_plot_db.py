"""Tests for the plot service against a SQLite database."""

import asyncio

import pytest
from sqlalchemy import select, text

from farmplot.crud import ReadData
from farmplot.domain.plot_rules import PLOTS_PER_PLAYER, Item
from farmplot.errors import InvalidItem, NotFound, PlayerExists, StorageFailure
from farmplot.models.schemas import PlotRow
from farmplot.models.schema_models import PlotSchema

T = 1600000000


def stored_plot(plot_service, player_id, plot_id) -> PlotRow:
    async def read():
        async with plot_service.Session() as session:
            result = await session.execute(
                select(PlotRow).where(
                    PlotRow.player_id == player_id, PlotRow.plot_id == plot_id
                )
            )
            return result.scalars().one()

    return asyncio.run(read())


class TestPlayers:
    def test_create_player_with_empty_plots(self, plot_service):
        player = asyncio.run(plot_service.create_player("foo", "abcde"))
        assert player.id == 1
        assert player.name == "foo"
        assert list(player.plots) == list(range(PLOTS_PER_PLAYER))

        players = asyncio.run(plot_service.list_players())
        assert list(players) == [1]
        assert players[1].plots == {i: PlotSchema(id=i) for i in range(PLOTS_PER_PLAYER)}

    def test_duplicate_name(self, plot_service):
        asyncio.run(plot_service.create_player("foo", "abcde"))
        with pytest.raises(PlayerExists):
            asyncio.run(plot_service.create_player("foo", "other"))
        assert list(asyncio.run(plot_service.list_players())) == [1]

    def test_authenticate(self, plot_service):
        asyncio.run(plot_service.create_player("foo", "abcde"))
        assert asyncio.run(plot_service.authenticate("foo", "abcde"))
        assert not asyncio.run(plot_service.authenticate("foo", "wrong"))
        assert not asyncio.run(plot_service.authenticate("nobody", "abcde"))

    def test_token_is_not_stored_in_plain_text(self, plot_service):
        asyncio.run(plot_service.create_player("foo", "abcde"))

        async def read_hash():
            async with plot_service.Session() as session:
                return await ReadData.read_player_by_name("foo", session)

        player = asyncio.run(read_hash())
        assert player.hash_token != "abcde"
        assert len(player.salt) == 16


class TestPlots:
    @pytest.fixture(autouse=True)
    def player(self, plot_service):
        return asyncio.run(plot_service.create_player("foo", "abcde"))

    def test_plant_then_read_at_same_instant(self, plot_service):
        planted = asyncio.run(plot_service.plant(1, 5, Item.CARROT_SEED))
        assert planted == PlotSchema(id=5, item=Item.CARROT_SEED, transition=T + 10)
        assert asyncio.run(plot_service.resolve_and_maybe_persist(1, 5)) == planted

    def test_carrot_grows_and_is_persisted(self, plot_service, clock):
        asyncio.run(plot_service.plant(1, 5, Item.CARROT_SEED))

        clock.advance(1)
        plot = asyncio.run(plot_service.resolve_and_maybe_persist(1, 5))
        assert plot == PlotSchema(id=5, item=Item.CARROT_SEED, transition=T + 10)

        clock.set(T + 10)
        plot = asyncio.run(plot_service.resolve_and_maybe_persist(1, 5))
        assert plot.item is Item.CARROT_SEED

        clock.set(T + 11)
        plot = asyncio.run(plot_service.resolve_and_maybe_persist(1, 5))
        assert plot == PlotSchema(id=5, item=Item.CARROT, transition=0)

        row = stored_plot(plot_service, 1, 5)
        assert row.item == Item.CARROT
        assert row.transition_at == 0

    def test_listing_shows_effective_state_without_writing(self, plot_service, clock):
        asyncio.run(plot_service.plant(1, 2, Item.CARROT_SEED))
        clock.advance(11)

        players = asyncio.run(plot_service.list_players())
        assert players[1].plots[2] == PlotSchema(id=2, item=Item.CARROT)

        row = stored_plot(plot_service, 1, 2)
        assert row.item == Item.CARROT_SEED
        assert row.transition_at == T + 10

    def test_persisted_chain_advances_one_step_per_read(self, plot_service, clock):
        asyncio.run(plot_service.plant(1, 0, Item.POTATO_SEED))
        clock.advance(1000)

        plot = asyncio.run(plot_service.resolve_and_maybe_persist(1, 0))
        assert plot == PlotSchema(id=0, item=Item.POTATO_SPROUT, transition=T + 1030)
        # a second read at the same instant agrees with the first
        assert asyncio.run(plot_service.resolve_and_maybe_persist(1, 0)) == plot

        clock.advance(31)
        plot = asyncio.run(plot_service.resolve_and_maybe_persist(1, 0))
        assert plot == PlotSchema(id=0, item=Item.POTATO)

    def test_plant_invalid_item_stores_nothing(self, plot_service):
        asyncio.run(plot_service.plant(1, 3, Item.CARROT_SEED))
        with pytest.raises(InvalidItem):
            asyncio.run(plot_service.plant(1, 3, 77))

        row = stored_plot(plot_service, 1, 3)
        assert row.item == Item.CARROT_SEED

    def test_plant_invalid_item_on_missing_plot(self, plot_service):
        # item validation happens before any storage access
        with pytest.raises(InvalidItem):
            asyncio.run(plot_service.plant(9, 9, 77))

    @pytest.mark.parametrize("player_id, plot_id", [(2, 0), (1, PLOTS_PER_PLAYER), (1, -1)])
    def test_missing_plot(self, plot_service, player_id, plot_id):
        with pytest.raises(NotFound):
            asyncio.run(plot_service.resolve_and_maybe_persist(player_id, plot_id))
        with pytest.raises(NotFound):
            asyncio.run(plot_service.plant(player_id, plot_id, Item.CARROT_SEED))

    def test_unknown_stored_item_is_reported(self, plot_service):
        async def corrupt():
            async with plot_service.Session() as session:
                async with session.begin():
                    row = await session.get(PlotRow, (1, 4))
                    row.item = 42

        asyncio.run(corrupt())
        with pytest.raises(InvalidItem):
            asyncio.run(plot_service.resolve_and_maybe_persist(1, 4))


class TestStorageFailure:
    @pytest.fixture(autouse=True)
    def broken_plots_table(self, plot_service, engine):
        asyncio.run(plot_service.create_player("foo", "abcde"))

        async def drop():
            async with engine.begin() as conn:
                await conn.execute(text("DROP TABLE plots"))

        asyncio.run(drop())

    def test_read_raises_storage_failure(self, plot_service):
        with pytest.raises(StorageFailure):
            asyncio.run(plot_service.resolve_and_maybe_persist(1, 0))

    def test_plant_raises_storage_failure(self, plot_service):
        with pytest.raises(StorageFailure):
            asyncio.run(plot_service.plant(1, 0, Item.CARROT_SEED))

    def test_listing_raises_storage_failure(self, plot_service):
        with pytest.raises(StorageFailure):
            asyncio.run(plot_service.list_players())
