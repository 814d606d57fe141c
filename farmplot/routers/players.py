import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request

from farmplot.authentication.token_authentication import TokenAuthentication, generate_token
from farmplot.models.dc_models import PlayerModel, PlotModel
from farmplot.models.schema_models import NewPlayerSchema, PlayerSchema, PlotSchema
from farmplot.services.plot_db import PlotService

player_router = APIRouter()
token_auth = TokenAuthentication()


def get_plot_service(request: Request) -> PlotService:
    return request.app.state.plot_service


class PlayerAPI:
    @staticmethod
    @player_router.get("/players", response_model=Dict[int, PlayerSchema])
    async def get_players(plot_service: PlotService = Depends(get_plot_service)):
        return await plot_service.list_players()

    @staticmethod
    @player_router.post("/players", response_model=NewPlayerSchema)
    async def add_player(
        player: PlayerModel, plot_service: PlotService = Depends(get_plot_service)
    ):
        token = player.auth if player.auth is not None else generate_token()
        new_player = await plot_service.create_player(player.name, token)
        return NewPlayerSchema(id=new_player.id, name=new_player.name, auth=token)


class PlotAPI:
    @staticmethod
    @player_router.get(
        "/players/{player_id}/plots/{plot_id}", response_model=PlotSchema
    )
    async def get_plot(
        player_id: int,
        plot_id: int,
        plot_service: PlotService = Depends(get_plot_service),
    ):
        return await plot_service.resolve_and_maybe_persist(player_id, plot_id)

    @staticmethod
    @player_router.put(
        "/players/{player_id}/plots/{plot_id}", response_model=PlotSchema
    )
    async def put_plot(
        player_id: int,
        plot_id: int,
        plot: PlotModel,
        plot_service: PlotService = Depends(get_plot_service),
    ):
        logging.info(f"put_plot: player={player_id} plot={plot_id} item={plot.item}")
        return await plot_service.plant(player_id, plot_id, plot.item)


class AuthAPI:
    @staticmethod
    @player_router.get("/auth", response_model=bool)
    async def get_auth(authenticated: bool = Depends(token_auth.check_player)):
        return authenticated
