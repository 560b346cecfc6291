"""
Map interaction API.

Thin HTTP and WebSocket surface over the MapInteractionController held on
``app.state.controller``. Every mutating endpoint answers with the snapshot
after the transition; the WebSocket streams StateChanged and CameraFit
events as they happen.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field

from core.api import api_route
from interaction.controller import MapInteractionController
from interaction.models import Region

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/map", tags=["map"])


class SearchRequest(BaseModel):
    query: str = Field(max_length=256)
    region: Region | None = None


class SelectionRequest(BaseModel):
    place_id: str | None = None


class CameraRequest(BaseModel):
    region: Region


def get_controller(request: Request) -> MapInteractionController:
    return request.app.state.controller


Controller = Annotated[MapInteractionController, Depends(get_controller)]


@router.get("/state", response_model=dict[str, Any])
@api_route(logger)
async def get_state(controller: Controller):
    """Current snapshot, including derived display fields."""
    return controller.snapshot().to_dict()


@router.post("/search", response_model=dict[str, Any])
@api_route(logger)
async def submit_search(payload: SearchRequest, controller: Controller):
    await controller.submit_search(payload.query, payload.region)
    return controller.snapshot().to_dict()


@router.delete("/search", response_model=dict[str, Any])
@api_route(logger)
async def exit_search(controller: Controller):
    controller.exit_search()
    return controller.snapshot().to_dict()


@router.post("/selection", response_model=dict[str, Any])
@api_route(logger)
async def select_place(payload: SelectionRequest, controller: Controller):
    """Select a known place by id, or clear the selection with a null id."""
    controller.select_by_id(payload.place_id)
    return controller.snapshot().to_dict()


@router.post("/route", response_model=dict[str, Any])
@api_route(logger)
async def start_route(controller: Controller):
    await controller.start_route()
    return controller.snapshot().to_dict()


@router.delete("/route", response_model=dict[str, Any])
@api_route(logger)
async def end_route(controller: Controller):
    controller.end_route()
    return controller.snapshot().to_dict()


@router.post("/camera", response_model=dict[str, Any])
@api_route(logger)
async def update_camera(payload: CameraRequest, controller: Controller):
    controller.update_view_region(payload.region)
    return controller.snapshot().to_dict()


@router.websocket("/events")
async def stream_events(websocket: WebSocket) -> None:
    controller: MapInteractionController = websocket.app.state.controller
    await websocket.accept()
    async with controller.events() as stream:
        try:
            await websocket.send_json(
                {"type": "snapshot", "snapshot": controller.snapshot().to_dict()},
            )
            async for event in stream:
                await websocket.send_json(event.to_dict())
        except WebSocketDisconnect:
            logger.debug("Map event subscriber disconnected")
