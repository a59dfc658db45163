import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from soundlibrary.controller import CatalogController, get_controller
from soundlibrary.models import PlaybackState

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/player", tags=["player"])


@router.get("/current")
async def get_current(controller: CatalogController = Depends(get_controller)) -> PlaybackState:
    return controller.playback.state


@router.post("/press/{track_id}")
async def press_track(
    track_id: str, controller: CatalogController = Depends(get_controller)
) -> PlaybackState:
    track = controller.track(track_id)
    if track is None:
        raise HTTPException(404, "Track not found")
    return await controller.playback.press(track)


@router.post("/stop")
async def stop(controller: CatalogController = Depends(get_controller)) -> PlaybackState:
    return controller.playback.stop()


@router.post("/next")
async def next_track(controller: CatalogController = Depends(get_controller)) -> PlaybackState:
    return await controller.playback.next(controller.index.view())


@router.post("/prev")
async def prev_track(controller: CatalogController = Depends(get_controller)) -> PlaybackState:
    return await controller.playback.previous(controller.index.view())


@router.post("/ended")
async def stream_ended(
    track_id: str | None = None, controller: CatalogController = Depends(get_controller)
) -> PlaybackState:
    return controller.playback.end_of_stream(track_id)


@router.get("/stream")
async def stream_active(controller: CatalogController = Depends(get_controller)):
    handle = controller.playback.active_handle
    if handle is None:
        raise HTTPException(404, "Nothing is playing")
    return Response(content=handle.payload, media_type=handle.content_type)
