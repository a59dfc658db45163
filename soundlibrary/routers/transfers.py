import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from soundlibrary.controller import CatalogController, get_controller
from soundlibrary.errors import FetchError, StoreError, ValidationError
from soundlibrary.models import TransferOut, TransferResultOut
from soundlibrary.transfers import SelectedFile, TransferResult

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/transfers", tags=["transfers"])


def _result_out(result: TransferResult) -> TransferResultOut:
    if isinstance(result.error, ValidationError):
        raise HTTPException(422, result.message)
    if isinstance(result.error, FetchError):
        raise HTTPException(502, result.message)
    if isinstance(result.error, StoreError):
        raise HTTPException(500 if result.error.is_configuration else 503, result.message)
    if result.error is not None:
        raise HTTPException(500, result.message)
    return TransferResultOut(
        key=str(result.key),
        kind=result.kind,
        ok=result.ok,
        message=result.message,
        filename=result.filename,
        track_id=result.track.id if result.track else None,
    )


@router.get("")
async def list_transfers(controller: CatalogController = Depends(get_controller)) -> list[TransferOut]:
    return [
        TransferOut(key=str(key), kind=kind)
        for key, kind in controller.transfers.snapshot().items()
    ]


@router.post("/download/{track_id}")
async def download_track(
    track_id: str, controller: CatalogController = Depends(get_controller)
) -> TransferResultOut:
    track = controller.track(track_id)
    if track is None:
        raise HTTPException(404, "Track not found")
    return _result_out(await controller.transfers.download(track))


@router.post("/upload")
async def upload_track(
    file: UploadFile | None = File(None),
    controller: CatalogController = Depends(get_controller),
) -> TransferResultOut:
    selected = None
    if file is not None and file.filename:
        selected = SelectedFile(
            name=file.filename, data=await file.read(), content_type=file.content_type
        )
    return _result_out(await controller.transfers.upload(selected))
