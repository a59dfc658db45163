import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from soundlibrary.controller import CatalogController, get_controller
from soundlibrary.models import CatalogView, FilterState, TrackGroupOut

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["browse"])


def _catalog_view(controller: CatalogController, grouped: bool) -> CatalogView:
    index = controller.index
    visible = index.view()
    return CatalogView(
        filter=index.filter,
        total=len(index.tracks),
        count=len(visible),
        empty=not visible,
        groups=[
            TrackGroupOut(
                category=category,
                tracks=[controller.track_out(t) for t in tracks],
            )
            for category, tracks in index.grouped(by_category=grouped)
        ],
    )


@router.get("/tracks")
async def list_tracks(
    grouped: bool = Query(False),
    controller: CatalogController = Depends(get_controller),
) -> CatalogView:
    return _catalog_view(controller, grouped)


@router.get("/filter")
async def get_filter(controller: CatalogController = Depends(get_controller)) -> FilterState:
    return controller.index.filter


@router.put("/filter")
async def set_filter(
    filter_state: FilterState,
    grouped: bool = Query(False),
    controller: CatalogController = Depends(get_controller),
) -> CatalogView:
    controller.index.set_filter(filter_state)
    return _catalog_view(controller, grouped)


@router.delete("/filter")
async def clear_filters(controller: CatalogController = Depends(get_controller)) -> CatalogView:
    controller.index.clear_filters()
    return _catalog_view(controller, False)


@router.delete("/filter/search")
async def clear_search(controller: CatalogController = Depends(get_controller)) -> CatalogView:
    controller.index.clear_search()
    return _catalog_view(controller, False)


@router.get("/categories")
async def list_categories(controller: CatalogController = Depends(get_controller)) -> list[str]:
    return controller.index.category_options()


@router.get("/moods")
async def list_moods(controller: CatalogController = Depends(get_controller)) -> list[str]:
    return controller.index.mood_options()


@router.post("/catalog/refresh")
async def refresh_catalog(controller: CatalogController = Depends(get_controller)) -> CatalogView:
    if not await controller.refresh():
        raise HTTPException(502, controller.catalog_error or "Catalog refresh failed")
    return _catalog_view(controller, False)
