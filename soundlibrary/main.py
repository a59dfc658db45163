import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from soundlibrary.catalog import artwork_for
from soundlibrary.config import SEED_SAMPLE_CATALOG, STORAGE_ROUTE
from soundlibrary.controller import CatalogController, get_controller
from soundlibrary.media import MediaBackend
from soundlibrary.models import StatusOut, TransferOut
from soundlibrary.routers.browse import router as browse_router
from soundlibrary.routers.player import router as player_router
from soundlibrary.routers.transfers import router as transfers_router
from soundlibrary.seed import seed_catalog
from soundlibrary.store import CatalogStore
from soundlibrary.transfers import DirectorySaver

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)


def create_app(
    store: CatalogStore | None = None,
    media: MediaBackend | None = None,
    saver: DirectorySaver | None = None,
    seed: bool = SEED_SAMPLE_CATALOG,
) -> FastAPI:
    store = store or CatalogStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await store.init()
        if seed:
            await seed_catalog(store)

        controller = CatalogController(store, media or MediaBackend(), saver)
        app.state.controller = controller
        if not await controller.refresh():
            log.info("Starting with an empty catalog")

        yield

        # Releases any open media handle so nothing keeps playing after shutdown
        await controller.dispose()

    app = FastAPI(title="SoundLibrary", lifespan=lifespan)

    app.include_router(browse_router)
    app.include_router(player_router)
    app.include_router(transfers_router)

    @app.get("/api/status")
    async def status(controller: CatalogController = Depends(get_controller)) -> StatusOut:
        return StatusOut(
            total_tracks=len(controller.index.tracks),
            visible_tracks=len(controller.index.view()),
            playback=controller.playback.state,
            transfers=[
                TransferOut(key=str(key), kind=kind)
                for key, kind in controller.transfers.snapshot().items()
            ],
            storage_mb=round(store.storage_bytes() / (1024 * 1024), 1),
            catalog_error=controller.catalog_error,
        )

    @app.get("/api/art/{track_id}")
    async def get_art(track_id: str, controller: CatalogController = Depends(get_controller)):
        track = controller.track(track_id)
        if track is None:
            raise HTTPException(404, "Track not found")
        return RedirectResponse(artwork_for(track))

    # Public asset bucket; locators from CatalogStore.public_url resolve here
    app.mount(
        STORAGE_ROUTE,
        StaticFiles(directory=str(store.storage_dir), check_dir=False),
        name="storage",
    )

    return app


app = create_app()
