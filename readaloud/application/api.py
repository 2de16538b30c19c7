"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .config import settings
from .controller import ReaderController
from ..infrastructure.dynamodb_key_value_store import DynamoDBKeyValueStore
from ..infrastructure.http_speech_service import HttpSpeechService
from ..infrastructure.local_key_value_store import LocalKeyValueStore

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


class PageLoadedBody(BaseModel):
    page_id: str
    url: str


def build_controller() -> ReaderController:
    """Build the controller from the configured providers."""
    if settings.storage_backend == "dynamodb":
        store = DynamoDBKeyValueStore(settings.storage_table_name, region_name=settings.aws_region)
    else:
        store = LocalKeyValueStore()

    speech_service = HttpSpeechService(
        synthesis_url=settings.synthesis_url,
        next_page_url=settings.next_page_url,
        timeout=settings.synthesis_timeout_seconds,
    )
    return ReaderController(
        store=store,
        synthesizer=speech_service,
        resolver=speech_service,
        settings=settings,
    )


def create_app(controller: Optional[ReaderController] = None) -> FastAPI:
    """Create the FastAPI app around ``controller``, or the configured one."""
    controller = controller or build_controller()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await controller.startup()
        logger.info(f"{settings.app_name} {settings.app_version} started")
        try:
            yield
        finally:
            await controller.shutdown()
            aclose = getattr(controller.synthesizer, "aclose", None)
            if aclose is not None:
                await aclose()
            logger.info(f"{settings.app_name} stopped")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.controller = controller

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return controller.get_health_status()

    @app.get("/state")
    async def get_state():
        """Current state of the reading session."""
        state = await controller.get_state()
        if state is None:
            raise HTTPException(status_code=500, detail="Could not read session state")
        return state.model_dump(mode="json")

    @app.post("/pages/loaded")
    async def page_loaded(body: PageLoadedBody):
        """Report that a browser page finished loading a URL.

        Returns whether reading continued on that page.
        """
        started = await controller.page_loaded(body.page_id, body.url)
        return {"page_id": body.page_id, "continued": started}

    @app.delete("/data")
    async def clear_all():
        """Discard the session, the auto-advance preference and the audio cache."""
        await controller.clear_all()
        return {"success": True}

    @app.get("/history")
    async def get_history():
        items = await controller.get_history()
        return {"items": [item.model_dump(mode="json") for item in items]}

    @app.delete("/history")
    async def clear_history():
        if not await controller.clear_history():
            raise HTTPException(status_code=500, detail="Could not clear history")
        return {"success": True}

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        WebSocket endpoint shared by the player and the browser.

        Carries JSON text frames only:
        - reader.* requests and page.loaded events from the browser
        - page.response answers to page.request messages
        - chunk.ready, navigation.outcome and other session events to the player

        Only one connection is attached at a time; a new one replaces it.
        """
        await websocket.accept()
        try:
            await controller.handle_websocket_connection(websocket)
        except Exception as e:
            logger.error(f"Error handling websocket connection: {e}", exc_info=True)

    return app


app = create_app()
