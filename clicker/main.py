from fastapi import FastAPI
import logging

from clicker.api.routes import router
from clicker.config import load_dotenv_if_present, settings_from_env
from clicker.startup import init_store_for_app

load_dotenv_if_present()

app = FastAPI(title="goblin-clicker", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=settings_from_env().log_level)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    store = init_store_for_app()
    logger.info("Progression engine ready (respawn delay %d ms)", store.engine.settings.respawn_delay_ms)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "goblin-clicker", "version": "0.1.0"}
