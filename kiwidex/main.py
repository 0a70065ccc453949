import logging
import os

from fastapi import FastAPI

from kiwidex.api.routes import router
from kiwidex.runtime import SessionRegistry

app = FastAPI(title="kiwidex", version="0.1.0")
app.include_router(router)
app.state.registry = SessionRegistry()

# Configure logging
logging.basicConfig(level=os.environ.get("KIWIDEX_LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "kiwidex", "version": "0.1.0"}
