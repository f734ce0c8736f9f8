import argparse
import logging
import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db, resolve_db_path
from config import load_config
from routes import texts, review  # Import routers

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    config = load_config()  # Ensures config exists
    configure_logging(config["logging"]["level"])
    init_db()
    yield


app = FastAPI(
    title="LineByLine",
    description="Line-by-line spaced repetition for memorizing texts",
    lifespan=lifespan,
)

# Include routers
app.include_router(texts.router, prefix="/texts", tags=["texts"])
app.include_router(review.router, prefix="/review", tags=["review"])


@app.get("/")
async def home():
    return {"app": "LineByLine", "texts": "/texts", "review": "/review"}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="LineByLine App")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    args = parser.parse_args()
    config = load_config()  # Ensures config is copied if missing
    configure_logging(config["logging"]["level"])
    if args.init:
        init_db()
        logger.info("DB initialized at %s", resolve_db_path())
        sys.exit(0)
    uvicorn.run(
        "main:app",
        host=config["server"]["host"],
        port=config["server"]["port"],
        reload=args.dev,
        log_level=config["logging"]["level"].lower(),
    )
