# agribiz/main.py
# -----------------------------------------------------------------------------
# FastAPI entrypoint
# - logging and tables are set up on startup
# -----------------------------------------------------------------------------
from fastapi import FastAPI
from loguru import logger

from agribiz.core.config import settings
from agribiz.core.logging import setup_logging
from agribiz.db.session import create_tables
from agribiz.routers import analysis, feasibility, forecast, optimization, recommendations

app = FastAPI(title=settings.APP_NAME)


@app.on_event("startup")
async def on_startup():
    setup_logging()
    await create_tables()
    logger.info("{} started (env={})", settings.APP_NAME, settings.ENV)


app.include_router(feasibility.router)
app.include_router(forecast.router)
app.include_router(optimization.router)
app.include_router(analysis.router)
app.include_router(recommendations.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
