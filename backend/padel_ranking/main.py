import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from padel_ranking.database import init_db
from padel_ranking.routes import rankings, rounds, runtime, schedule, standings

logger = logging.getLogger(__name__)

APP_NAME = "Padel Ranking Engine API"

app = FastAPI(title=APP_NAME)

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(rankings.router, prefix="/api", tags=["rankings"])
# Result recording: points, bracket advancement, reactive scheduling
app.include_router(runtime.router, prefix="/api", tags=["runtime"])
app.include_router(schedule.router, prefix="/api", tags=["schedule"])
app.include_router(rounds.router, prefix="/api", tags=["rounds"])
app.include_router(standings.router, prefix="/api", tags=["standings"])


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("%s started with %d routes", APP_NAME, len(app.routes))


@app.get("/api/health")
def health_check():
    return {"app_name": APP_NAME, "status": "healthy"}
