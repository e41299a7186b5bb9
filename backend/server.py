from fastapi import FastAPI, APIRouter, HTTPException, Query
from fastapi.responses import PlainTextResponse
from starlette.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorClient
import asyncio
import json
import logging
from typing import Any, Dict, Optional

from ascension_engine import AscensionEngine, EngineConfig, EngineSnapshot, UnknownDomainError
from config import MONGO_URL, DB_NAME, SNAPSHOT_COLLECTION, SNAPSHOT_KEY, CORS_ORIGINS
from models.engine_api import (
    ExecutionResponse,
    DailyEvaluationResponse,
    DashboardResponse,
    GuidedSessionResponse,
    DietGuideRequest,
    MentorRequest,
    MentorResponse,
)
from store import MongoSnapshotStore


# MongoDB connection
client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]
store = MongoSnapshotStore(db[SNAPSHOT_COLLECTION], SNAPSHOT_KEY)

# Create the main app without a prefix
app = FastAPI()

# Create a router with the /api prefix
api_router = APIRouter(prefix="/api")

# Single engine per process, loaded from Mongo on first use
engine: Optional[AscensionEngine] = None

# Serializes engine loading and every trigger through its Mongo save
engine_lock = asyncio.Lock()


async def load_engine_unlocked() -> AscensionEngine:
    global engine
    if engine is None:
        try:
            snapshot = await store.load()
        except Exception as e:
            logger.error(f"Failed to load engine snapshot: {e}")
            raise HTTPException(status_code=500, detail="Error loading engine state")
        engine = AscensionEngine(config=EngineConfig.from_env(), snapshot=snapshot)
        logger.info(f"Engine ready at day {engine.core.current_day}")
    return engine


async def get_engine() -> AscensionEngine:
    async with engine_lock:
        return await load_engine_unlocked()


async def persist(current: AscensionEngine, before: EngineSnapshot) -> None:
    """Save the engine state; on failure restore `before` so nothing half-applies."""
    try:
        await store.save(current.snapshot().to_dict())
    except Exception as e:
        logger.error(f"Failed to save engine snapshot: {e}")
        current.restore(before)
        raise HTTPException(status_code=500, detail="Error saving engine state")


@api_router.get("/")
async def root():
    return {"message": "Ascension Engine API"}


@api_router.get("/health")
async def health_check():
    return {"status": "healthy", "engine_loaded": engine is not None}


@api_router.post("/executions/{domain}", response_model=ExecutionResponse)
async def submit_execution(domain: str, payload: Dict[str, Any]):
    """Validate and apply one domain execution. Rejections return accepted=false."""
    async with engine_lock:
        current = await load_engine_unlocked()
        before = current.snapshot()
        try:
            result = current.submit_execution(domain, payload)
        except UnknownDomainError:
            raise HTTPException(status_code=404, detail=f"Unknown domain: {domain}")

        await persist(current, before)
        return result.to_dict()


@api_router.post("/evaluations/daily", response_model=DailyEvaluationResponse)
async def daily_evaluation():
    async with engine_lock:
        current = await load_engine_unlocked()
        before = current.snapshot()
        transition = current.daily_evaluation()
        await persist(current, before)
        return transition.to_dict()


@api_router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard():
    current = await get_engine()
    return current.get_dashboard_snapshot().to_dict()


@api_router.get("/guided-session", response_model=GuidedSessionResponse)
async def get_guided_session():
    current = await get_engine()
    training = current.modules.training
    return {
        "day_type": training.day_type.value,
        "directives": current.get_guided_session(),
        "deload_recommended": training.deload_recommended,
    }


@api_router.post("/diet-guide")
async def get_diet_guide(consumed: DietGuideRequest):
    current = await get_engine()
    return current.get_diet_guide(consumed.model_dump())


@api_router.post("/mentor", response_model=MentorResponse)
async def get_mentor_directive(request: MentorRequest):
    current = await get_engine()
    context = request.model_dump(exclude_none=True)
    directive = current.mentor_directive(context)
    return {
        "rule": directive.rule.value,
        "message": directive.message,
        "domain": directive.domain.value if directive.domain else None,
    }


@api_router.get("/reports/weekly")
async def export_weekly_report(
    format: str = Query("json", description="Report format: json or text")
):
    current = await get_engine()
    try:
        report = current.export_weekly_report(format)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if format.lower() == "json":
        return json.loads(report)
    return PlainTextResponse(report)


@api_router.get("/strict-mode")
async def get_strict_mode():
    current = await get_engine()
    view = current.strict_mode_view()
    return {"enabled": view is not None, "view": view}


# Include the router in the main app
app.include_router(api_router)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def load_engine():
    await get_engine()


@app.on_event("shutdown")
async def shutdown_db_client():
    client.close()
