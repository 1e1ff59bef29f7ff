import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import init_db
from api.calculator import router as calculator_router
from api.commissions import router as commissions_router
from api.customers import router as customers_router
from api.dashboards import router as dashboards_router
from api.documents import router as documents_router
from api.feedback import router as feedback_router
from api.lead_scores import router as lead_scores_router
from api.milestones import router as milestones_router
from api.notifications import router as notifications_router
from api.orders import router as orders_router
from api.partners import router as partners_router
from api.public import router as public_router
from api.referrals import router as referrals_router
from api.vendors import router as vendors_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    description="PM Surya Ghar partner management API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(public_router)
app.include_router(calculator_router)
app.include_router(partners_router)
app.include_router(customers_router)
app.include_router(milestones_router)
app.include_router(lead_scores_router)
app.include_router(vendors_router)
app.include_router(commissions_router)
app.include_router(orders_router)
app.include_router(documents_router)
app.include_router(referrals_router)
app.include_router(feedback_router)
app.include_router(notifications_router)
app.include_router(dashboards_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
