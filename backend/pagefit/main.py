import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

load_dotenv()

from .config import get_config_summary, validate_config
from .core.config import settings
from .metrics import get_metrics
from .pdf_api import router as pdf_router

# Logging setup
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Pagefit API",
    description="HTML document → single-page A4 PDF",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Pagefit-Scale", "X-Pagefit-Strategy"],
)

app.include_router(pdf_router)


@app.on_event("startup")
def startup_event():
    # Fail fast: refuse traffic with inconsistent page geometry
    validate_config()
    logger.info(f"{settings.app_name} started (env={settings.env}, strategy={settings.default_strategy})")


@app.get("/health")
def health():
    return {"status": "ok", **get_config_summary()}


@app.get("/metrics")
def metrics():
    return Response(
        content=get_metrics().generate_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
