"""
FastAPI application exposing the Comax tools over HTTP
"""
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI

from app.comax.service import ComaxService
from app.comax_client.config import get_comax_config

from .routes_comax import register_comax_routes

# Load environment variables
load_dotenv()

app = FastAPI(title="Comax Payment Link")

_service: Optional[ComaxService] = None


def get_service() -> ComaxService:
    """Process-wide service; built at startup, so missing credentials abort the server."""
    global _service
    if _service is None:
        _service = ComaxService(get_comax_config())
    return _service


@app.get("/health")
def health():
    return {"status": "ok"}


@app.on_event("startup")
def startup_event():
    get_service()


@app.on_event("shutdown")
def shutdown_event():
    if _service is not None:
        _service.close()


register_comax_routes(app, lambda: get_service())
