"""routers/health.py - Liveness routes."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
def home():
    return "AmyBD proxy is running"


@router.get("/health")
def health():
    return {"status": "ok"}
