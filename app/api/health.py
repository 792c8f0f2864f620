from fastapi import APIRouter, Depends
from datetime import datetime
from app.core.errors import ServiceUnavailableException
from app.services.presence_monitor import get_presence_monitor
from app.services.store import ChatStore, get_chat_store

router = APIRouter()


@router.get("/health")
async def health_check(store: ChatStore = Depends(get_chat_store)):
    """Application health check endpoint"""
    store_ok = await store.ping()
    monitor = get_presence_monitor()

    overall_status = "healthy" if store_ok else "unhealthy"

    return {
        "status": overall_status,
        "timestamp": datetime.utcnow(),
        "databases": {
            "mongodb": "connected" if store_ok else "disconnected"
        },
        "presence_monitor": "running" if monitor.running else "stopped",
        "service": "chat-room-backend"
    }


@router.get("/health/ready")
async def readiness_check(store: ChatStore = Depends(get_chat_store)):
    """Kubernetes readiness probe endpoint"""
    if not await store.ping():
        raise ServiceUnavailableException("Service not ready - database connections failed")

    return {"status": "ready"}


@router.get("/health/live")
async def liveness_check():
    """Kubernetes liveness probe endpoint"""
    return {"status": "alive", "timestamp": datetime.utcnow()}
