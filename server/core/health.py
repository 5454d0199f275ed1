"""Health check utilities for the /health endpoint."""
import time
from datetime import datetime
from typing import Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from core.container import Container

# Module-level startup time tracking
_startup_time: float = 0.0


def set_startup_time() -> None:
    """Record the application startup time. Call once during lifespan startup."""
    global _startup_time
    _startup_time = time.time()


def get_uptime() -> float:
    """Get uptime in seconds since startup."""
    return time.time() - _startup_time if _startup_time else 0.0


def get_health_status(container: "Container") -> Dict[str, Any]:
    """Status, uptime and in-process state sizes."""
    settings = container.settings()
    return {
        "status": "OK",
        "uptime_seconds": round(get_uptime(), 1),
        "environment": "development" if settings.debug else "production",
        "cache": {
            "entries": len(container.cache()),
            "inflight_fetches": container.cached_fetcher().inflight_count(),
            "sweeper_running": container.cleanup().running,
        },
        "users": container.user_store().user_count(),
        "open_sessions": len(container.session_store()),
        "upstream_configured": bool(settings.rawg_api_key),
        "timestamp": datetime.now().isoformat(),
    }
