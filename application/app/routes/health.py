from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.connections.database import execute_raw_sql_readonly

from app.config.settings import SFAConfigs
configs = SFAConfigs()

from app.logging.utils import get_app_logger
logger = get_app_logger("app.health")

router = APIRouter()

@router.get("/health")
async def health_check(request: Request):

    details = {
        "status": "healthy",
        "version": configs.APP_VERSION,
        "service": configs.APP_NAME,
        "database": "up",
    }
    try:
        execute_raw_sql_readonly("SELECT 1")
    except Exception as e:
        logger.error(f"health_check_database_error | error={e}", exc_info=True)
        details["status"] = "unhealthy"
        details["database"] = "down"
        return JSONResponse(status_code=503, content=details)
    return JSONResponse(content=details)
