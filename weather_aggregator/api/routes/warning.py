from fastapi import APIRouter, HTTPException, Query, Request

import structlog

from ...errors import AuthError, DecodeError, NetworkError
from ...schemas.qweather import WarningResponse

router = APIRouter()
logger = structlog.get_logger()


@router.get("/", summary="Active weather warnings (QWeather)")
def get_warnings(
    request: Request,
    location: str = Query("", description="lon,lat"),
    lang: str = Query("zh"),
):
    service = request.app.state.forecast_service
    try:
        warnings: WarningResponse = service.fetch_warnings(location, lang)
    except DecodeError as e:
        logger.error("warning_decode_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to parse QWeather response")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthError as e:
        logger.error("warning_auth_failed", error=str(e))
        raise HTTPException(status_code=500, detail="JWT generation failed")
    except NetworkError as e:
        logger.error("warning_upstream_failed", error=str(e))
        raise HTTPException(status_code=502, detail="QWeather request failed")
    return warnings.model_dump(by_alias=True)
