from fastapi import APIRouter, HTTPException, Query, Request

from ...schemas.weather import WeatherResult

router = APIRouter()


@router.get("/", response_model=WeatherResult, summary="Current, hourly and daily forecast")
def get_forecast(
    request: Request,
    latitude: str = Query(...),
    longitude: str = Query(...),
    unit: str = Query("c"),
    language: str = Query("en", alias="accept-language"),
    source: str = Query(...),
) -> WeatherResult:
    """Forecast from one provider (``om``/``openmeteo`` or ``qweather``).

    Upstream failures yield an all-zero result rather than an error status.
    """
    service = request.app.state.forecast_service
    try:
        return service.fetch_forecast(source, latitude, longitude, language, unit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
