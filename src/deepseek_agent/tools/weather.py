"""AMap weather adapter.

A forecast is a two-step lookup: the place name is resolved to an
administrative code (``adcode``) through the district API, and the code is
then used to fetch the multi-day forecast.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ValidationError

from deepseek_agent.errors import WeatherError

logger = logging.getLogger(__name__)

AMAP_BASE_URL = "https://restapi.amap.com/v3"


class District(BaseModel):
    adcode: str
    name: str


class DistrictResponse(BaseModel):
    status: str
    districts: list[District] = []


class Cast(BaseModel):
    """One day of a forecast."""

    date: str
    week: str
    dayweather: str
    nightweather: str
    daytemp: str
    nighttemp: str
    daywind: str
    nightwind: str
    daypower: str
    nightpower: str
    daytemp_float: str = ""
    nighttemp_float: str = ""


class Forecast(BaseModel):
    city: str
    adcode: str
    province: str
    reporttime: str
    casts: list[Cast] = []


class WeatherForecast(BaseModel):
    """The forecast response as returned by AMap's ``weatherInfo`` endpoint."""

    status: str
    count: str = "0"
    info: str = ""
    infocode: str = ""
    forecasts: list[Forecast] = []


async def get_weather(
    location: str,
    api_key: str,
    client: httpx.AsyncClient | None = None,
) -> WeatherForecast:
    """Fetch the forecast for *location*.

    Raises:
        WeatherError: the place is unknown, AMap reported a failure status,
            or the HTTP exchange failed.
    """
    if client is None:
        async with httpx.AsyncClient() as owned:
            return await _lookup(owned, location, api_key)
    return await _lookup(client, location, api_key)


async def _lookup(client: httpx.AsyncClient, location: str, api_key: str) -> WeatherForecast:
    try:
        response = await client.get(
            f"{AMAP_BASE_URL}/config/district",
            params={"key": api_key, "keywords": location, "subdistrict": 0, "extensions": "all"},
        )
        response.raise_for_status()
        districts = DistrictResponse.model_validate(response.json())

        if districts.status != "1" or not districts.districts:
            raise WeatherError(f"district lookup failed for {location!r}")
        adcode = districts.districts[0].adcode
        logger.debug("Resolved %s to adcode %s", location, adcode)

        response = await client.get(
            f"{AMAP_BASE_URL}/weather/weatherInfo",
            params={"key": api_key, "city": adcode, "extensions": "all", "output": "json"},
        )
        response.raise_for_status()
        forecast = WeatherForecast.model_validate(response.json())
    except httpx.HTTPError as exc:
        raise WeatherError(str(exc)) from exc
    except (ValueError, ValidationError) as exc:
        raise WeatherError(f"malformed response: {exc}") from exc

    if forecast.status != "1":
        raise WeatherError(f"forecast lookup failed: {forecast.info or 'unknown error'}")
    return forecast
