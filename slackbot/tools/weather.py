"""Current weather lookup tool."""

import httpx
from langchain_core.tools import BaseTool, tool
from pydantic import BaseModel, Field, ValidationError

from slackbot.services.status import StatusReporter
from slackbot.tools.base import ToolExecutionError, source_metadata
from slackbot.utils.logging import get_logger

logger = get_logger(__name__)

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
CURRENT_FIELDS = "temperature_2m,weathercode,relativehumidity_2m"


class WeatherInput(BaseModel):
    """Input schema for the weather tool."""

    latitude: float = Field(..., description="Latitude of the location", ge=-90, le=90)
    longitude: float = Field(..., description="Longitude of the location", ge=-180, le=180)
    city: str = Field(..., description="Name of the city, echoed back in the result", examples=["Berlin"])


class CurrentConditions(BaseModel):
    """The ``current`` block of an Open-Meteo forecast response."""

    temperature_2m: float
    weathercode: int
    relativehumidity_2m: float


class WeatherReport(BaseModel):
    """Weather tool result."""

    temperature: float
    weather_code: int
    humidity: float
    city: str


async def fetch_weather(http_client: httpx.AsyncClient, latitude: float, longitude: float, city: str) -> WeatherReport:
    """Fetch current conditions for a coordinate pair."""
    response = await http_client.get(
        FORECAST_URL,
        params={
            "latitude": latitude,
            "longitude": longitude,
            "current": CURRENT_FIELDS,
            "timezone": "auto",
        },
    )
    response.raise_for_status()

    try:
        current = CurrentConditions.model_validate(response.json()["current"])
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise ToolExecutionError(f"Malformed forecast response: {e}") from e

    return WeatherReport(
        temperature=current.temperature_2m,
        weather_code=current.weathercode,
        humidity=current.relativehumidity_2m,
        city=city,
    )


def create_weather_tool(http_client: httpx.AsyncClient, status: StatusReporter) -> BaseTool:
    @tool("get_weather", args_schema=WeatherInput)
    async def get_weather_handler(latitude: float, longitude: float, city: str) -> str:
        """Get the current weather at a location.

        Provide the coordinates of the place the user asked about and its
        city name. Returns the current temperature in degrees Celsius, the
        WMO weather code and the relative humidity in percent.
        """
        status.report(f"Fetching weather for {city}...")
        logger.info(f"Fetching weather for {city} ({latitude}, {longitude})")

        report = await fetch_weather(http_client, latitude, longitude, city)
        return report.model_dump_json()

    get_weather_handler.metadata = source_metadata("static")
    return get_weather_handler
