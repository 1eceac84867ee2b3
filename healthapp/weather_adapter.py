# /healthapp/weather_adapter.py
# Clima actual desde OpenWeatherMap. Dependencia externa: cada falla
# conocida se expone como WeatherError con un 'kind' estable.

import logging
from dataclasses import dataclass
from typing import Optional

import requests

log = logging.getLogger(__name__)

NO_API_KEY = "NO_API_KEY"
CITY_NOT_FOUND = "CITY_NOT_FOUND"
NETWORK_ERROR = "NETWORK_ERROR"
API_ERROR = "API_ERROR"
BAD_JSON = "BAD_JSON"


class WeatherError(Exception):
    def __init__(self, kind: str, detail: str = ""):
        super().__init__(detail or kind)
        self.kind = kind


@dataclass(frozen=True)
class WeatherReport:
    city_name: Optional[str]
    country: Optional[str]
    temp: Optional[float]
    feels_like: Optional[float]
    humidity: Optional[float]
    wind_speed: Optional[float]
    description: Optional[str]


def _normalize(data: dict) -> WeatherReport:
    """Sólo los campos que muestra la vista; los que falten quedan en None."""
    main = data.get("main") or {}
    wind = data.get("wind") or {}
    weather = data.get("weather") or [{}]
    return WeatherReport(
        city_name=data.get("name"),
        country=(data.get("sys") or {}).get("country"),
        temp=main.get("temp"),
        feels_like=main.get("feels_like"),
        humidity=main.get("humidity"),
        wind_speed=wind.get("speed"),
        description=(weather[0] or {}).get("description"),
    )


def fetch_weather(city: str, api_key: Optional[str], base_url: str, timeout: float = 5) -> WeatherReport:
    if not api_key:
        raise WeatherError(NO_API_KEY, "OPENWEATHER_API_KEY missing")

    log.debug("Consultando clima para %r", city)
    try:
        resp = requests.get(base_url, params={"q": city, "appid": api_key, "units": "metric"},
                            timeout=timeout)
    except requests.RequestException as e:
        raise WeatherError(NETWORK_ERROR, f"Network error calling weather API: {e}") from e

    # OpenWeatherMap responde 404 para ciudades desconocidas
    if resp.status_code == 404:
        raise WeatherError(CITY_NOT_FOUND, "City not found")
    if not resp.ok:
        raise WeatherError(API_ERROR, f"Weather API error (status {resp.status_code})")

    try:
        data = resp.json()
    except ValueError as e:
        raise WeatherError(BAD_JSON, "Failed to parse weather API response") from e
    if not isinstance(data, dict):
        raise WeatherError(BAD_JSON, "Unexpected weather API payload")

    return _normalize(data)


def friendly_message(err: WeatherError, city: str) -> str:
    if err.kind == NO_API_KEY:
        return ("Weather is not configured (OPENWEATHER_API_KEY is missing). "
                "Please add an API key in .env to enable this feature.")
    if err.kind == CITY_NOT_FOUND:
        return f'No weather data found for "{city}". Please check the spelling and try again.'
    if err.kind == NETWORK_ERROR:
        return "Cannot reach the weather service. Please check your connection and try again."
    return "Unable to load weather right now. Please try again."
