"""
Speaker geolocation.
Turns the coordinates of a speaker's address into a French commune name.
"""

import logging
from dataclasses import dataclass
from typing import Callable

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import GeoConfig

logger = logging.getLogger(__name__)

UNKNOWN_ZIP_CODE = "00000"


@dataclass
class Location:
    city: str
    zip_code: str

    def is_in_gironde(self) -> bool:
        return self.zip_code[:2] == "33"


Locator = Callable[[float, float, str], Location]


def fallback_location(address: str) -> Location:
    """Location used when the coordinates cannot be resolved."""
    return Location(city=f"🗺️ {address}", zip_code=UNKNOWN_ZIP_CODE)


class GeoLocator:
    """Best-effort lookup against the French communes API.

    Lookups never fail: any error gives the fallback location.
    """

    def __init__(self, config: GeoConfig):
        self.config = config

        self.session = requests.Session()
        retries = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
        )
        self.session.mount("https://", HTTPAdapter(max_retries=retries))

    def __call__(self, lat: float, lon: float, address: str) -> Location:
        return self.find_location(lat, lon, address)

    def find_location(self, lat: float, lon: float, address: str) -> Location:
        if not self.config.enabled:
            return fallback_location(address)

        try:
            response = self.session.get(
                self.config.api_url,
                params={
                    "lat": f"{lat:f}",
                    "lon": f"{lon:f}",
                    "fields": "codesPostaux",
                    "format": "json",
                    "geometry": "centre",
                },
                timeout=10,
            )
            if response.status_code != 200:
                logger.warning(f"No location found for coordinates {lat:f},{lon:f}")
                return fallback_location(address)
            communes = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Location lookup failed for coordinates {lat:f},{lon:f}: {e}")
            return fallback_location(address)

        if not isinstance(communes, list) or not communes:
            logger.warning(f"No commune found for coordinates {lat:f},{lon:f}")
            return fallback_location(address)

        commune = communes[0]
        return Location(
            city=commune.get("nom", address),
            zip_code=commune.get("code", UNKNOWN_ZIP_CODE),
        )
