"""Threat Analyzer - Country coordinate tables"""

import json
from pathlib import Path
from typing import Dict


class GeoTableError(ValueError):
    """Geo table file is not a country -> {lat, lng} mapping"""


def load_geo_table(path) -> Dict[str, Dict]:
    """
    Load a JSON object mapping country name to at least lat/lng.

    Extra keys per country (e.g. "friendly") are kept and end up on the
    matching attack map entries.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Geo table not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise GeoTableError(f"Invalid JSON in geo table {path}: {e}") from e

    if not isinstance(data, dict):
        raise GeoTableError(f"Geo table {path} must be a JSON object")

    table = {}
    for country, coords in data.items():
        if not isinstance(coords, dict) or 'lat' not in coords or 'lng' not in coords:
            raise GeoTableError(f"Geo table entry for {country!r} needs lat and lng")
        table[country] = dict(coords)
    return table
