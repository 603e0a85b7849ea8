"""Threat Analyzer package"""

from .patterns import VERSION, DEFAULT_GEO_LOCATIONS, SAMPLE_LOGS
from .config import DetectionConfig
from .models import LogEvent, Alert
from .parser import parse_line, parse_lines
from .detectors import generate_alerts
from .analyzer import LogAnalyzer, analyze
from .geo import GeoTableError, load_geo_table
from .output import print_report

__all__ = [
    'VERSION', 'DEFAULT_GEO_LOCATIONS', 'SAMPLE_LOGS', 'DetectionConfig', 'LogEvent', 'Alert',
    'parse_line', 'parse_lines', 'generate_alerts', 'LogAnalyzer', 'analyze',
    'GeoTableError', 'load_geo_table', 'print_report',
]
