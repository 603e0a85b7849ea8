"""Threat Analyzer - Core analysis engine"""

import logging
import math
from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .config import DEFAULT_CONFIG, DetectionConfig
from .detectors import generate_alerts
from .models import LogEvent
from .parser import Clock, parse_lines
from .patterns import (
    DEFAULT_GEO_LOCATIONS, MAX_EVENT_POINTS, NO_IP, SEVERITY_POINTS, UNKNOWN_COUNTRY,
)

logger = logging.getLogger(__name__)


def calculate_threat_score(events: Sequence[LogEvent]) -> int:
    """Batch severity on a 0-100 scale."""
    if not events:
        return 0

    score = sum(SEVERITY_POINTS.get(event.severity, 0) for event in events)
    normalized = min(100, (score / (len(events) * MAX_EVENT_POINTS)) * 100)
    # Half-up, not Python's round-half-even
    return int(math.floor(normalized + 0.5))


def empty_stats() -> Dict:
    return {
        'totalEvents': 0,
        'criticalAlerts': 0,
        'failedLogins': 0,
        'blockedIPs': 0,
        'activeThreats': 0,
        'uniqueIPs': 0,
        'countries': {},
    }


def aggregate_stats(events: Sequence[LogEvent]) -> Dict:
    severities = Counter(event.severity for event in events)
    unique_ips = set()
    threat_ips = set()
    countries: Counter = Counter()

    for event in events:
        if event.ip != NO_IP:
            unique_ips.add(event.ip)
            if event.is_threat:
                threat_ips.add(event.ip)
        if event.country and event.country != UNKNOWN_COUNTRY:
            countries[event.country] += 1

    stats = empty_stats()
    stats.update({
        'totalEvents': len(events),
        'criticalAlerts': severities['CRITICAL'],
        'failedLogins': severities['FAILED'],
        'blockedIPs': len(threat_ips),
        'activeThreats': severities['CRITICAL'] + severities['HIGH'],
        'uniqueIPs': len(unique_ips),
        'countries': dict(countries),
    })
    return stats


def build_attack_map(events: Sequence[LogEvent], geo_table: Mapping[str, Mapping]) -> List[Dict]:
    """Threat counts per country joined onto the geo table's coordinates."""
    attacks = Counter(
        event.country for event in events
        if event.is_threat and event.country and event.country != UNKNOWN_COUNTRY
    )

    attack_map = []
    for country, coords in geo_table.items():
        if attacks[country] > 0:
            attack_map.append({'country': country, **coords, 'attacks': attacks[country]})
    return attack_map


def get_top_attacking_ips(events: Sequence[LogEvent], limit: int = 5) -> List[Dict]:
    by_ip: Dict[str, Dict] = {}
    for event in events:
        if not event.is_threat or event.ip == NO_IP:
            continue
        if event.ip not in by_ip:
            by_ip[event.ip] = {'ip': event.ip, 'count': 0, 'country': event.country}
        by_ip[event.ip]['count'] += 1

    ranked = sorted(by_ip.values(), key=lambda entry: entry['count'], reverse=True)
    return ranked[:limit]


def analyze(events: Sequence[LogEvent], geo_table: Mapping[str, Mapping],
            config: Optional[DetectionConfig] = None) -> Dict:
    """
    Full analysis of one batch of events.

    Returns a new dict with the keys threatLevel, stats, alerts, attackMap
    and topIPs. Nothing is cached between calls.
    """
    config = config or DEFAULT_CONFIG
    events = list(events or [])

    if not events:
        return {
            'threatLevel': 0,
            'stats': empty_stats(),
            'alerts': [],
            'attackMap': [],
            'topIPs': [],
        }

    alerts = generate_alerts(events, config)
    logger.debug("Generated %d alerts from %d events", len(alerts), len(events))

    return {
        'threatLevel': calculate_threat_score(events),
        'stats': aggregate_stats(events),
        'alerts': [alert.to_dict() for alert in alerts],
        'attackMap': build_attack_map(events, geo_table),
        'topIPs': get_top_attacking_ips(events, config.top_ips_limit),
    }


class LogAnalyzer:
    """Parses raw lines and analyzes them with one fixed configuration"""

    def __init__(self, config: Optional[DetectionConfig] = None, log_format: str = 'auto',
                 clock: Optional[Clock] = None):
        self.config = config or DEFAULT_CONFIG
        self.log_format = log_format
        self.clock = clock

    def parse(self, lines: Iterable[str]) -> List[LogEvent]:
        return parse_lines(lines, self.log_format, self.clock)

    def analyze_lines(self, lines: Iterable[str],
                      geo_table: Optional[Mapping[str, Mapping]] = None) -> Dict:
        events = self.parse(lines)
        if geo_table is None:
            geo_table = DEFAULT_GEO_LOCATIONS
        return analyze(events, geo_table, self.config)

    def analyze_file(self, filepath: str,
                     geo_table: Optional[Mapping[str, Mapping]] = None) -> Dict:
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Log file not found: {filepath}")

        with open(path, 'r', encoding='utf-8', errors='ignore') as f:
            lines = f.read().splitlines()

        logger.info("Read %d lines from %s", len(lines), path)
        return self.analyze_lines(lines, geo_table)
