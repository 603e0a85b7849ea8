"""Threat Analyzer - Attack pattern detectors"""

from typing import Callable, Dict, List, Optional, Sequence

from .config import DEFAULT_CONFIG, DetectionConfig
from .models import Alert, LogEvent
from .patterns import (
    ALERT_SEVERITY_RANK, DEFAULT_ALERT_RANK, NO_IP, SQLI_KEYWORDS, SQLI_PATH_PATTERN,
)


def _raw_contains(*needles: str) -> Callable[[LogEvent], bool]:
    def check(event: LogEvent) -> bool:
        line = event.raw.lower()
        return any(needle in line for needle in needles)
    return check


def _path_matches(pattern) -> Callable[[LogEvent], bool]:
    return lambda event: bool(event.path) and pattern.search(event.path) is not None


def _path_contains(needle: str) -> Callable[[LogEvent], bool]:
    return lambda event: bool(event.path) and needle in event.path


# Per-event detectors: alert type -> severity, message template, predicates.
# An event raises one alert when any of its predicates holds.
EVENT_RULES = {
    'sql_injection': {
        'severity': 'critical',
        'message': "SQL injection attempt from {ip}",
        'predicates': [
            _raw_contains(*SQLI_KEYWORDS),
            _path_matches(SQLI_PATH_PATTERN),
        ],
    },
    'port_scan': {
        'severity': 'high',
        'message': "Port scanning detected from {ip}",
        'predicates': [
            _raw_contains('port scan'),
        ],
    },
    'xss': {
        'severity': 'high',
        'message': "XSS attempt from {ip}",
        'predicates': [
            _raw_contains('xss', '<script'),
            _path_contains('<script'),
        ],
    },
    'directory_traversal': {
        'severity': 'high',
        'message': "Directory traversal attempt from {ip}",
        'predicates': [
            lambda event: '..' in event.raw,
            _path_contains('..'),
        ],
    },
}


def _scan(events: Sequence[LogEvent], alert_type: str) -> List[Alert]:
    rule = EVENT_RULES[alert_type]
    alerts = []
    for event in events:
        if any(predicate(event) for predicate in rule['predicates']):
            alerts.append(Alert(
                type=alert_type,
                severity=rule['severity'],
                ip=event.ip,
                message=rule['message'].format(ip=event.ip),
                timestamp=event.timestamp,
                country=event.country,
            ))
    return alerts


def _group_by_ip(events: Sequence[LogEvent]) -> Dict[str, List[LogEvent]]:
    grouped: Dict[str, List[LogEvent]] = {}
    for event in events:
        if event.ip != NO_IP:
            grouped.setdefault(event.ip, []).append(event)
    return grouped


def detect_brute_force(events: Sequence[LogEvent],
                       config: DetectionConfig = DEFAULT_CONFIG) -> List[Alert]:
    """One alert per IP with enough FAILED events."""
    failures = _group_by_ip([e for e in events if e.severity == 'FAILED'])

    alerts = []
    for ip, attempts in failures.items():
        if len(attempts) < config.brute_force_threshold:
            continue
        alerts.append(Alert(
            type='brute_force',
            severity='critical',
            ip=ip,
            message=f"Brute force attack detected from {ip} - {len(attempts)} failed attempts",
            timestamp=attempts[-1].timestamp,
            country=attempts[0].country,
            count=len(attempts),
        ))
    return alerts


def detect_sql_injection(events: Sequence[LogEvent]) -> List[Alert]:
    return _scan(events, 'sql_injection')


def detect_port_scan(events: Sequence[LogEvent]) -> List[Alert]:
    return _scan(events, 'port_scan')


def detect_xss(events: Sequence[LogEvent]) -> List[Alert]:
    return _scan(events, 'xss')


def detect_directory_traversal(events: Sequence[LogEvent]) -> List[Alert]:
    return _scan(events, 'directory_traversal')


def detect_ddos(events: Sequence[LogEvent],
                config: DetectionConfig = DEFAULT_CONFIG) -> List[Alert]:
    """One alert per IP whose share of the batch is excessive."""
    threshold = config.ddos_threshold(len(events))

    alerts = []
    for ip, requests in _group_by_ip(events).items():
        if len(requests) <= threshold:
            continue
        alerts.append(Alert(
            type='ddos',
            severity='high',
            ip=ip,
            message=f"Possible DDoS from {ip} - {len(requests)} requests",
            timestamp=requests[-1].timestamp,
            country=requests[0].country,
            count=len(requests),
        ))
    return alerts


def _general_message(raw: str) -> str:
    parts = raw.split('] ')
    if len(parts) > 1 and parts[1]:
        return parts[1]
    return raw


def alert_rank(alert: Alert) -> int:
    return ALERT_SEVERITY_RANK.get(alert.severity, DEFAULT_ALERT_RANK)


def generate_alerts(events: Sequence[LogEvent],
                    config: Optional[DetectionConfig] = None) -> List[Alert]:
    """Run every detector, promote leftover critical/high events, order by severity."""
    config = config or DEFAULT_CONFIG

    alerts = [
        *detect_brute_force(events, config),
        *detect_sql_injection(events),
        *detect_port_scan(events),
        *detect_xss(events),
        *detect_directory_traversal(events),
        *detect_ddos(events, config),
    ]

    seen = {(alert.ip, alert.timestamp) for alert in alerts}
    for event in events:
        if event.severity not in ('CRITICAL', 'HIGH') or not event.is_threat:
            continue
        if (event.ip, event.timestamp) in seen:
            continue
        seen.add((event.ip, event.timestamp))
        alerts.append(Alert(
            type='general',
            severity=event.severity.lower(),
            ip=event.ip,
            message=_general_message(event.raw),
            timestamp=event.timestamp,
            country=event.country,
        ))

    return sorted(alerts, key=alert_rank)
