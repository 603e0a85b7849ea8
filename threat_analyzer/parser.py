"""Threat Analyzer - Log line parsing"""

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from .models import LogEvent
from .patterns import (
    COUNTRY_PATTERN, EXPLICIT_SEVERITY_PATTERN, HTTP_REQUEST_PATTERN, HTTP_STATUS_PATTERN,
    IP_PATTERN, LOG_FORMATS, NO_IP, SEVERITY_KEYWORDS, SQLI_REQUEST_PATTERN, SSH_OUTCOMES,
    SSH_USER_PATTERNS, THREAT_SEVERITIES, TIMESTAMP_PATTERNS, UNKNOWN_COUNTRY,
    WEB_ACCESS_PATTERN, XSS_REQUEST_PATTERN,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso_timestamp(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def extract_ip(line: str) -> str:
    match = IP_PATTERN.search(line)
    return match.group(1) if match else NO_IP


def extract_timestamp(line: str, clock: Optional[Clock] = None) -> str:
    """
    First recognizable timestamp in the line.

    Lines without one are stamped with the clock's current instant, so pass a
    fixed clock wherever re-parsing must be reproducible.
    """
    for pattern in TIMESTAMP_PATTERNS:
        match = pattern.search(line)
        if match:
            return match.group(1)
    return _iso_timestamp((clock or utc_now)())


def extract_country(line: str) -> str:
    match = COUNTRY_PATTERN.search(line)
    return match.group(1) if match else UNKNOWN_COUNTRY


def detect_severity(line: str) -> str:
    upper = line.upper()

    explicit = EXPLICIT_SEVERITY_PATTERN.search(upper)
    if explicit:
        return explicit.group(1)

    for severity, keywords in SEVERITY_KEYWORDS:
        if any(keyword in upper for keyword in keywords):
            return severity
    return 'INFO'


def parse_generic_log(line: str, clock: Optional[Clock] = None) -> LogEvent:
    severity = detect_severity(line)
    return LogEvent(
        timestamp=extract_timestamp(line, clock),
        severity=severity,
        ip=extract_ip(line),
        country=extract_country(line),
        source_format='generic',
        is_threat=severity in THREAT_SEVERITIES,
        raw=line,
    )


def parse_ssh_log(line: str, clock: Optional[Clock] = None) -> LogEvent:
    lowered = line.lower()
    severity, is_threat = 'INFO', False
    for marker, outcome, threat in SSH_OUTCOMES:
        if marker in lowered:
            severity, is_threat = outcome, threat
            break

    username = 'unknown'
    for pattern in SSH_USER_PATTERNS:
        user_match = pattern.search(line)
        if user_match:
            username = user_match.group(1)
            break

    return LogEvent(
        timestamp=extract_timestamp(line, clock),
        severity=severity,
        ip=extract_ip(line),
        country=UNKNOWN_COUNTRY,
        source_format='ssh',
        is_threat=is_threat,
        raw=line,
        username=username,
    )


# Every matching rule is applied in order, so a later match replaces the
# severity of an earlier one even when it is less severe.
WEB_SEVERITY_RULES = [
    (lambda status, path: 400 <= status < 500, 'MEDIUM'),
    (lambda status, path: status >= 500, 'HIGH'),
    (lambda status, path: SQLI_REQUEST_PATTERN.search(path) is not None, 'CRITICAL'),
    (lambda status, path: XSS_REQUEST_PATTERN.search(path) is not None, 'HIGH'),
    (lambda status, path: '..' in path, 'HIGH'),
]


def classify_web_request(status: int, path: str):
    """Return (severity, is_threat) for an HTTP status and request path."""
    severity, is_threat = 'INFO', False
    for applies, outcome in WEB_SEVERITY_RULES:
        if applies(status, path):
            severity, is_threat = outcome, True
    return severity, is_threat


def parse_web_access_log(line: str, clock: Optional[Clock] = None,
                         source_format: str = 'apache') -> LogEvent:
    status_match = HTTP_STATUS_PATTERN.search(line)
    status = int(status_match.group(1)) if status_match else 0

    request_match = HTTP_REQUEST_PATTERN.search(line)
    method = request_match.group(1) if request_match else 'UNKNOWN'
    path = request_match.group(2) if request_match else '/'

    severity, is_threat = classify_web_request(status, path)
    return LogEvent(
        timestamp=extract_timestamp(line, clock),
        severity=severity,
        ip=extract_ip(line),
        country=UNKNOWN_COUNTRY,
        source_format=source_format,
        is_threat=is_threat,
        raw=line,
        status=status,
        method=method,
        path=path,
    )


def parse_nginx_log(line: str, clock: Optional[Clock] = None) -> LogEvent:
    return parse_web_access_log(line, clock, source_format='nginx')


def detect_format(line: str) -> str:
    if 'sshd' in line:
        return 'ssh'
    if WEB_ACCESS_PATTERN.match(line):
        return 'apache'
    return 'generic'


_PARSERS = {
    'generic': parse_generic_log,
    'ssh': parse_ssh_log,
    'apache': parse_web_access_log,
    'nginx': parse_nginx_log,
}


def parse_line(raw: Optional[str], log_format: str = 'auto',
               clock: Optional[Clock] = None) -> Optional[LogEvent]:
    """Parse one raw line, or return None for a blank one."""
    if not raw or not raw.strip():
        return None
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unknown log format: {log_format}")

    line = raw.strip()
    format_to_use = log_format if log_format != 'auto' else detect_format(line)
    return _PARSERS[format_to_use](line, clock)


def parse_lines(lines: Optional[Iterable[str]], log_format: str = 'auto',
                clock: Optional[Clock] = None) -> List[LogEvent]:
    if lines is None or isinstance(lines, str):
        return []

    events = []
    for line in lines:
        event = parse_line(line, log_format, clock)
        if event:
            events.append(event)

    logger.debug("Parsed %d events", len(events))
    return events
