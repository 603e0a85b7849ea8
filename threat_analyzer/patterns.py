"""Threat Analyzer - Constants and patterns"""

import re

VERSION = "1.0.0"

NO_IP = 'N/A'
UNKNOWN_COUNTRY = 'Unknown'

SEVERITIES = ('CRITICAL', 'HIGH', 'MEDIUM', 'LOW', 'FAILED', 'SUCCESS', 'INFO', 'WARNING', 'ERROR')
THREAT_SEVERITIES = frozenset({'CRITICAL', 'HIGH', 'FAILED'})

# Shared field extractors
IP_PATTERN = re.compile(r"(\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})")
COUNTRY_PATTERN = re.compile(r"\(([^)]+)\)")
EXPLICIT_SEVERITY_PATTERN = re.compile(r"\[(" + "|".join(SEVERITIES) + r")\]")

# Tried in order, first match wins
TIMESTAMP_PATTERNS = [
    re.compile(r"(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})"),
    re.compile(r"\[(\d{2}/\w{3}/\d{4}:\d{2}:\d{2}:\d{2})"),
    re.compile(r"(\w{3}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2})"),
]

# Generic parser keyword inference, first hit wins
SEVERITY_KEYWORDS = [
    ('CRITICAL', ('BRUTE FORCE', 'SQL INJECTION', 'MALWARE', 'EXPLOIT')),
    ('HIGH', ('PORT SCAN', 'XSS', 'DDOS', 'UNAUTHORIZED')),
    ('MEDIUM', ('SUSPICIOUS', 'UNUSUAL')),
    ('FAILED', ('FAILED', 'DENIED')),
    ('SUCCESS', ('SUCCESS', 'ACCEPTED')),
]

# SSH outcomes: (substring, severity, is_threat), first hit wins
SSH_OUTCOMES = [
    ('failed password', 'FAILED', True),
    ('accepted password', 'SUCCESS', False),
    ('invalid user', 'HIGH', True),
]
# "invalid user <name>" first, otherwise "for invalid user admin" yields "invalid"
SSH_USER_PATTERNS = [
    re.compile(r"invalid user\s+(\w+)", re.IGNORECASE),
    re.compile(r"(?:for|user)\s+(\w+)", re.IGNORECASE),
]

# Log format detection
WEB_ACCESS_PATTERN = re.compile(r'^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}.*"(GET|POST|PUT|DELETE)')
HTTP_STATUS_PATTERN = re.compile(r'"\s+(\d{3})\s+')
HTTP_REQUEST_PATTERN = re.compile(r'"(\w+)\s+([^\s]+)\s+HTTP')

LOG_FORMATS = ('auto', 'generic', 'ssh', 'apache', 'nginx')

# Web request path checks
SQLI_REQUEST_PATTERN = re.compile(r"union.*select|insert.*into|delete.*from", re.IGNORECASE)
XSS_REQUEST_PATTERN = re.compile(r"<script|javascript:", re.IGNORECASE)
SQLI_PATH_PATTERN = re.compile(r"union.*select|drop.*table", re.IGNORECASE)

SQLI_KEYWORDS = ('sql injection', 'union select', 'drop table')

# Threat score weights per event severity
SEVERITY_POINTS = {
    'CRITICAL': 10,
    'HIGH': 5,
    'MEDIUM': 2,
    'FAILED': 2,
}
MAX_EVENT_POINTS = 10

ALERT_SEVERITY_RANK = {'critical': 0, 'high': 1, 'medium': 2, 'low': 3}
DEFAULT_ALERT_RANK = 4

# Country -> map coordinates used by the CLI when no --geo file is given
DEFAULT_GEO_LOCATIONS = {
    'Russia': {'lat': 55.7558, 'lng': 37.6173},
    'China': {'lat': 39.9042, 'lng': 116.4074},
    'Netherlands': {'lat': 52.3676, 'lng': 4.9041},
    'Germany': {'lat': 52.5200, 'lng': 13.4050},
    'US': {'lat': 37.7749, 'lng': -122.4194, 'friendly': True},
    'Unknown': {'lat': 0, 'lng': 0},
}

SAMPLE_LOGS = [
    '2026-01-07 14:23:45 [CRITICAL] Multiple SSH brute force attempts from 45.142.120.10 (Russia) - 15 failed attempts in 30s',
    '2026-01-07 14:23:47 [FAILED] Login attempt from 192.168.1.105 - user: admin',
    '2026-01-07 14:23:49 [CRITICAL] SQL injection attempt detected from 185.220.101.33 (Netherlands) in /api/users',
    '2026-01-07 14:24:12 [SUCCESS] Login from 10.0.0.45 (US) - user: jsmith',
    '2026-01-07 14:25:33 [HIGH] Port scan detected from 203.0.113.42 (Unknown) - scanning ports 22, 80, 443, 3306',
    '2026-01-07 14:26:01 [FAILED] Login attempt from 198.51.100.88 (China) - user: admin',
    '2026-01-07 14:27:15 [MEDIUM] Suspicious user-agent detected from 91.108.56.181 (Germany)',
    '2026-01-07 14:28:45 [SUCCESS] Login from 10.0.0.67 (US) - user: mjones',
    '2026-01-07 14:30:22 [HIGH] XSS attempt blocked from 203.0.113.42 in search parameter',
    '2026-01-07 14:32:11 [FAILED] Login attempt from 192.168.1.105 - user: root',
    '2026-01-07 14:35:44 [CRITICAL] Directory traversal attempt from 185.220.101.33 (Netherlands) - blocked',
    '2026-01-07 14:38:19 [INFO] Successful API authentication from 10.0.0.45 (US)',
    '2026-01-07 14:42:03 [HIGH] Excessive requests detected from 45.142.120.10 (Russia) - possible DDoS',
    '2026-01-07 14:45:27 [FAILED] Login attempt from 185.220.101.33 (Netherlands) - user: administrator',
    '2026-01-07 14:47:12 [CRITICAL] Malware signature detected in uploaded file from 198.51.100.88 (China)',
    '2026-01-07 14:50:33 [MEDIUM] Unusual outbound connection to 203.0.113.42 on port 4444',
    '2026-01-07 14:52:15 [INFO] Firewall rule updated - blocking 45.142.120.10',
    '2026-01-07 14:55:01 [HIGH] Privilege escalation attempt detected from internal IP 10.0.0.89',
]
