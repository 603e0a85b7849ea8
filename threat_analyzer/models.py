"""Threat Analyzer - Data models"""

from dataclasses import asdict, dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class LogEvent:
    """Normalized record for one raw log line"""
    timestamp: str
    severity: str
    ip: str
    country: str
    source_format: str
    is_threat: bool
    raw: str
    username: Optional[str] = None
    status: Optional[int] = None
    method: Optional[str] = None
    path: Optional[str] = None

    def to_dict(self) -> Dict:
        data = {
            'timestamp': self.timestamp,
            'severity': self.severity,
            'ip': self.ip,
            'country': self.country,
            'raw': self.raw,
            'isThreat': self.is_threat,
            'type': self.source_format,
        }
        for key in ('username', 'status', 'method', 'path'):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class Alert:
    """Security finding surfaced to the user"""
    type: str
    severity: str
    ip: str
    message: str
    timestamp: str
    country: str
    count: Optional[int] = None

    def to_dict(self) -> Dict:
        data = asdict(self)
        if self.count is None:
            del data['count']
        return data
