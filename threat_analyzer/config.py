"""
Detection thresholds for the analysis layer.

Defaults reproduce the stock behavior; the CLI exposes each one as a flag.
"""

from dataclasses import dataclass

# Failed logins from one IP before a brute force alert fires
BRUTE_FORCE_THRESHOLD = 3

# An IP is flagged as DDoS when its event count exceeds the larger of a
# fixed floor and a share of the whole batch
DDOS_MIN_REQUESTS = 10
DDOS_SHARE_PERCENT = 10

TOP_IPS_LIMIT = 5


@dataclass(frozen=True)
class DetectionConfig:
    brute_force_threshold: int = BRUTE_FORCE_THRESHOLD
    ddos_min_requests: int = DDOS_MIN_REQUESTS
    ddos_share_percent: int = DDOS_SHARE_PERCENT
    top_ips_limit: int = TOP_IPS_LIMIT

    def ddos_threshold(self, batch_size: int) -> int:
        """Request count an IP must exceed, rounded up to a whole request."""
        share = -(-batch_size * self.ddos_share_percent // 100)
        return max(self.ddos_min_requests, share)


DEFAULT_CONFIG = DetectionConfig()
