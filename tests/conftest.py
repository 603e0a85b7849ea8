from datetime import datetime, timezone

import pytest

FIXED_NOW = datetime(2026, 1, 7, 14, 23, 45, 123000, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW
