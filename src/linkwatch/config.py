from __future__ import annotations

from typing import Optional

# Fixed probe targets (hostnames or IPs)
TARGETS: list[str] = [
    "8.8.8.8",  # Google DNS
    "4.2.2.2",  # Level3 DNS
    "208.67.222.222",  # OpenDNS
]

# Probe settings
PROBE_TIMEOUT_SECONDS = 2.0  # per-round deadline
POLL_INTERVAL_SECONDS = 1.0  # one round per tick

# Latency classification thresholds (ms)
LATENCY_GOOD_MS = 60
HIGH_LATENCY_MS = 100.0

# Link is down once this many targets dropped in a round.
# None = every target must drop.
DOWN_DROP_THRESHOLD: Optional[int] = None

# Logging
LOG_ENV_VAR = "LINKWATCH_LOG"
LOG_DEFAULT_LEVEL = "INFO"
LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Dashboard
UI_REFRESH_INTERVAL = 0.1
HISTORY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
STATUS_HEIGHT = 12
QUIT_KEYS = (ord("q"), ord("Q"))
