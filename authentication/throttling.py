import re

from rest_framework.throttling import SimpleRateThrottle

RATE_PATTERN = re.compile(r'^\s*(\d+)\s*/\s*(\d*)\s*([a-z]+)\s*$')

UNIT_SECONDS = {
    's': 1, 'sec': 1, 'second': 1,
    'm': 60, 'min': 60, 'minute': 60,
    'h': 3600, 'hour': 3600,
    'd': 86400, 'day': 86400,
}


class WindowRateThrottle(SimpleRateThrottle):
    """
    Per client IP limit over a fixed-length window, shared by anonymous and
    authenticated callers.

    Rates accept a multiplier on the period, e.g. ``100/15min``.
    """
    scope = 'api'

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)
        match = RATE_PATTERN.match(rate.lower())
        if not match:
            raise ValueError(f"Invalid throttle rate: {rate!r}")
        num_requests, multiplier, unit = match.groups()
        unit = unit.rstrip('s') if unit not in UNIT_SECONDS else unit
        if unit not in UNIT_SECONDS:
            raise ValueError(f"Invalid throttle period in rate: {rate!r}")
        duration = UNIT_SECONDS[unit] * (int(multiplier) if multiplier else 1)
        return (int(num_requests), duration)

    def get_cache_key(self, request, view):
        return self.cache_format % {
            'scope': self.scope,
            'ident': self.get_ident(request),
        }
