import os
import re
from datetime import timedelta

from dotenv import load_dotenv
from pydantic import BaseModel

# EXPIRES_IN units, in milliseconds; e.g. "500ms", "15m", "1h", "7 days", "1y"
_LIFETIME_UNITS_MS = {
    "": 1,
    "ms": 1, "msec": 1, "msecs": 1, "millisecond": 1, "milliseconds": 1,
    "s": 1000, "sec": 1000, "secs": 1000, "second": 1000, "seconds": 1000,
    "m": 60000, "min": 60000, "mins": 60000, "minute": 60000, "minutes": 60000,
    "h": 3600000, "hr": 3600000, "hrs": 3600000, "hour": 3600000, "hours": 3600000,
    "d": 86400000, "day": 86400000, "days": 86400000,
    "w": 604800000, "week": 604800000, "weeks": 604800000,
    "y": 31557600000, "yr": 31557600000, "yrs": 31557600000, "year": 31557600000, "years": 31557600000,
}
_LIFETIME_RE = re.compile(r"^\s*(\d*\.?\d+)\s*([a-zA-Z]*)\s*$")


def parse_lifetime(value) -> timedelta:
    """Parse a token lifetime: numbers are seconds, strings follow the `ms`
    format where a unitless string counts milliseconds."""
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    match = _LIFETIME_RE.match(str(value))
    if not match or match.group(2).lower() not in _LIFETIME_UNITS_MS:
        raise ValueError(f"Invalid token lifetime: {value!r}")
    amount, unit = match.groups()
    return timedelta(milliseconds=float(amount) * _LIFETIME_UNITS_MS[unit.lower()])


class Settings(BaseModel):
    mongodb_uri: str = "mongodb://localhost:27017"
    database_name: str = "styleSync"
    port: int = 5000
    jwt_secret: str = "dev-secret"
    jwt_algorithm: str = "HS256"
    token_lifetime: timedelta = timedelta(hours=1)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            mongodb_uri=os.getenv("MONGODB_URI") or os.getenv("DATABASE_URL") or "mongodb://localhost:27017",
            database_name=os.getenv("DATABASE_NAME", "styleSync"),
            port=int(os.getenv("PORT", "5000")),
            jwt_secret=os.getenv("JWT_SECRET", "dev-secret"),
            token_lifetime=parse_lifetime(os.getenv("EXPIRES_IN", "1h")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
