from datetime import datetime, timezone


def utcnow() -> datetime:
    """Aware UTC now, with microseconds; used as a client-side column default."""
    return datetime.now(timezone.utc)
