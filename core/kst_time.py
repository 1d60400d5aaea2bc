from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

# Fixed civil calendar for every date bucket in the service. Korea has no DST,
# so a constant offset is exact and independent of the host timezone.
KST = timezone(timedelta(hours=9), name="KST")

def now_kst() -> datetime:
    """Current instant expressed in KST."""
    return datetime.now(KST)

def to_kst(dt: datetime) -> datetime:
    """Express an instant in KST. Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(KST)

def kst_date(value: Union[date, datetime]) -> date:
    """KST calendar date of an instant; plain dates pass through."""
    if isinstance(value, datetime):
        return to_kst(value).date()
    return value

def kst_midnight(value: Union[date, datetime]) -> datetime:
    d = kst_date(value)
    return datetime(d.year, d.month, d.day, tzinfo=KST)

def diff_days_kst(a: Union[date, datetime], b: Union[date, datetime]) -> int:
    """Whole calendar days a - b, counted on the KST calendar."""
    return (kst_date(a) - kst_date(b)).days

def parse_kst_local(text: str) -> Optional[datetime]:
    """Parse a KST wall-clock string ("YYYY-MM-DD HH:mm:ss" or ISO "YYYY-MM-DDTHH:MM").

    Returns an aware datetime, or None when the text is not a timestamp.
    """
    if not text:
        return None
    s = str(text).strip().replace("T", " ")
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M"):
        try:
            return datetime.strptime(s, fmt).replace(tzinfo=KST)
        except ValueError:
            continue
    return None

def yyyymmdd(d: date) -> str:
    return d.strftime("%Y%m%d")

def parse_yyyymmdd(text: str) -> date:
    return datetime.strptime(text, "%Y%m%d").date()

def date_range(start: date, days: int) -> list:
    return [start + timedelta(days=i) for i in range(days)]
