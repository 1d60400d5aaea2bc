from typing import Optional, Any, Callable
from datetime import date

# Cache expiration times (in seconds)
TIDE_PREDICTION_EXPIRE = 86400  # 24 hours - published predictions are fixed per day

def station_day_key_builder(
    func: Callable,
    *args: Any,
    **kwargs: Any,
) -> str:
    """Cache key builder for per-station, per-day lookups.

    Args:
        func: The function being cached
        args: Positional arguments passed to the function (may include self)
        kwargs: Keyword arguments passed to the function

    Returns:
        str: Cache key in format {func}:station:{code}:day:{YYYY-MM-DD}
    """
    station_code = kwargs.get("station_code")
    day: Optional[date] = kwargs.get("day")
    if station_code is None:
        station_code = next((a for a in args if isinstance(a, str)), None)
    if day is None:
        day = next((a for a in args if isinstance(a, date)), None)

    if not station_code or day is None:
        raise ValueError("station_code and day are required for caching")

    return f"{func.__name__}:station:{station_code}:day:{day.isoformat()}"
