"""Clock helpers.

時刻依存の関数はすべて `now` を引数で受け取る。既定値が必要な境界でのみ
ここを経由してシステム時計を読む。
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from tzlocal import get_localzone

from .errors import InvalidArgumentError

Clock = Callable[[], datetime]


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Return a ZoneInfo for an IANA name, or None to use the system zone."""

    if not name:
        return None
    return ZoneInfo(name)


def current_time(tz: tzinfo | None = None) -> datetime:
    """Return an aware "now" in `tz`, or in the system's IANA zone when omitted.

    固定オフセットではなく ZoneInfo を付けるので、暦日加算は夏時間の切り替えを
    またいでも現地の時刻を保つ。
    """

    return datetime.now(tz or get_localzone())


def make_clock(timezone_name: str | None = None) -> Clock:
    tz = resolve_timezone(timezone_name)
    return lambda: current_time(tz)


def ensure_aware(now: datetime | None) -> datetime:
    """Resolve an optional `now` and reject naive datetimes.

    naive と aware の比較は TypeError になるため、入口で明示的に弾く。
    """

    if now is None:
        return current_time()
    if now.tzinfo is None or now.utcoffset() is None:
        raise InvalidArgumentError("now must be a timezone-aware datetime")
    return now
