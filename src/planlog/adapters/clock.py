from ..core.ports import Clock
from ..core.utils import now_iso, today_id


class SystemClock(Clock):
    def now(self) -> str:
        return now_iso()

    def today(self) -> str:
        return today_id()
