from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OtpRecord:
    code: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class OtpStore:
    """
    In-process map of identity -> OtpRecord.

    One record per identity; ``put`` overwrites. Expiry is evaluated by the
    caller at read time (no background sweep), so entries for identities that
    never verify stay until the process restarts or the identity re-issues.
    """

    def __init__(self, clock: Callable[[], datetime] = _now_utc) -> None:
        self._clock = clock
        self._records: Dict[str, OtpRecord] = {}

    def now(self) -> datetime:
        return self._clock()

    def put(self, identity: str, code: str, ttl_seconds: int) -> None:
        self._records[identity] = OtpRecord(code=code, expires_at=self._clock() + timedelta(seconds=ttl_seconds))

    def get(self, identity: str) -> Optional[OtpRecord]:
        return self._records.get(identity)

    def consume(self, identity: str) -> Optional[OtpRecord]:
        return self._records.pop(identity, None)

    def delete(self, identity: str) -> None:
        self._records.pop(identity, None)

    def __contains__(self, identity: object) -> bool:
        return identity in self._records

    def __len__(self) -> int:
        return len(self._records)
