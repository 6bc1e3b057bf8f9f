import math
from dataclasses import asdict, dataclass
from numbers import Real
from typing import Any, Dict, Iterable, List, Optional

from ..errors import InvalidTimeError


@dataclass(frozen=True)
class Bookmark:
    id: int
    time: float
    note: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Bookmark"]:
        """Build a bookmark from persisted data, or ``None`` if the entry is unusable.

        A missing or non-integer id is returned as ``-1`` so the caller can
        assign a fresh one.
        """
        if not isinstance(data, dict):
            return None
        try:
            time_value = validate_time(data.get("time"))
        except InvalidTimeError:
            return None
        entry_id = data.get("id")
        if isinstance(entry_id, bool) or not isinstance(entry_id, int):
            entry_id = -1
        note = data.get("note")
        if not isinstance(note, str):
            note = ""
        return cls(id=entry_id, time=time_value, note=note)


def validate_time(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidTimeError(f"Bookmark time must be a number, got {value!r}.")
    time_value = float(value)
    if not math.isfinite(time_value) or time_value < 0:
        raise InvalidTimeError(f"Bookmark time must be finite and non-negative, got {value!r}.")
    return time_value


def display_order(bookmarks: Iterable[Bookmark]) -> List[Bookmark]:
    # sorted() is stable, so equal times keep their insertion order.
    return sorted(bookmarks, key=lambda bookmark: bookmark.time)
