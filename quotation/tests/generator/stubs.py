from typing import Any, Sequence


FIXED_DATE_WIRE = "2025-03-04T05:06:07.890Z"
FIXED_UUID = "00000000-0000-4000-8000-000000000000"
FIXED_CURRENCY = 12.34
FIXED_NUMBER = 7


class StubRandomSource:
    """
    Deterministic RandomSource.

    Every primitive returns a distinct fixed value so tests can tell
    which generation path produced a result.
    """

    def __init__(self, count: int = 0) -> None:
        self._count = count

    def boolean(self) -> bool:
        return True

    def integer(self, min_value: int, max_value: int) -> int:
        return max(min_value, min(FIXED_NUMBER, max_value))

    def count(self, upper: int) -> int:
        return min(self._count, upper - 1)

    def currency_amount(self) -> float:
        return FIXED_CURRENCY

    def text(self) -> str:
        return "stub-text"

    def past_iso_datetime(self) -> str:
        return FIXED_DATE_WIRE

    def uuid(self) -> str:
        return FIXED_UUID

    def choice(self, options: Sequence[Any]) -> Any:
        return options[0]
