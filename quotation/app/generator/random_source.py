"""
Random source for arbitrary value generation.

The generator never touches a random number generator directly; it asks
a RandomSource for primitives. The default implementation is backed by
Faker. Tests inject a seeded instance to make runs reproducible.
"""

from __future__ import annotations

from datetime import timezone
from typing import Any, Protocol, Sequence

from faker import Faker


class RandomSource(Protocol):
    """
    Primitive random values consumed by the arbitrary generator.

    Implementations must be safe to share between requests, or callers
    must serialize access.
    """

    def boolean(self) -> bool:
        ...

    def integer(self, min_value: int, max_value: int) -> int:
        """Random integer in [min_value, max_value] (inclusive)."""
        ...

    def count(self, upper: int) -> int:
        """Random size in [0, upper)."""
        ...

    def currency_amount(self) -> float:
        """Random float with two-decimal precision."""
        ...

    def text(self) -> str:
        ...

    def past_iso_datetime(self) -> str:
        ...

    def uuid(self) -> str:
        ...

    def choice(self, options: Sequence[Any]) -> Any:
        ...


class FakerRandomSource:
    """Faker-backed RandomSource."""

    MAX_CURRENCY_CENTS = 9_999_999

    def __init__(
        self,
        faker: Faker | None = None,
        *,
        locale: str = "en_US",
    ) -> None:
        self._faker = faker if faker is not None else Faker(locale)

    @classmethod
    def seeded(cls, seed: int, *, locale: str = "en_US") -> "FakerRandomSource":
        faker = Faker(locale)
        faker.seed_instance(seed)
        return cls(faker)

    @property
    def faker(self) -> Faker:
        return self._faker

    def boolean(self) -> bool:
        return self._faker.pybool()

    def integer(self, min_value: int, max_value: int) -> int:
        return self._faker.random_int(min=min_value, max=max_value)

    def count(self, upper: int) -> int:
        if upper <= 0:
            return 0
        return self._faker.random_int(min=0, max=upper - 1)

    def currency_amount(self) -> float:
        # Whole cents divided once keeps exactly two decimal places.
        cents = self._faker.random_int(min=0, max=self.MAX_CURRENCY_CENTS)
        return cents / 100

    def text(self) -> str:
        return self._faker.pystr(min_chars=1, max_chars=20)

    def past_iso_datetime(self) -> str:
        moment = self._faker.past_datetime(start_date="-1y", tzinfo=timezone.utc)
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def uuid(self) -> str:
        return str(self._faker.uuid4())

    def choice(self, options: Sequence[Any]) -> Any:
        return self._faker.random_element(elements=tuple(options))
