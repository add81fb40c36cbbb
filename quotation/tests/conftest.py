import pytest

from quotation.app.generator.arbitrary import ArbitraryGenerator
from quotation.app.generator.random_source import FakerRandomSource


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def seeded_generator() -> ArbitraryGenerator:
    """Generator over a seeded Faker instance (reproducible per test)."""
    return ArbitraryGenerator(FakerRandomSource.seeded(1234))
