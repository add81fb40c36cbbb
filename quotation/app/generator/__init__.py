from .arbitrary import ArbitraryGenerator
from .random_source import FakerRandomSource, RandomSource

__all__ = [
    "ArbitraryGenerator",
    "FakerRandomSource",
    "RandomSource",
]
