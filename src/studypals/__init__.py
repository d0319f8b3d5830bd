"""studypals: spaced-repetition scheduling and study analytics core."""

from studypals.consts import VERSION

__version__ = VERSION
