"""Per-kind rotation strategies."""

from .base import RotationStrategy
from .api_key import ApiKeyStrategy
from .relational import MySQLStrategy, PostgresStrategy, RelationalStrategy
from .documentdb import DocumentDBStrategy
from .generic import GenericStrategy

__all__ = [
    "RotationStrategy",
    "ApiKeyStrategy",
    "RelationalStrategy",
    "PostgresStrategy",
    "MySQLStrategy",
    "DocumentDBStrategy",
    "GenericStrategy",
]
