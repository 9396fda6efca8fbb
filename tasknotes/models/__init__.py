# Import all models to ensure they are registered with SQLAlchemy
from . import category, note, schema_version, task

__all__ = [
    "category",
    "note",
    "schema_version",
    "task",
]
