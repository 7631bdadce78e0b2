"""Technology tagging from import sources."""

from __future__ import annotations

from typing import Set, Tuple

from ..models import FileIndex

# (case-insensitive substring of an import source, display label)
TECHNOLOGY_MARKERS: Tuple[Tuple[str, str], ...] = (
    # backend frameworks
    ("flask", "Flask"),
    ("fastapi", "FastAPI"),
    ("django", "Django"),
    ("rest_framework", "Django REST Framework"),
    ("express", "Express"),
    ("@nestjs", "NestJS"),
    # frontend frameworks
    ("next", "Next.js"),
    ("react", "React"),
    ("vue", "Vue"),
    ("@angular", "Angular"),
    # ORMs and data access
    ("sqlalchemy", "SQLAlchemy"),
    ("mongoose", "MongoDB/Mongoose"),
    ("prisma", "Prisma"),
    ("typeorm", "TypeORM"),
    ("sequelize", "Sequelize"),
    # auxiliary libraries
    ("celery", "Celery"),
    ("pydantic", "Pydantic"),
    ("axios", "Axios"),
    ("graphql", "GraphQL"),
)


def detect_technologies(file_index: FileIndex) -> Set[str]:
    """Return display labels for every catalog marker found in the imports."""
    found: Set[str] = set()
    for record in file_index.imports:
        source = record.source.lower()
        for marker, label in TECHNOLOGY_MARKERS:
            if marker in source:
                found.add(label)
    return found


__all__ = ["TECHNOLOGY_MARKERS", "detect_technologies"]
