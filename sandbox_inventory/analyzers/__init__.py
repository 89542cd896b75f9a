from .metadata import (
    author_display_name,
    build_row,
    format_created,
    has_assemblies,
    is_activated,
)

__all__ = [
    "author_display_name",
    "build_row",
    "format_created",
    "has_assemblies",
    "is_activated",
]
