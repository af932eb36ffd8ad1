"""Category schemes that decide the destination subdirectory of a track."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Callable

from .logging_utils import render_fields_block
from .models import TrackMetadata

LOGGER = logging.getLogger(__name__)


class CategoryScheme(IntEnum):
    GENRE = 0
    SYMBOLIC_LEVEL = 1
    VERSION = 2
    COMPOSER = 3
    BPM = 4
    SD_DX_PREFIX = 5
    FLAT = 6

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    CategoryScheme.GENRE: "Genre",
    CategoryScheme.SYMBOLIC_LEVEL: "Level",
    CategoryScheme.VERSION: "Cabinet",
    CategoryScheme.COMPOSER: "Composer",
    CategoryScheme.BPM: "BPM",
    CategoryScheme.SD_DX_PREFIX: "SD//DX Chart",
    CategoryScheme.FLAT: "No Separate Folder",
}

_FIELD_GETTERS: dict[CategoryScheme, Callable[[TrackMetadata], str]] = {
    CategoryScheme.GENRE: lambda meta: meta.genre,
    CategoryScheme.SYMBOLIC_LEVEL: lambda meta: meta.symbolic_level,
    CategoryScheme.VERSION: lambda meta: meta.version,
    CategoryScheme.COMPOSER: lambda meta: meta.composer,
    CategoryScheme.BPM: lambda meta: meta.bpm,
    CategoryScheme.SD_DX_PREFIX: lambda meta: meta.standard_deluxe_prefix,
    CategoryScheme.FLAT: lambda meta: "",
}


def normalize_scheme_index(index: object) -> CategoryScheme:
    """Coerce a user-supplied scheme index, falling back to genre when out of range."""
    try:
        return CategoryScheme(int(index))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        LOGGER.warning(
            render_fields_block(
                "Invalid Category Scheme",
                {
                    "Requested": index,
                    "Valid Range": f"0-{len(CategoryScheme) - 1}",
                    "Using": CategoryScheme.GENRE.display_name,
                },
            )
        )
        return CategoryScheme.GENRE


def route_category(metadata: TrackMetadata, scheme: CategoryScheme) -> str:
    """Return the category label for ``metadata``; the flat scheme yields an empty label."""
    return _FIELD_GETTERS[scheme](metadata).strip()


def describe_schemes() -> str:
    return "\n".join(f"[{scheme.value}]{scheme.display_name}" for scheme in CategoryScheme)
