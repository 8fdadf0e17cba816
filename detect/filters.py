from __future__ import annotations

from typing import Iterable

from contracts import Blob


def apply_mass_filter(blobs: Iterable[Blob], min_mass: int, max_mass: int) -> list[Blob]:
    """Drop single-pixel noise and frame-filling artifacts."""
    output = []
    for blob in blobs:
        if not blob.is_valid_size(min_mass, max_mass):
            continue
        output.append(blob)
    return output
