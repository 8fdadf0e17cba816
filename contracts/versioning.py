"""Schema and application version metadata for serialized contracts."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from contracts.types import PlayerSnapshot

SCHEMA_VERSION = "1.0.0"
APP_VERSION = "0.3.0"


def make_envelope(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a payload with schema/app versions for serialization."""
    return {
        "schema_version": SCHEMA_VERSION,
        "app_version": APP_VERSION,
        "payload": payload,
    }


def snapshot_payload(
    tick_index: int, frame_index: Optional[int], players: Iterable[PlayerSnapshot]
) -> Dict[str, Any]:
    """Serialize one tick's players into a plain dict.

    ``frame_index`` is None for a tick that had no frame.
    """
    return {
        "tick": tick_index,
        "frame_index": frame_index,
        "players": [
            {
                "id": p.identity,
                "x": round(p.x, 2),
                "y": round(p.y, 2),
                "vx": round(p.vx, 3),
                "vy": round(p.vy, 3),
                "state": p.state.value,
                "shape": p.shape.value,
            }
            for p in players
        ],
    }
