"""Run the floor tracking pipeline from the command line.

Usage:
    python -m app                          # Simulated floor, 300 ticks
    python -m app --source 0 --ticks 0     # Camera 0 until interrupted
    python -m app --source clip.mp4 --json # Recorded video, JSON lines
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence, Union

from app.events import PlayerLostEvent
from app.pipeline import FloorPipeline
from capture import FrameSource, OpenCVFrameSource, SimulatedFrameSource
from configs.settings import DEFAULT_CONFIG_PATH, AppConfig, load_config
from contracts.versioning import make_envelope, snapshot_payload
from exceptions import FloorTrackerError
from log_config.logger import enable_file_logging, get_logger

logger = get_logger(__name__)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track players on an IR-lit floor.")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML configuration file.")
    parser.add_argument(
        "--source",
        default=None,
        help="'sim' for the simulated floor, a camera index, or a video file path (default: camera.source).",
    )
    parser.add_argument("--ticks", type=int, default=300, help="Ticks to run (0 runs until interrupted).")
    parser.add_argument("--drop-every", type=int, default=0, help="Simulated source: drop every Nth frame.")
    parser.add_argument("--json", action="store_true", help="Print one JSON envelope per tick to stdout.")
    parser.add_argument("--logs-dir", type=Path, default=Path("logs"), help="Directory for log files.")
    parser.add_argument("--no-file-logs", action="store_true", help="Log to the console only.")
    return parser.parse_args(argv)


def _make_source(source: Union[int, str], config: AppConfig, drop_every: int) -> FrameSource:
    name = str(source)
    if name == "sim":
        return SimulatedFrameSource(
            width=config.camera.width,
            height=config.camera.height,
            frame_interval_s=1.0 / config.camera.fps,
            drop_every=drop_every,
        )
    target = int(name) if name.isdigit() else name
    return OpenCVFrameSource(target, width=config.camera.width, height=config.camera.height)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    if not args.no_file_logs:
        enable_file_logging(args.logs_dir)

    try:
        config = load_config(args.config)
    except FloorTrackerError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    pipeline = FloorPipeline(config)
    pipeline.add_state_listener(
        lambda e: logger.info(
            "player.state id={} {}->{} shape={}", e.identity, e.previous.value, e.current.value, e.shape.value
        )
    )
    pipeline.events.subscribe(
        PlayerLostEvent, lambda e: logger.info("player.lost id={} at={}", e.identity, e.last_position)
    )

    source_name = args.source if args.source is not None else config.camera.source
    max_ticks = args.ticks if args.ticks > 0 else None
    try:
        with _make_source(source_name, config, args.drop_every) as source:
            for result in pipeline.run(source, max_ticks=max_ticks):
                if args.json:
                    payload = snapshot_payload(result.tick_index, result.frame_index, result.players)
                    print(json.dumps(make_envelope(payload)), flush=True)
                elif result.tick_index % config.camera.fps == 0:
                    logger.info(
                        "pipeline.summary tick={} players={}",
                        result.tick_index,
                        ", ".join(f"{p.identity}:{p.state.value}" for p in result.players) or "none",
                    )
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except FloorTrackerError as e:
        logger.error(f"Pipeline stopped: {e}")
        return 1

    stats = pipeline.get_stats()
    logger.info(
        "pipeline.done ticks={} skipped={} tracked={} identities_issued={}",
        stats.ticks,
        stats.skipped_ticks,
        stats.tracked,
        stats.next_identity,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
