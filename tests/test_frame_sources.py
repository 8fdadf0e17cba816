"""Tests for frame sources."""

from __future__ import annotations

from unittest.mock import Mock

import numpy as np
import pytest

from capture import OpenCVFrameSource, SimulatedFrameSource, SimulatedPlayer
from exceptions import FrameSourceConnectionError


class TestSimulatedFrameSource:
    def test_renders_players(self):
        source = SimulatedFrameSource(
            width=100,
            height=80,
            players=[SimulatedPlayer(start=(50.0, 40.0), velocity=(0.0, 0.0), size=10, brightness=230)],
            realtime=False,
        )
        with source:
            frame = source.read()

        assert frame.image.shape == (80, 100)
        assert frame.image.dtype == np.uint8
        assert int((frame.image == 230).sum()) == 100
        assert frame.image[0, 0] == 20
        assert frame.source_id == "sim"

    def test_synthetic_timestamps(self):
        source = SimulatedFrameSource(width=64, height=48, frame_interval_s=0.1, realtime=False)
        with source:
            stamps = [source.read().t_capture for _ in range(3)]

        assert stamps == pytest.approx([0.1, 0.2, 0.3])

    def test_drops_every_nth_read(self):
        source = SimulatedFrameSource(width=64, height=48, drop_every=3, realtime=False)
        with source:
            frames = [source.read() for _ in range(6)]

        assert [f is None for f in frames] == [False, False, True, False, False, True]
        assert [f.frame_index for f in frames if f is not None] == [1, 2, 4, 5]
        stats = source.get_stats()
        assert stats.frames == 4
        assert stats.missed_reads == 2
        assert stats.consecutive_misses == 1

    def test_color_frames(self):
        source = SimulatedFrameSource(width=64, height=48, color=True, realtime=False)
        with source:
            frame = source.read()

        assert frame.image.shape == (48, 64, 3)

    def test_players_bounce_inside_frame(self):
        player = SimulatedPlayer(start=(90.0, 40.0), velocity=(5.0, 0.0), size=10)
        source = SimulatedFrameSource(width=100, height=80, players=[player], realtime=False)
        with source:
            for _ in range(20):
                frame = source.read()

        columns = np.flatnonzero((frame.image == player.brightness).any(axis=0))
        assert columns.min() >= 0
        assert columns.max() <= 99
        assert len(columns) == 10


class _FakeCapture:
    def __init__(self, reads, opened=True):
        self._reads = list(reads)
        self._opened = opened
        self.release = Mock()

    def isOpened(self):
        return self._opened

    def read(self):
        return self._reads.pop(0)


class TestOpenCVFrameSource:
    def test_open_failure_raises(self, monkeypatch):
        monkeypatch.setattr("capture.opencv_source.cv2.VideoCapture", lambda target: _FakeCapture([], opened=False))
        source = OpenCVFrameSource("missing.mp4")

        with pytest.raises(FrameSourceConnectionError) as exc_info:
            source.open()
        assert exc_info.value.source == "missing.mp4"

    def test_read_before_open_returns_none(self):
        assert OpenCVFrameSource("clip.mp4").read() is None

    def test_missed_reads_return_none(self, monkeypatch):
        image = np.zeros((48, 64, 3), dtype=np.uint8)
        fake = _FakeCapture([(True, image), (False, None), (True, image)])
        monkeypatch.setattr("capture.opencv_source.cv2.VideoCapture", lambda target: fake)

        with OpenCVFrameSource("clip.mp4") as source:
            first = source.read()
            missed = source.read()
            assert source.get_stats().consecutive_misses == 1
            third = source.read()
            stats = source.get_stats()

        assert (first.width, first.height) == (64, 48)
        assert missed is None
        assert third.frame_index == 2
        assert stats.frames == 2
        assert stats.missed_reads == 1
        assert stats.consecutive_misses == 0
        fake.release.assert_called_once()

    def test_digit_string_is_device_index(self):
        assert OpenCVFrameSource("2").source_id == "2"
