"""Tests for the brightness threshold blob detector."""

from __future__ import annotations

import numpy as np
import pytest

from detect import Backend, BlobDetector, DetectorConfig, binary_view, brightness_histogram, foreground_mask
from detect.utils import to_brightness
from detect.filters import apply_mass_filter
from contracts import Blob
from exceptions import DetectionError, InvalidConfigError


def _config(**overrides) -> DetectorConfig:
    params = dict(width=100, height=100, threshold=255, threshold_range=10, min_mass=50, max_mass=500)
    params.update(overrides)
    return DetectorConfig(**params)


def _image(width: int = 100, height: int = 100) -> np.ndarray:
    return np.zeros((height, width), dtype=np.uint8)


@pytest.fixture(params=[Backend.FLOOD_FILL, Backend.OPENCV], ids=["flood_fill", "opencv"])
def backend(request) -> Backend:
    return request.param


class TestBlobDetector:
    def test_single_square(self, backend):
        image = _image()
        image[40:50, 40:50] = 255
        detector = BlobDetector(_config(backend=backend))

        blobs = detector.detect(image)

        assert len(blobs) == 1
        blob = blobs[0]
        assert blob.mass == 100
        assert blob.bounds == (40, 40, 49, 49)
        assert blob.center == (44.5, 44.5)
        assert blob.identity is None
        assert blob.last_seen is None

    def test_empty_image_yields_no_blobs(self, backend):
        detector = BlobDetector(_config(backend=backend))
        assert detector.detect(_image()) == []

    def test_disjoint_blobs_are_found_in_scan_order(self, backend):
        image = _image()
        image[60:70, 5:15] = 250
        image[10:20, 70:80] = 250
        image[10:20, 20:30] = 250
        detector = BlobDetector(_config(backend=backend))

        blobs = detector.detect(image)

        assert [b.bounds for b in blobs] == [
            (20, 10, 29, 19),
            (70, 10, 79, 19),
            (5, 60, 14, 69),
        ]

    def test_diagonal_pixels_are_connected(self, backend):
        image = _image()
        for i in range(60):
            image[20 + i // 2, 10 + i] = 255
        detector = BlobDetector(_config(backend=backend))

        blobs = detector.detect(image)

        assert len(blobs) == 1
        assert blobs[0].mass == 60

    def test_asymmetric_shape_uses_bounding_box_midpoint(self, backend):
        image = _image()
        image[30:40, 10:20] = 255  # 100 px square
        image[39, 20:60] = 255  # 40 px tail along the bottom row
        detector = BlobDetector(_config(backend=backend))

        (blob,) = detector.detect(image)

        assert blob.mass == 140
        assert blob.bounds == (10, 30, 59, 39)
        assert blob.center == (34.5, 34.5)

    def test_mass_band_rejects_noise_and_floods(self, backend):
        image = _image()
        image[5, 5] = 255  # single-pixel noise
        image[50:99, 0:99] = 255  # far above max_mass
        image[10:18, 40:50] = 255  # 80 px, kept
        detector = BlobDetector(_config(backend=backend))

        blobs = detector.detect(image)

        assert [b.mass for b in blobs] == [80]

    def test_threshold_band_is_inclusive(self, backend):
        image = _image()
        image[0:10, 0:10] = 245
        image[20:30, 0:10] = 244
        detector = BlobDetector(_config(backend=backend))

        blobs = detector.detect(image)

        assert len(blobs) == 1
        assert blobs[0].bounds == (0, 0, 9, 9)

    def test_threshold_overrides(self):
        image = _image()
        image[40:50, 40:50] = 120
        detector = BlobDetector(_config())

        assert detector.detect(image) == []
        assert len(detector.detect(image, threshold=120, threshold_range=0)) == 1

    def test_color_frame_uses_configured_channel(self):
        image = np.zeros((100, 100, 3), dtype=np.uint8)
        image[40:50, 40:50, 2] = 255
        image[0:10, 0:10, 0] = 255

        blobs = BlobDetector(_config(channel=2)).detect(image)

        assert [b.bounds for b in blobs] == [(40, 40, 49, 49)]

    def test_missing_channel_is_rejected(self):
        image = np.zeros((100, 100, 3), dtype=np.uint8)
        image[40:50, 40:50, 2] = 255

        with pytest.raises(DetectionError):
            BlobDetector(_config(channel=3)).detect(image)

    def test_repeated_calls_reset_visited_mask(self):
        image = _image()
        image[40:50, 40:50] = 255
        detector = BlobDetector(_config())

        first = detector.detect(image)
        second = detector.detect(image)

        assert len(first) == len(second) == 1
        assert second[0].mass == 100
        assert first[0] is not second[0]

    def test_records_timing(self):
        detector = BlobDetector(_config())
        detector.detect(_image())

        assert detector.last_timing is not None
        assert detector.last_timing.blobs == 0
        assert detector.last_timing.backend == "flood_fill"

    def test_rejects_wrong_size(self):
        detector = BlobDetector(_config())
        with pytest.raises(DetectionError):
            detector.detect(_image(width=50))

    def test_rejects_non_array(self):
        detector = BlobDetector(_config())
        with pytest.raises(DetectionError):
            detector.detect([[0] * 100] * 100)


def test_backends_agree_on_random_frames() -> None:
    rng = np.random.default_rng(7)
    config = dict(width=80, height=60, threshold=200, threshold_range=55, min_mass=1, max_mass=5000)
    flood = BlobDetector(DetectorConfig(**config))
    cv = BlobDetector(DetectorConfig(backend=Backend.OPENCV, **config))

    for _ in range(5):
        image = (rng.random((60, 80)) > 0.8).astype(np.uint8) * 255
        a = flood.detect(image)
        b = cv.detect(image)
        assert [(x.mass, x.bounds) for x in a] == [(y.mass, y.bounds) for y in b]


@pytest.mark.parametrize(
    "overrides",
    [
        {"width": 0},
        {"threshold": 300},
        {"threshold_range": -1},
        {"min_mass": 0},
        {"min_mass": 100, "max_mass": 50},
        {"runtime_budget_ms": 0},
    ],
)
def test_invalid_detector_config(overrides) -> None:
    with pytest.raises(InvalidConfigError):
        _config(**overrides)


def test_backend_accepts_string() -> None:
    assert _config(backend="opencv").backend is Backend.OPENCV


def test_mask_helpers() -> None:
    brightness = np.array([[0, 190, 200], [210, 221, 255]], dtype=np.uint8)

    mask = foreground_mask(brightness, 200, 20)
    assert mask.tolist() == [[False, True, True], [True, False, False]]
    assert binary_view(brightness, 200, 20).tolist() == [[0, 255, 255], [255, 0, 0]]

    histogram = brightness_histogram(brightness)
    assert histogram.shape == (256,)
    assert histogram[0] == 1
    assert histogram.sum() == 6


def test_mass_filter_keeps_band_edges() -> None:
    blobs = [Blob.from_bounds(m, (0, 0, 0, 0)) for m in (49, 50, 500, 501)]
    assert [b.mass for b in apply_mass_filter(blobs, 50, 500)] == [50, 500]


def test_to_brightness_channel_selection() -> None:
    frame = np.zeros((2, 2, 3), dtype=np.uint8)
    frame[:, :, 1] = 7

    assert to_brightness(frame, 1).tolist() == [[7, 7], [7, 7]]
    assert to_brightness(frame[:, :, 0]).shape == (2, 2)
    with pytest.raises(ValueError):
        to_brightness(frame, 3)
    with pytest.raises(ValueError):
        to_brightness(np.zeros((2, 2, 2, 2), dtype=np.uint8))
