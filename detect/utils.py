from __future__ import annotations

import numpy as np

from contracts import Blob


def to_brightness(frame: np.ndarray, channel: int = 2) -> np.ndarray:
    """Return the single brightness channel of a frame.

    A 2-D frame is already single channel. For a 3-D frame the requested
    channel is taken; OpenCV frames are BGR so the default picks red, the
    channel that responds to infrared.
    """
    if frame.ndim == 2:
        return frame
    if frame.ndim == 3:
        if not 0 <= channel < frame.shape[2]:
            raise ValueError(f"Channel {channel} out of range for a {frame.shape[2]}-channel frame")
        return frame[:, :, channel]
    raise ValueError(f"Expected a 2-D or 3-D frame, got shape {frame.shape}")


def foreground_mask(brightness: np.ndarray, threshold: int, threshold_range: int) -> np.ndarray:
    """Boolean mask of pixels within ``[threshold - range, threshold + range]``."""
    lower = threshold - threshold_range
    upper = threshold + threshold_range
    values = brightness.astype(np.int16, copy=False)
    return (values >= lower) & (values <= upper)


def binary_view(brightness: np.ndarray, threshold: int, threshold_range: int) -> np.ndarray:
    """Render the foreground mask as a black/white uint8 image for display."""
    return foreground_mask(brightness, threshold, threshold_range).astype(np.uint8) * 255


def brightness_histogram(brightness: np.ndarray) -> np.ndarray:
    """256-bin histogram of brightness values, useful to pick a threshold."""
    values = np.clip(brightness, 0, 255).astype(np.uint8, copy=False)
    return np.bincount(values.ravel(), minlength=256)


def opencv_components(mask: np.ndarray) -> list[Blob]:
    """Find 8-connected components with OpenCV's connectedComponentsWithStats.

    Produces the same mass and bounds as the flood fill; centers are bounding
    box midpoints, not the centroids OpenCV reports. Components are ordered
    by the row-major position of their first pixel, the order a flood fill
    scan discovers them in.

    Args:
        mask: Binary mask (non-zero values considered foreground)

    Returns:
        List of Blob objects without identities
    """
    import cv2

    mask_uint8 = mask.astype(np.uint8)
    num_labels, labels, stats, _centroids = cv2.connectedComponentsWithStats(
        mask_uint8, connectivity=8
    )
    if num_labels <= 1:
        return []

    label_ids, first_index = np.unique(labels.ravel(), return_index=True)
    order = [int(label) for _, label in sorted(zip(first_index, label_ids)) if label != 0]

    blobs: list[Blob] = []
    for i in order:
        left, top, width, height, area = (int(v) for v in stats[i][:5])
        blobs.append(
            Blob.from_bounds(area, (left, top, left + width - 1, top + height - 1))
        )
    return blobs
