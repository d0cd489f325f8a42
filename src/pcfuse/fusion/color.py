"""Limited-range BT.601 YCbCr to RGBA conversion."""

from __future__ import annotations

import numpy as np


def ycbcr_to_rgba(y, cb, cr) -> np.ndarray:
    """Decode 8-bit Y, Cb, Cr samples to RGBA in [0, 1].

    Accepts scalars or equally shaped arrays. Returns float32 with a trailing
    axis of 4; alpha is always 1.
    """
    y = np.asarray(y, dtype=np.float32) - 16.0
    cb = np.asarray(cb, dtype=np.float32) - 128.0
    cr = np.asarray(cr, dtype=np.float32) - 128.0

    r = 1.164 * y + 1.596 * cr
    g = 1.164 * y - 0.392 * cb - 0.813 * cr
    b = 1.164 * y + 2.017 * cb

    rgb = np.stack([r, g, b], axis=-1)
    rgb = np.clip(rgb, 0.0, 255.0) / 255.0
    alpha = np.ones(rgb.shape[:-1] + (1,), dtype=np.float32)
    return np.concatenate([rgb, alpha], axis=-1).astype(np.float32)
