import numpy as np
from numpy.typing import ArrayLike
from scipy import signal

from wtforge.dsp.interpolate import interpolate_waveforms
from wtforge.types import WavetableData


def resample_frames(data: WavetableData, samples_per_frame: int) -> WavetableData:
    """Resample every frame to ``samples_per_frame`` samples.

    Each frame is one period, so FFT resampling treats it as periodic and
    keeps the cycle seamless.
    """
    if data.shape[1] == samples_per_frame:
        return data.copy()
    return np.asarray(signal.resample(data, samples_per_frame, axis=1), dtype=np.float64)


def fit_wavetable(
    data: ArrayLike,
    number_frames: int,
    samples_per_frame: int,
) -> WavetableData:
    """Bring a wavetable of any geometry to ``number_frames`` x ``samples_per_frame``.

    The sample axis goes through ``resample_frames``. Output frame ``f`` is
    then taken at position ``f * (M - 1) / (number_frames - 1)`` of the ``M``
    source frames and linearly interpolated between its neighbours, so the
    first and last frames are kept.

    Args:
        data: Source table of shape (M, N).
        number_frames: Target frame count.
        samples_per_frame: Target frame length.

    Returns:
        A new table; the input is never modified.
    """
    table = np.asarray(data, dtype=np.float64)
    if table.ndim != 2 or table.shape[0] < 1 or table.shape[1] < 1:
        raise ValueError(f"Wavetable should be 2D with at least one sample, got {table.shape}")
    if number_frames < 1 or samples_per_frame < 1:
        raise ValueError(
            f"Target geometry must be positive, got {number_frames} x {samples_per_frame}"
        )

    table = resample_frames(table, samples_per_frame)
    source_frames = table.shape[0]
    if source_frames == number_frames:
        return table

    fitted = np.empty((number_frames, samples_per_frame), dtype=np.float64)
    for frame in range(number_frames):
        position = frame * (source_frames - 1) / max(number_frames - 1, 1)
        lower = min(int(np.floor(position)), source_frames - 1)
        upper = min(lower + 1, source_frames - 1)
        fitted[frame] = interpolate_waveforms(table[lower], table[upper], position - lower)

    return fitted
