"""Keyframe to wavetable interpolation.

Two build modes share the same linear crossfade between consecutive
keyframes:

* spread mode (``build_wavetable``) takes an ordered list of waveforms and
  places keyframe ``k`` of ``K`` at frame ``round(k / (K - 1) * (M - 1))``;
* explicit mode (``build_wavetable_explicit``) takes caller-assigned frame
  indices, which must bracket the table.

Between keyframes at frames ``f0 < f1`` every frame ``f`` is
``data0 * (1 - t) + data1 * t`` with ``t = (f - f0) / (f1 - f0)``. Keyframe
frames themselves are copied, so they reproduce their source exactly.
"""

import math
from collections.abc import Sequence

import numpy as np
from numpy.typing import ArrayLike

from wtforge.dsp.waves import generate_waveform
from wtforge.errors import (
    DuplicateKeyframeError,
    FrameLengthMismatchError,
    InsufficientKeyframesError,
    InvalidFrameCountError,
    MissingFirstFrameError,
    MissingLastFrameError,
)
from wtforge.types import Keyframe, WaveformData, WavetableData, WavetableWithMetadata, WaveShape


def interpolate_waveforms(start: WaveformData, end: WaveformData, t: float) -> WaveformData:
    """Linear blend of two equal-length waveforms at position ``t`` in [0, 1]."""
    return start * (1 - t) + end * t


def spread_keyframes(num_keyframes: int, number_frames: int) -> list[int]:
    """Target frame index for each of ``num_keyframes`` evenly spread keyframes.

    Rounding is half-up, so the first keyframe lands on frame 0 and the last
    on ``number_frames - 1``. With few frames and many keyframes, neighbours
    can round to the same index.
    """
    if num_keyframes < 2:
        raise InsufficientKeyframesError(num_keyframes)

    return [
        math.floor(k / (num_keyframes - 1) * (number_frames - 1) + 0.5)
        for k in range(num_keyframes)
    ]


def build_wavetable(
    keyframes: Sequence[ArrayLike],
    number_frames: int,
    samples_per_frame: int,
    name: str | None = None,
    preset_number: int | None = None,
) -> WavetableWithMetadata:
    """Build a wavetable by spreading keyframes evenly across the frames.

    When two keyframes round to the same frame, the later one in keyframe
    order replaces the earlier one and interpolation runs between the
    surviving keyframes.

    Args:
        keyframes: Ordered waveforms, each ``samples_per_frame`` long.
        number_frames: Number of frames in the resulting table.
        samples_per_frame: Samples in every frame.
        name: Optional display name carried into the metadata.
        preset_number: Optional preset number carried into the metadata.

    Returns:
        The table with the frame indices of all keyframes marked.

    Raises:
        InvalidFrameCountError: If the requested geometry is degenerate.
        InsufficientKeyframesError: If fewer than two keyframes are given.
        FrameLengthMismatchError: If a keyframe has the wrong length.
    """
    _check_geometry(number_frames, samples_per_frame)
    if len(keyframes) < 2:
        raise InsufficientKeyframesError(len(keyframes))

    waves = [_as_waveform(data, index, samples_per_frame) for index, data in enumerate(keyframes)]
    frames = spread_keyframes(len(waves), number_frames)

    # Later keyframes win on collisions; dict keeps first-insertion order,
    # which is already ascending here.
    anchors: dict[int, WaveformData] = {}
    for frame, wave in zip(frames, waves, strict=True):
        anchors[frame] = wave

    return WavetableWithMetadata(
        data=_fill_between_keyframes(list(anchors.items()), number_frames, samples_per_frame),
        keyframes=tuple(anchors),
        name=name,
        preset_number=preset_number,
    )


def build_wavetable_explicit(
    keyframes: Sequence[Keyframe | tuple[int, ArrayLike]],
    number_frames: int,
    samples_per_frame: int,
    name: str | None = None,
    preset_number: int | None = None,
) -> WavetableWithMetadata:
    """Build a wavetable from keyframes pinned to explicit frame indices.

    Keyframes may arrive in any order; they are sorted by frame. The sorted
    keyframes must start at frame 0 and end at frame ``number_frames - 1``.

    Raises:
        InvalidFrameCountError: If the requested geometry is degenerate.
        InsufficientKeyframesError: If fewer than two keyframes are given.
        MissingFirstFrameError: If no keyframe sits on frame 0.
        MissingLastFrameError: If no keyframe sits on the last frame.
        DuplicateKeyframeError: If two keyframes share a frame.
        FrameLengthMismatchError: If a keyframe has the wrong length. The
            reported index is the keyframe's position in the input sequence.
    """
    _check_geometry(number_frames, samples_per_frame)
    if len(keyframes) < 2:
        raise InsufficientKeyframesError(len(keyframes))

    pinned = [_as_keyframe(kf) for kf in keyframes]
    order = sorted(range(len(pinned)), key=lambda i: pinned[i].frame)

    first = pinned[order[0]].frame
    last = pinned[order[-1]].frame
    if first != 0:
        raise MissingFirstFrameError(first)
    if last != number_frames - 1:
        raise MissingLastFrameError(last, number_frames - 1)

    for prev, curr in zip(order, order[1:]):
        if pinned[prev].frame == pinned[curr].frame:
            raise DuplicateKeyframeError(pinned[curr].frame)

    waves = [_as_waveform(kf.data, index, samples_per_frame) for index, kf in enumerate(pinned)]
    anchors = [(pinned[i].frame, waves[i]) for i in order]

    return WavetableWithMetadata(
        data=_fill_between_keyframes(anchors, number_frames, samples_per_frame),
        keyframes=tuple(frame for frame, _ in anchors),
        name=name,
        preset_number=preset_number,
    )


def build_wavetable_from_shapes(
    shapes: Sequence[WaveShape | str],
    number_frames: int,
    samples_per_frame: int,
    name: str | None = None,
    preset_number: int | None = None,
) -> WavetableWithMetadata:
    """Spread-mode build from synthesized shapes."""
    keyframes = [generate_waveform(shape, samples_per_frame) for shape in shapes]
    return build_wavetable(keyframes, number_frames, samples_per_frame, name, preset_number)


def build_wavetable_from_shape_keyframes(
    keyframes: Sequence[tuple[int, WaveShape | str]],
    number_frames: int,
    samples_per_frame: int,
    name: str | None = None,
    preset_number: int | None = None,
) -> WavetableWithMetadata:
    """Explicit-mode build from ``(frame, shape)`` pairs."""
    pinned = [
        Keyframe(frame=frame, data=generate_waveform(shape, samples_per_frame))
        for frame, shape in keyframes
    ]
    return build_wavetable_explicit(pinned, number_frames, samples_per_frame, name, preset_number)


def _fill_between_keyframes(
    anchors: list[tuple[int, WaveformData]],
    number_frames: int,
    samples_per_frame: int,
) -> WavetableData:
    """Allocate a table and fill it from strictly increasing ``(frame, data)`` anchors."""
    table = np.empty((number_frames, samples_per_frame), dtype=np.float64)

    for (f0, start), (f1, end) in zip(anchors, anchors[1:]):
        table[f0] = start
        for frame in range(f0 + 1, f1):
            t = (frame - f0) / (f1 - f0)
            table[frame] = interpolate_waveforms(start, end, t)
        table[f1] = end

    return table


def _check_geometry(number_frames: int, samples_per_frame: int) -> None:
    if number_frames < 2 or samples_per_frame < 1:
        raise InvalidFrameCountError(number_frames, samples_per_frame)


def _as_keyframe(value: Keyframe | tuple[int, ArrayLike]) -> Keyframe:
    if isinstance(value, Keyframe):
        return value
    frame, data = value
    return Keyframe(frame=int(frame), data=np.asarray(data, dtype=np.float64))


def _as_waveform(data: ArrayLike, index: int, samples_per_frame: int) -> WaveformData:
    wave = np.asarray(data, dtype=np.float64)
    if wave.ndim != 1:
        raise FrameLengthMismatchError(index, samples_per_frame, int(wave.size), wave.shape)
    if wave.shape[0] != samples_per_frame:
        raise FrameLengthMismatchError(index, samples_per_frame, int(wave.shape[0]))
    return wave
