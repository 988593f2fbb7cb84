"""Error taxonomy for wavetable building, importing and device export.

Every failure is a local validation error raised by the operation that
detected it. Callers (the CLI, or any UI layer) decide how to report it.
"""


class WavetableError(Exception):
    """Base class for all wtforge validation failures."""


class UnknownShapeError(WavetableError):
    """A shape name does not match any known wave shape."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown wave shape: {name!r}")


class CustomShapeError(WavetableError):
    """The custom shape carries external data and cannot be synthesized."""

    def __init__(self) -> None:
        super().__init__("The 'custom' shape has no synthesis rule; supply waveform data directly")


class InvalidFrameCountError(WavetableError):
    def __init__(self, number_frames: int, samples_per_frame: int) -> None:
        self.number_frames = number_frames
        self.samples_per_frame = samples_per_frame
        super().__init__(
            f"A wavetable needs at least 2 frames of at least 1 sample, "
            f"got {number_frames} frames x {samples_per_frame} samples"
        )


class InsufficientKeyframesError(WavetableError):
    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"At least two keyframes are required, got {count}")


class FrameLengthMismatchError(WavetableError):
    def __init__(
        self, index: int, expected: int, actual: int, shape: tuple[int, ...] | None = None
    ) -> None:
        self.index = index
        self.expected = expected
        self.actual = actual
        self.shape = shape
        found = f"{actual} samples" if shape is None else f"shape {shape}"
        super().__init__(
            f"Expected all waveforms to have {expected} samples, "
            f"but keyframe {index} has {found}"
        )


class MissingFirstFrameError(WavetableError):
    def __init__(self, first_frame: int) -> None:
        self.first_frame = first_frame
        super().__init__(f"Keyframes must include frame 0, first keyframe is at {first_frame}")


class MissingLastFrameError(WavetableError):
    def __init__(self, last_frame: int, expected: int) -> None:
        self.last_frame = last_frame
        self.expected = expected
        super().__init__(
            f"Keyframes must include the last frame {expected}, last keyframe is at {last_frame}"
        )


class DuplicateKeyframeError(WavetableError):
    def __init__(self, frame: int) -> None:
        self.frame = frame
        super().__init__(f"More than one keyframe assigned to frame {frame}")


class NonIntegerFrameSizeError(WavetableError):
    def __init__(self, total_samples: int, number_frames: int) -> None:
        self.total_samples = total_samples
        self.number_frames = number_frames
        super().__init__(
            f"Total samples ({total_samples}) is not evenly divisible "
            f"by the number of frames ({number_frames})"
        )


class InsufficientSamplesError(WavetableError):
    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Audio has {actual} samples, but {expected} are required for the wavetable size"
        )


class UnsupportedFrameSizeError(WavetableError):
    def __init__(self, samples_per_frame: int, valid_sizes: tuple[int, ...]) -> None:
        self.samples_per_frame = samples_per_frame
        self.valid_sizes = valid_sizes
        super().__init__(
            f"Invalid samples per frame {samples_per_frame}. "
            f"Must be one of: {', '.join(str(s) for s in valid_sizes)}"
        )


class InvalidInputError(WavetableError):
    """A device export precondition does not hold."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class InvalidSlotError(InvalidInputError):
    def __init__(self, slot: int) -> None:
        self.slot = slot
        super().__init__(f"Wavetable slot must be in 80..118, got {slot}")


class InvalidNameError(InvalidInputError):
    def __init__(self, name: str, problem: str) -> None:
        self.name = name
        super().__init__(f"Invalid wavetable name {name!r}: {problem}")


class WrongGeometryError(InvalidInputError):
    def __init__(self, expected: tuple[int, int], actual: tuple[int, ...]) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Device wavetables must be {expected[0]} frames x {expected[1]} samples, "
            f"got shape {actual}"
        )


class InvalidSampleError(InvalidInputError):
    def __init__(self, nan_count: int, inf_count: int) -> None:
        self.nan_count = nan_count
        self.inf_count = inf_count
        super().__init__(
            f"Wavetable contains non-finite values ({nan_count} NaN, {inf_count} Inf)"
        )


class SysexDecodeError(WavetableError):
    """A SysEx wavetable dump is malformed."""

    def __init__(self, message: str, wave: int | None = None, offset: int | None = None) -> None:
        self.wave = wave
        self.offset = offset
        if wave is not None:
            message = f"wave {wave}: {message}"
        if offset is not None:
            message = f"{message} (offset {offset})"
        super().__init__(message)
