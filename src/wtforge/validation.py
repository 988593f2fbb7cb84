"""Validation of built wavetables.

These checks restate the invariants every wavetable handed downstream must
satisfy. They report problems instead of raising, so a front end can show
every issue at once.
"""

from dataclasses import dataclass

import numpy as np

from wtforge.types import BLOFELD_NAME_LENGTH, WavetableWithMetadata
from wtforge.utils import is_printable_ascii


@dataclass
class ValidationResult:
    """Result of validation with optional warnings."""

    valid: bool
    errors: list[str]
    warnings: list[str]

    @classmethod
    def success(cls, warnings: list[str] | None = None) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(valid=True, errors=[], warnings=warnings or [])

    @classmethod
    def failure(cls, errors: list[str], warnings: list[str] | None = None) -> "ValidationResult":
        """Create a failed validation result."""
        return cls(valid=False, errors=errors, warnings=warnings or [])


def validate_wavetable(
    wavetable: WavetableWithMetadata,
    number_frames: int | None = None,
    samples_per_frame: int | None = None,
) -> ValidationResult:
    """Validate a wavetable and its keyframe markers.

    Checks that:
    - data is 2-D and matches the requested geometry, when given
    - all samples are finite
    - keyframe markers are strictly increasing and inside the table
    - at least two keyframes exist, bracketing the first and last frame

    Samples outside [-1, 1] and names the device cannot store are warnings.

    Args:
        wavetable: The wavetable to check.
        number_frames: Expected frame count, or None to accept any.
        samples_per_frame: Expected frame length, or None to accept any.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    data = np.asarray(wavetable.data)
    if data.ndim != 2:
        return ValidationResult.failure(
            [f"Wavetable data must be 2-D (frames, samples), got shape {data.shape}"]
        )

    frames, samples = data.shape
    if number_frames is not None and frames != number_frames:
        errors.append(f"Expected {number_frames} frames, got {frames}")
    if samples_per_frame is not None and samples != samples_per_frame:
        errors.append(f"Expected {samples_per_frame} samples per frame, got {samples}")

    if not np.all(np.isfinite(data)):
        nan_count = int(np.sum(np.isnan(data)))
        inf_count = int(np.sum(np.isinf(data)))
        errors.append(f"Wavetable contains non-finite values ({nan_count} NaN, {inf_count} Inf)")
    elif data.size and np.max(np.abs(data)) > 1.0:
        max_abs = float(np.max(np.abs(data)))
        warnings.append(f"Samples exceed [-1, 1] range, max |sample| = {max_abs:.4f}")

    errors.extend(_keyframe_errors(wavetable.keyframes, frames))

    if wavetable.name is not None:
        if len(wavetable.name) > BLOFELD_NAME_LENGTH:
            warnings.append(
                f"Name {wavetable.name!r} is longer than {BLOFELD_NAME_LENGTH} characters"
            )
        if not all(is_printable_ascii(c) for c in wavetable.name):
            warnings.append(f"Name {wavetable.name!r} contains non-printable-ASCII characters")

    if errors:
        return ValidationResult.failure(errors, warnings)
    return ValidationResult.success(warnings)


def _keyframe_errors(keyframes: tuple[int, ...], frames: int) -> list[str]:
    errors: list[str] = []

    if len(keyframes) < 2:
        errors.append(f"At least two keyframes are required, got {len(keyframes)}")
        return errors

    for i in range(1, len(keyframes)):
        if keyframes[i] <= keyframes[i - 1]:
            errors.append(
                f"Keyframes must be strictly increasing, but "
                f"keyframes[{i}]={keyframes[i]} <= keyframes[{i - 1}]={keyframes[i - 1]}"
            )
            break

    if keyframes[0] != 0:
        errors.append(f"First keyframe must be frame 0, got {keyframes[0]}")
    if keyframes[-1] != frames - 1:
        errors.append(f"Last keyframe must be frame {frames - 1}, got {keyframes[-1]}")

    return errors
