from wtforge.dsp.waves import parse_shape
from wtforge.errors import InvalidInputError, UnknownShapeError
from wtforge.export.sysex import validate_name, validate_slot
from wtforge.types import VALID_IMPORT_FRAME_SIZES


def validate_positive_integer(type_: object, value: int) -> None:
    if value < 1:
        raise ValueError("Value must be a positive integer")


def validate_frame_count(type_: object, value: int) -> None:
    if value < 2:
        raise ValueError("A wavetable needs at least 2 frames")


def validate_import_frame_size(type_: object, value: int | None) -> None:
    if value is None:
        return

    if value not in VALID_IMPORT_FRAME_SIZES:
        sizes = ", ".join(str(s) for s in VALID_IMPORT_FRAME_SIZES)
        raise ValueError(f"Frame size must be one of: {sizes}")


def validate_slot_number(type_: object, value: int) -> None:
    try:
        validate_slot(value)
    except InvalidInputError as e:
        raise ValueError(e.reason) from e


def validate_device_name(type_: object, value: str | None) -> None:
    if value is None:
        return

    try:
        validate_name(value)
    except InvalidInputError as e:
        raise ValueError(e.reason) from e


def validate_shapes_string(type_: object, shapes: str | None) -> None:
    if not shapes:
        return

    for shape_str in shapes.split(","):
        _check_shape(shape_str)


def validate_keyframes_string(type_: object, keyframes: str | None) -> None:
    if not keyframes:
        return

    for keyframe_str in keyframes.split(","):
        parts = keyframe_str.strip().split(":")
        if len(parts) != 2:
            raise ValueError(f"Invalid keyframe format: {keyframe_str} (expected 'frame:shape')")
        if not parts[0].strip().isdigit():
            raise ValueError(f"Invalid keyframe frame index: {parts[0]}")
        _check_shape(parts[1])


def _check_shape(shape_str: str) -> None:
    try:
        shape = parse_shape(shape_str)
    except UnknownShapeError as e:
        raise ValueError(str(e)) from e
    if not shape.synthesizable:
        raise ValueError(f"Shape '{shape.value}' cannot be synthesized")
