from typing import NoReturn

PRINTABLE_ASCII_MIN = 0x20
PRINTABLE_ASCII_MAX = 0x7F


def assert_exhaustiveness(x: NoReturn) -> NoReturn:
    """Provide an assertion at type-check time that this function is never called."""
    raise AssertionError(f"Invalid value: {x!r}")


def is_printable_ascii(char: str) -> bool:
    """Whether ``char`` falls in the device name range 0x20..0x7F."""
    return PRINTABLE_ASCII_MIN <= ord(char) <= PRINTABLE_ASCII_MAX
