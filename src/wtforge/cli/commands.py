import sys
from pathlib import Path
from typing import Annotated

import numpy as np
from cyclopts import App, Parameter
from rich.console import Console
from rich.table import Table

from wtforge.cli.validators import (
    validate_device_name,
    validate_frame_count,
    validate_import_frame_size,
    validate_keyframes_string,
    validate_positive_integer,
    validate_shapes_string,
    validate_slot_number,
)
from wtforge.dsp.interpolate import (
    build_wavetable_from_shape_keyframes,
    build_wavetable_from_shapes,
)
from wtforge.dsp.resample import fit_wavetable
from wtforge.dsp.waves import parse_shape
from wtforge.errors import WavetableError
from wtforge.export.sysex import decode_blofeld_wavetable, save_blofeld_wavetable
from wtforge.export.wav import save_wavetable_wav
from wtforge.importers.samples import parse_wavetable_name
from wtforge.importers.wav import detect_wav_wavetable, import_wav
from wtforge.types import (
    BLOFELD_NUM_WAVES,
    BLOFELD_SAMPLES_PER_WAVE,
    BuildParams,
    ExportParams,
    WavetableWithMetadata,
    WaveShape,
)
from wtforge.validation import validate_wavetable

app = App(name="wtforge", help="Build wavetables from keyframes and export Blofeld SysEx dumps")
console = Console()


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(message, style="bold red")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(message, style="bold green")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(message, style="bold yellow")


def parse_shapes_string(shapes: str) -> list[WaveShape]:
    """Parse 'sine,square,...' into shapes."""
    return [parse_shape(shape_str) for shape_str in shapes.split(",")]


def parse_keyframes_string(keyframes: str) -> list[tuple[int, WaveShape]]:
    """Parse 'frame:shape,frame:shape,...' into (frame, shape) pairs."""
    pairs = []
    for keyframe_str in keyframes.split(","):
        parts = keyframe_str.split(":")
        if len(parts) != 2:
            raise ValueError(f"Invalid keyframe format: {keyframe_str}")
        pairs.append((int(parts[0]), parse_shape(parts[1])))
    return pairs


def device_name_for(wavetable: WavetableWithMetadata, fallback: str) -> str:
    """Pick the dump name: the wavetable's own name, else one parsed from ``fallback``."""
    if wavetable.name:
        return wavetable.name
    name, _ = parse_wavetable_name(fallback)
    return name


def write_device_dump(
    wavetable: WavetableWithMetadata,
    syx: Path,
    params: ExportParams,
    fallback_name: str,
) -> None:
    """Fit a wavetable to 64 x 128, encode it and write it to ``syx``."""
    name = params.name or device_name_for(wavetable, fallback_name)

    if (wavetable.number_frames, wavetable.samples_per_frame) != (
        BLOFELD_NUM_WAVES,
        BLOFELD_SAMPLES_PER_WAVE,
    ):
        console.print(
            f"Fitting {wavetable.number_frames}x{wavetable.samples_per_frame} table "
            f"to {BLOFELD_NUM_WAVES}x{BLOFELD_SAMPLES_PER_WAVE}..."
        )
    data = fit_wavetable(wavetable.data, BLOFELD_NUM_WAVES, BLOFELD_SAMPLES_PER_WAVE)

    payload = save_blofeld_wavetable(syx, data, name, params.slot)
    console.print(
        f"Wrote {len(payload)} byte SysEx dump '{name}' for slot {params.slot} to {syx}"
    )


def print_wavetable_summary(wavetable: WavetableWithMetadata, title: str) -> None:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Property", justify="left")
    table.add_column("Value", justify="right")

    table.add_row("Name", wavetable.name or "-")
    table.add_row(
        "Preset number", "-" if wavetable.preset_number is None else str(wavetable.preset_number)
    )
    table.add_row("Frames", str(wavetable.number_frames))
    table.add_row("Samples per frame", str(wavetable.samples_per_frame))
    table.add_row("Keyframes", str(len(wavetable.keyframes)))
    table.add_row("Peak", f"{float(np.max(np.abs(wavetable.data))):.3f}")
    table.add_row("RMS", f"{float(np.sqrt(np.mean(wavetable.data**2))):.3f}")

    console.print(table)


def report_validation(wavetable: WavetableWithMetadata) -> bool:
    """Print validation problems; returns whether the table is usable."""
    result = validate_wavetable(wavetable)
    for warning in result.warnings:
        print_warning(f"  [WARN] {warning}")
    for error in result.errors:
        print_error(f"  [FAIL] {error}")
    return result.valid


@app.command
def build(
    shapes: Annotated[str | None, Parameter(validator=validate_shapes_string)] = "sine,sawtooth",
    keyframes: Annotated[str | None, Parameter(validator=validate_keyframes_string)] = None,
    frames: Annotated[int, Parameter(validator=validate_frame_count)] = 64,
    samples: Annotated[int, Parameter(validator=validate_positive_integer)] = 256,
    output: Path = Path("wavetable.wav"),
    name: Annotated[str | None, Parameter(validator=validate_device_name)] = None,
    preset: int | None = None,
    syx: Path | None = None,
    slot: Annotated[int, Parameter(validator=validate_slot_number)] = 80,
    wav_sample_rate: int = 44100,
) -> int:
    """
    Build a wavetable by interpolating between keyframe shapes.

    Parameters
    ----------
    shapes: str | None
        Keyframe shapes spread evenly over the table, as 'sine,square,...'
    keyframes: str | None
        Keyframes at explicit frames, as 'frame:shape,...'. Must include
        frame 0 and the last frame. Overrides --shapes.
    frames: int
        Number of frames in the wavetable
    samples: int
        Number of samples per frame
    output: Path
        The output destination for the .wav file of concatenated frames
    name: str | None
        Wavetable name, up to 14 printable ASCII characters
    preset: int | None
        Preset number stored with the wavetable
    syx: Path | None
        Also write a Blofeld SysEx dump to this path
    slot: int
        Blofeld user wavetable slot (80-118) for the SysEx dump
    wav_sample_rate: int
        The sample rate for the .wav file in Hz
    """
    build_params = BuildParams(
        number_frames=frames, samples_per_frame=samples, name=name, preset_number=preset
    )
    export_params = ExportParams(syx=syx, slot=slot, name=name, wav_sample_rate=wav_sample_rate)

    try:
        if keyframes:
            pairs = parse_keyframes_string(keyframes)
            console.print(f"Building wavetable from {len(pairs)} pinned keyframes...")
            wavetable = build_wavetable_from_shape_keyframes(
                pairs,
                build_params.number_frames,
                build_params.samples_per_frame,
                build_params.name,
                build_params.preset_number,
            )
        else:
            shape_list = parse_shapes_string(shapes or "")
            console.print(
                f"Building wavetable from {', '.join(s.label for s in shape_list)} keyframes..."
            )
            wavetable = build_wavetable_from_shapes(
                shape_list,
                build_params.number_frames,
                build_params.samples_per_frame,
                build_params.name,
                build_params.preset_number,
            )
    except WavetableError as e:
        print_error(f"Error: {e}")
        return 1

    if not report_validation(wavetable):
        return 1

    save_wavetable_wav(output, wavetable, sample_rate=export_params.wav_sample_rate)
    console.print(f"Exported {wavetable.number_frames} frames to {output}")

    if syx is not None:
        try:
            write_device_dump(wavetable, syx, export_params, output.stem)
        except WavetableError as e:
            print_error(f"Error: {e}")
            return 1

    print_wavetable_summary(wavetable, "Built wavetable")
    return 0


@app.command(name="import")
def import_(
    source: Path,
    frames: Annotated[int, Parameter(validator=validate_positive_integer)] = 64,
    frame_size: Annotated[int | None, Parameter(validator=validate_import_frame_size)] = None,
    syx: Path | None = None,
    slot: Annotated[int, Parameter(validator=validate_slot_number)] = 80,
    name: Annotated[str | None, Parameter(validator=validate_device_name)] = None,
) -> int:
    """
    Import a WAV file as a wavetable and show what was found.

    Parameters
    ----------
    source: Path
        The source WAV file to import
    frames: int
        Number of frames to slice
    frame_size: int | None
        Samples per frame (derived from total_samples/frames if omitted)
    syx: Path | None
        Also write a Blofeld SysEx dump to this path
    slot: int
        Blofeld user wavetable slot (80-118) for the SysEx dump
    name: str | None
        Override the name parsed from the file name
    """
    if not source.exists():
        print_error(f"Error: Source file not found: {source}")
        console.print("  Suggestion: Check the file path and try again.")
        return 1

    try:
        wavetable = import_wav(source, number_frames=frames, samples_per_frame=frame_size)
    except WavetableError as e:
        print_error(f"Error: {e}")
        console.print("")
        console.print("  Suggestion: Use 'wtforge info' to find valid frame counts:")
        console.print(f"    wtforge info {source}")
        return 1
    except RuntimeError as e:
        print_error(f"Error decoding file: {e}")
        return 1

    print_success(f"Imported {source}")
    print_wavetable_summary(wavetable, "Imported wavetable")
    report_validation(wavetable)

    if syx is not None:
        try:
            params = ExportParams(syx=syx, slot=slot, name=name)
            write_device_dump(wavetable, syx, params, source.stem)
        except WavetableError as e:
            print_error(f"Error: {e}")
            return 1

    return 0


@app.command
def export(
    source: Path,
    output: Path | None = None,
    slot: Annotated[int, Parameter(validator=validate_slot_number)] = 80,
    name: Annotated[str | None, Parameter(validator=validate_device_name)] = None,
    frames: Annotated[int, Parameter(validator=validate_positive_integer)] = 64,
    frame_size: Annotated[int | None, Parameter(validator=validate_import_frame_size)] = None,
) -> int:
    """
    Convert a wavetable WAV file into a Blofeld SysEx dump.

    The table is fitted to the Blofeld's 64 waves of 128 samples first.

    Parameters
    ----------
    source: Path
        Wavetable WAV file of concatenated frames
    output: Path | None
        Output .syx path (default: source with a .syx suffix)
    slot: int
        Blofeld user wavetable slot (80-118)
    name: str | None
        Wavetable name (default: parsed from the source file name)
    frames: int
        Number of frames in the source file
    frame_size: int | None
        Samples per frame in the source file (derived if omitted)
    """
    if not source.exists():
        print_error(f"Error: Source file not found: {source}")
        return 1

    try:
        wavetable = import_wav(source, number_frames=frames, samples_per_frame=frame_size)
    except WavetableError as e:
        print_error(f"Error: {e}")
        return 1
    except RuntimeError as e:
        print_error(f"Error decoding file: {e}")
        return 1

    syx = output or source.with_suffix(".syx")
    params = ExportParams(syx=syx, slot=slot, name=name)
    try:
        write_device_dump(wavetable, syx, params, source.stem)
    except WavetableError as e:
        print_error(f"Error: {e}")
        return 1

    print_success(f"Exported {source} -> {syx}")
    return 0


@app.command
def info(file: Path) -> int:
    """
    Display information about a .syx wavetable dump or a wavetable WAV file.

    Parameters
    ----------
    file: Path
        The path to the .syx or .wav file
    """
    if not file.exists():
        print_error(f"Error: File {file} does not exist")
        return 1

    if file.suffix.lower() == ".syx":
        try:
            dump = decode_blofeld_wavetable(file.read_bytes())
        except WavetableError as e:
            print_error(f"[FAIL] {file}: {e}")
            return 1

        print_success(f"[PASS] {file}: all checksums verified")
        console.print(f"  Name: {dump.name or '-'}")
        console.print(f"  Slot: {dump.slot}")
        console.print(f"  Waves: {dump.data.shape[0]} x {dump.data.shape[1]} samples")
        console.print(f"  Peak: {float(np.max(np.abs(dump.data))):.3f}")
        return 0

    try:
        analysis = detect_wav_wavetable(file)
    except RuntimeError as e:
        print_error(f"Error analyzing file: {e}")
        return 1

    file_info = analysis["file_info"]
    name, preset_number = parse_wavetable_name(file.name)
    console.print(f"[bold]File Analysis: {file}[/bold]")
    console.print(f"  Name: {name or '-'}")
    if preset_number is not None:
        console.print(f"  Preset number: {preset_number}")
    console.print(f"  Total samples: {file_info['total_samples']:,}")
    console.print(f"  Sample rate: {file_info['sample_rate']} Hz")
    console.print(f"  Duration: {file_info['duration_seconds']:.3f}s")
    console.print(f"  Channels: {file_info['channels']}")

    suggestions = analysis["suggestions"]
    if not suggestions:
        print_warning("\nNo valid wavetable interpretations found.")
        console.print("The sample count doesn't divide into a supported frame size.")
        return 0

    table = Table(show_header=True, header_style="bold")
    table.add_column("Frames", justify="right")
    table.add_column("Frame Size", justify="right")
    table.add_column("Import Command", justify="left")
    for suggestion in suggestions:
        table.add_row(
            str(suggestion["number_frames"]),
            str(suggestion["samples_per_frame"]),
            f"wtforge import {file.name} --frames {suggestion['number_frames']}",
        )
    console.print(table)
    return 0


@app.command
def shapes() -> int:
    """List the wave shapes available for keyframes."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Shape", justify="left")
    table.add_column("Label", justify="left")
    table.add_column("Synthesizable", justify="center")

    for shape in WaveShape:
        table.add_row(
            shape.value,
            shape.label,
            "[green]Yes[/green]" if shape.synthesizable else "[yellow]No[/yellow]",
        )

    console.print(table)
    return 0


def main() -> None:
    sys.exit(app())


if __name__ == "__main__":
    main()
