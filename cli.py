import argparse
import json
import logging
import math
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from config import load_config_safe
from event_describe import describe_event
from midi_file import MidiFile, decode
from resample import resample

logger = logging.getLogger(__name__)


def _setup_logging(cfg: dict) -> None:
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        level_name = str(cfg.get("logging", {}).get("level", "INFO")).upper()
        level = getattr(logging, level_name, logging.INFO)
        logging.basicConfig(level=level)


def default_output_path(input_path: str, multiplier: float, output_dir: str) -> str:
    stem = Path(input_path).stem
    return os.path.join(output_dir, f"{stem}_x{multiplier:g}.mid")


def dump_events(midi: MidiFile, out=None) -> None:
    out = out or sys.stdout
    header = midi.header
    print(
        f"format {header.format}, {header.track_count} track(s), "
        f"{header.ticks_per_quarter_note} ticks/quarter note",
        file=out,
    )
    current = None
    for index, event in midi.events():
        if index != current:
            print(f"Track {index} ({midi.tracks[index].declared_length} bytes)", file=out)
            current = index
        print(f"  {event.absolute_time:>8} {describe_event(event)}", file=out)


def run(
    input_path: str,
    multiplier: float,
    output_path: str,
    *,
    recompute_lengths: bool = False,
) -> Dict[str, Any]:
    """Decode ``input_path``, resample it and write the result to ``output_path``."""

    with open(input_path, "rb") as fh:
        data = fh.read()
    midi = decode(data)
    resample(midi, multiplier)
    encoded = midi.encode(recompute_lengths=recompute_lengths)

    out_dir = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(out_dir, exist_ok=True)
    with open(output_path, "wb") as fh:
        fh.write(encoded)
    logger.info("Wrote %d byte(s) to %s", len(encoded), output_path)

    return {
        "input": os.path.abspath(input_path),
        "output": os.path.abspath(output_path),
        "multiplier": multiplier,
        "recompute_lengths": recompute_lengths,
        "format": midi.header.format,
        "tracks": len(midi.tracks),
        "ticks_per_quarter_note": midi.header.ticks_per_quarter_note,
        "events": midi.event_count,
        "bytes_in": len(data),
        "bytes_out": len(encoded),
    }


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Resample the tick timing of a Standard MIDI File")
    ap.add_argument("input", help="Input .mid file")
    ap.add_argument("--multiplier", type=float, help="Tick ratio (default from the config file)")
    ap.add_argument("--output", help="Output path (default: <paths.output>/<name>_x<multiplier>.mid)")
    ap.add_argument(
        "--recompute-lengths",
        action="store_true",
        help="Write the true byte count of each track instead of the original declared length",
    )
    ap.add_argument("--dump", action="store_true", help="Print the decoded events instead of writing a file")
    ap.add_argument("--config", default="config.yaml", help="Path to the YAML/JSON config file")
    ap.add_argument("--dry-run", action="store_true", help="Print the plan without decoding or writing")
    args = ap.parse_args(argv)

    cfg = load_config_safe(args.config)
    _setup_logging(cfg)

    multiplier = args.multiplier if args.multiplier is not None else cfg["resample"]["multiplier"]
    if not math.isfinite(multiplier) or multiplier <= 0:
        ap.error("--multiplier must be a positive number")
    recompute = bool(args.recompute_lengths or cfg["resample"]["recompute_lengths"])
    output = args.output or default_output_path(args.input, multiplier, cfg["paths"]["output"])

    if args.dry_run:
        plan = {
            "input": args.input,
            "output": output,
            "multiplier": multiplier,
            "recompute_lengths": recompute,
        }
        print(json.dumps(plan, indent=2))
        return

    try:
        if args.dump:
            with open(args.input, "rb") as fh:
                dump_events(decode(fh.read()))
            return
        rep = run(args.input, multiplier, output, recompute_lengths=recompute)
    except ValueError as exc:
        ap.exit(1, f"{args.input}: {exc}\n")
    except OSError as exc:
        ap.exit(1, f"{exc}\n")
    print(json.dumps(rep, indent=2))


if __name__ == "__main__":
    main()
