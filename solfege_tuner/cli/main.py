"""Main entry point for the Solfege Tuner CLI."""

import argparse
import sys
import threading
from typing import Callable, List, Optional

from ..logger import get_logger
from ..logging_config import setup_logging
from ..core.config import ConfigManager
from ..core.factory import ComponentFactory
from ..note_types import DetectionState
from ..note_utils import FLAT_NOTES
from ..services.detection_scheduler import DetectionScheduler
from ..services.frame_pacer import RefreshPacer

logger = get_logger(__name__)

QUIT_COMMANDS = ("q", "quit", "exit")


class ConsoleDisplay:
    """Prints detection results whenever the note or syllable changes."""

    def __init__(self, scheduler: DetectionScheduler, out=None):
        self._scheduler = scheduler
        self._out = out or sys.stdout
        self._last: Optional[DetectionState] = None
        self.failure: Optional[Exception] = None

        scheduler.events.on_state_published(self.show_state)
        scheduler.events.on_active_changed(self.show_active)
        scheduler.events.on_capture_failed(self.show_failure)

    def show_state(self, state: DetectionState) -> None:
        last = self._last
        self._last = state
        if last and (last.note, last.syllable) == (state.note, state.syllable):
            return
        print(
            f"{state.note:<4} {state.pitch_display:>8} Hz   {state.syllable:<3} (root {state.root})",
            file=self._out,
            flush=True,
        )

    def show_active(self, active: bool) -> None:
        print("Listening..." if active else "Stopped.", file=self._out, flush=True)

    def show_failure(self, error: Exception) -> None:
        self.failure = error
        print(f"ERROR: audio capture unavailable: {error}", file=sys.stderr, flush=True)


def handle_command(
    command: str, scheduler: DetectionScheduler, pacer: RefreshPacer, out=None
) -> None:
    """Apply one line of console input on the pacer thread."""
    out = out or sys.stdout
    command = command.strip()
    if not command:
        return
    if command.lower() in QUIT_COMMANDS:
        pacer.stop()
    elif command.lower() == "stop":
        scheduler.stop()
    elif command.lower() == "start":
        scheduler.start()
    else:
        try:
            scheduler.set_root(command)
            print(f"Root is now {scheduler.root}", file=out, flush=True)
        except ValueError as e:
            print(f"{e}. Choose one of: {' '.join(FLAT_NOTES)}", file=out, flush=True)


def _read_commands(scheduler: DetectionScheduler, pacer: RefreshPacer) -> None:
    """Forward stdin lines to the pacer thread until EOF."""
    for line in sys.stdin:
        pacer.call_soon_threadsafe(lambda line=line: handle_command(line, scheduler, pacer))
        if line.strip().lower() in QUIT_COMMANDS:
            return


def run_detection(
    scheduler: DetectionScheduler,
    pacer: RefreshPacer,
    duration: Optional[float] = None,
    until: Optional[Callable[[], bool]] = None,
    interactive: bool = False,
) -> int:
    """Run the detection loop on the current thread.

    Returns:
        Exit code (0 for success, 1 if the capture could not be opened)
    """
    display = ConsoleDisplay(scheduler)

    if interactive:
        print(
            "Type a root note (e.g. D, F#, Bb) to change the scale, "
            "'stop'/'start' to pause, 'q' to quit.",
            flush=True,
        )
        threading.Thread(
            target=_read_commands, args=(scheduler, pacer), daemon=True
        ).start()

    def finished() -> bool:
        return display.failure is not None or (until is not None and until())

    scheduler.start()
    try:
        pacer.run(duration=duration, until=finished)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        scheduler.stop()

    logger.info(f"Processed {scheduler.ticks_processed} ticks")
    return 1 if display.failure is not None else 0


def list_devices() -> int:
    """Print the available audio input devices."""
    from ..audio.live_capture import list_input_devices

    devices = list_input_devices()
    if not devices:
        print("No audio input devices found.")
        return 1

    print("Available input devices:")
    print("-" * 70)
    for device in devices:
        print(f"Device {device['id']}: {device['name']}")
        print(f"  Max input channels: {device['max_input_channels']}")
        print(f"  Default sample rate: {device['default_samplerate']} Hz")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Solfege Tuner - live pitch detection with movable-doh solfege"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--root", default=None, help="Root note of the scale (default: from config, C)"
    )
    common.add_argument(
        "--duration", type=float, default=None, help="Stop after this many seconds"
    )
    common.add_argument(
        "--estimator",
        choices=["autocorrelation", "yin"],
        default=None,
        help="Pitch estimator to use (default: from config, autocorrelation)",
    )
    common.add_argument(
        "--config-dir", default=None, help="Configuration directory (default: ~/.config/solfege_tuner)"
    )
    common.add_argument("--debug", action="store_true", help="Enable debug logging")

    listen_parser = subparsers.add_parser(
        "listen", parents=[common], help="Detect pitch from a live input device"
    )
    listen_parser.add_argument(
        "--device", type=int, default=None, help="Audio input device ID (default: system default)"
    )
    listen_parser.add_argument(
        "--sample-rate", type=int, default=None, help="Requested sample rate in Hz"
    )

    file_parser = subparsers.add_parser(
        "file", parents=[common], help="Replay an audio file through the detector"
    )
    file_parser.add_argument("path", help="Path to a WAV (or other libsndfile) file")
    file_parser.add_argument("--loop", action="store_true", help="Loop the file")
    file_parser.add_argument(
        "--gain", type=float, default=1.0, help="Gain applied to the samples"
    )

    subparsers.add_parser("devices", help="List audio input devices")
    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.command is None:
        parser.print_help()
        return 1

    setup_logging(level="DEBUG" if getattr(parsed_args, "debug", False) else None)

    if parsed_args.command == "devices":
        return list_devices()

    factory = ComponentFactory(ConfigManager(parsed_args.config_dir))
    overrides = {}
    if parsed_args.root:
        overrides["root"] = parsed_args.root

    until = None
    if parsed_args.command == "listen":
        capture_args = {}
        if parsed_args.device is not None:
            capture_args["device_id"] = parsed_args.device
        if parsed_args.sample_rate:
            capture_args["sample_rate"] = parsed_args.sample_rate
        capture = factory.create_capture("live", **capture_args)
    else:
        capture = factory.create_capture(
            "file", file_path=parsed_args.path, loop=parsed_args.loop, gain=parsed_args.gain
        )

        def until() -> bool:
            return capture.finished

    try:
        pacer = factory.create_pacer()
        scheduler = factory.create_scheduler(
            capture,
            pacer=pacer,
            estimator=factory.create_estimator(parsed_args.estimator),
            **overrides,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except ImportError as e:
        print(
            f"Error: {e}. Install the optional backend with: pip install 'solfege-tuner[yin]'",
            file=sys.stderr,
        )
        return 2

    return run_detection(
        scheduler,
        pacer,
        duration=parsed_args.duration,
        until=until,
        interactive=parsed_args.command == "listen" and sys.stdin.isatty(),
    )


if __name__ == "__main__":
    sys.exit(main())
