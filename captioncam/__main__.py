"""
CaptionCam command line.

Usage:
  python -m captioncam serve                           # Caption service on :8000
  python -m captioncam replay events.jsonl             # Print captions of a recording
  python -m captioncam replay events.jsonl -o out.txt  # ...and export the transcript
"""

import argparse
import logging
import sys
from dataclasses import replace

from captioncam import __version__
from captioncam.config import get_settings
from captioncam.context import CaptionContext
from captioncam.recognition import ReplayRecognizer, load_script
from captioncam.utils import setup_logging

logger = logging.getLogger(__name__)


def run_replay(args: argparse.Namespace) -> int:
    """Feed a recorded script through a CaptionContext and print every caption."""
    try:
        steps = load_script(args.script)
    except (OSError, ValueError) as e:
        print(f"Cannot read {args.script}: {e}", file=sys.stderr)
        return 2

    settings = get_settings()
    if args.max_characters:
        settings = replace(settings, max_characters=args.max_characters)

    def print_caption(text: str) -> None:
        if text:
            print(text)

    recognizer = ReplayRecognizer(steps)
    context = CaptionContext(
        settings=settings,
        recognizer_factory=lambda: recognizer,
        language=args.language,
        on_caption=print_caption,
        on_critical=lambda message: print(f"CRITICAL: {message}", file=sys.stderr),
        auto_clear=False,
    )
    if not context.prepare() or not context.start():
        return 1

    recognizer.play()
    context.close()

    if args.output:
        context.export_transcript(args.output)
        print(f"Transcript: {args.output}")
    if args.log_output:
        context.export_operator_log(args.log_output)
        print(f"Operator log: {args.log_output}")

    return 1 if context.critical_message else 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("captioncam.service:app", host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description=f"CaptionCam v{__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the caption WebSocket service")
    serve.add_argument("--host", default="0.0.0.0", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Bind port")
    serve.set_defaults(func=run_serve)

    replay = subparsers.add_parser("replay", help="Replay a recorded signal script")
    replay.add_argument("script", help="JSON Lines file of recognizer signals")
    replay.add_argument("-o", "--output", help="Write the transcript to this file")
    replay.add_argument("--log-output", help="Write the operator log to this file")
    replay.add_argument("--language", help="Recognition language (default: CAPTION_LANGUAGE)")
    replay.add_argument("--max-characters", type=int, help="Caption window budget")
    replay.set_defaults(func=run_replay)

    args = parser.parse_args(argv)
    setup_logging(level="DEBUG" if args.debug else None)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
