"""
aiocast - command line entry point

Run with: python -m aiocast HOST [options]
"""

import argparse
import asyncio
import logging
import sys

from aiocast.client import CastOrchestrator
from aiocast.models import (
    CastRequest,
    Device,
    MediaItem,
    MediaMetadata,
    MediaQueue,
    PlaybackOptions,
    RepeatMode,
    StreamType,
    VolumeDirective,
)
from aiocast.models.request import DEFAULT_DELAY_MS, DEFAULT_LANGUAGE, DEFAULT_PORT
from aiocast.transport.chromecast import ChromecastTransport


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("pychromecast").setLevel(logging.WARNING)


def _volume(value: str) -> float | str:
    try:
        return float(value)
    except ValueError:
        return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="aiocast",
        description="Cast media, queues and spoken messages to a Cast receiver",
    )

    parser.add_argument("host", help="Address of the receiver")
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Receiver port (default: {DEFAULT_PORT})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )

    media = parser.add_argument_group("media")
    media.add_argument(
        "-u",
        "--url",
        action="append",
        default=[],
        help="Media URL; give more than once to load a queue",
    )
    media.add_argument("--content-type", help="MIME type of the media (default: audio/basic)")
    media.add_argument(
        "--stream-type",
        choices=[member.value for member in StreamType],
        default=StreamType.BUFFERED.value,
        help="Stream type of the media (default: BUFFERED)",
    )
    media.add_argument("--image", help="Artwork URL")
    media.add_argument("--title", help="Display title of a single item")
    media.add_argument(
        "--repeat",
        choices=[member.value for member in RepeatMode],
        default=RepeatMode.REPEAT_OFF.value,
        help="Repeat mode of a queue (default: REPEAT_OFF)",
    )

    control = parser.add_argument_group("control")
    control.add_argument("--seek", type=float, help="Seek to this position in seconds")
    control.add_argument("--pause", action="store_true", help="Pause playback")
    control.add_argument("--stop", action="store_true", help="Stop playback")
    control.add_argument("--status", action="store_true", help="Only report status")
    control.add_argument(
        "--volume", type=_volume, help="Volume level in 0-1 or one of max, min, mute"
    )
    control.add_argument("--mute", action="store_true", help="Mute the receiver")
    control.add_argument("--lower-limit", type=float, help="Raise the volume to at least this")
    control.add_argument("--upper-limit", type=float, help="Lower the volume to at most this")

    speech = parser.add_argument_group("speech")
    speech.add_argument("-m", "--message", help="Text to speak")
    speech.add_argument(
        "--language",
        default=DEFAULT_LANGUAGE,
        help=f"Language of the message (default: {DEFAULT_LANGUAGE})",
    )
    speech.add_argument(
        "--delay",
        type=int,
        default=DEFAULT_DELAY_MS,
        help=f"Milliseconds between media and message (default: {DEFAULT_DELAY_MS})",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    return parser.parse_args(argv)


def build_request(args: argparse.Namespace) -> CastRequest:
    """Build the request described by the parsed arguments."""
    stream_type = StreamType(args.stream_type)
    media = None
    queue = None
    if len(args.url) == 1:
        media = MediaItem(
            content_id=args.url[0],
            content_type=args.content_type,
            stream_type=stream_type,
            image_url=args.image,
            metadata=MediaMetadata(title=args.title) if args.title else None,
        )
    elif args.url:
        queue = MediaQueue.from_urls(
            args.url,
            content_type=args.content_type,
            stream_type=stream_type,
            image_url=args.image,
            repeat_mode=RepeatMode(args.repeat),
        )

    options = PlaybackOptions(
        seek=args.seek,
        pause=args.pause,
        stop=args.stop,
        delay=args.delay,
        message=args.message,
        language=args.language,
        status=args.status,
        volume=VolumeDirective(
            level=args.volume,
            muted=True if args.mute else None,
            lower_limit=args.lower_limit,
            upper_limit=args.upper_limit,
        ),
    )
    return CastRequest(
        device=Device(host=args.host, port=args.port),
        media=media,
        queue=queue,
        options=options,
    )


async def run(request: CastRequest) -> int:
    """Run one request and print its result."""
    orchestrator = CastOrchestrator(ChromecastTransport())
    try:
        result = await orchestrator.cast(request)
    finally:
        await orchestrator.close()
    print(result.to_json())
    return 0 if result.ok else 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    logger = logging.getLogger(__name__)

    try:
        request = build_request(args)
    except ValueError as e:
        logger.error("Invalid request: %s", e)
        return 2

    try:
        return asyncio.run(run(request))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
