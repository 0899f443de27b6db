"""Thin CLI entry point — builds a config and calls the extractor."""

import argparse
import json
import logging
import sys
from pathlib import Path

from clipfetch.config import load_config
from clipfetch.engine import ClipExtractor
from clipfetch.models import Failure


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="clipfetch",
        description="clipfetch — download a time range of an online video with yt-dlp.",
    )
    parser.add_argument("--config", "-c", type=Path, help="Path to a JSON config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log tool output")
    sub = parser.add_subparsers(dest="command")

    clip = sub.add_parser("clip", help="Download one clip")
    clip.add_argument("url", help="Video page URL")
    clip.add_argument("--start", type=float, required=True, help="Start offset in seconds")
    clip.add_argument("--end", type=float, required=True, help="End offset in seconds")
    clip.add_argument("--title", type=str, help="Title used for the output filename")
    clip.add_argument("--output", "-o", type=Path, help="Output file path")

    sub.add_parser("health", help="Check that yt-dlp is available")

    serve = sub.add_parser("serve", help="Launch the HTTP API")
    serve.add_argument("--port", type=int, default=8321, help="Port to listen on")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    if args.command == "serve":
        from clipfetch.web import create_app
        app = create_app(config)
        print(f"clipfetch API: http://{args.host}:{args.port}/api/clip-video")
        app.run(host=args.host, port=args.port, debug=False, threaded=True)
        return

    extractor = ClipExtractor(config)

    if args.command == "health":
        status = extractor.health()
        print(json.dumps(status, indent=2))
        sys.exit(0 if status["status"] == "healthy" else 1)

    result = extractor.extract({
        "url": args.url,
        "startTime": args.start,
        "endTime": args.end,
        "videoTitle": args.title,
    })
    if isinstance(result, Failure):
        print(f"Error: {result.message}", file=sys.stderr)
        if result.details:
            print(result.details, file=sys.stderr)
        sys.exit(1)

    output = args.output or Path(result.filename)
    try:
        output.write_bytes(result.content)
    except OSError as e:
        print(f"Error: could not write {output}: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Done! Output: {output} ({result.byte_size} bytes)")
