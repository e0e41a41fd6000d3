"""
Terminal adapter for the image transform tool.

Architectural role:
- Drives the same `TransformController` as the HTTP page from a shell.
- Selects a local photo, runs one generation, and writes the download
  artifact to disk.

Request lifecycle:
1. Select the photo path (read failures end the run).
2. Run one generation.
3. Print inline error output, or write the result bytes to the output path.

Error handling strategy:
- Read failures and generation failures print to stderr and exit with 1.
- KeyboardInterrupt exits with 130 without traceback output.

Side effects:
- Writes exactly one file (the download artifact) on success.
"""

import argparse
import asyncio
import base64
import binascii
import logging
import os
import sys

from rainy_dhaka.core.controller import TransformController
from rainy_dhaka.image.provider_config import DOWNLOAD_FILE_NAME


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rainy-dhaka",
        description="Place the person in a photo into a rainy old-Dhaka street scene.",
    )
    parser.add_argument("photo", help="Path to the photo to transform.")
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help=f"Where to write the generated image (default: ./{DOWNLOAD_FILE_NAME}).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable info logging.")
    return parser


def _print_alerts(view) -> bool:
    for message in view.alerts:
        print(message, file=sys.stderr)
    return bool(view.alerts)


def run(photo: str, output: str | None = None, controller: TransformController | None = None) -> int:
    """
    Run one select -> generate -> download cycle.

    Returns:
        Process exit code.
    """
    controller = controller or TransformController()

    view = controller.select_path(photo)
    if _print_alerts(view) or not view.generate_enabled:
        return 1

    print(f"Selected: {view.upload_label}")
    print("Generating...")

    view = asyncio.run(controller.generate())
    _print_alerts(view)

    if view.errors:
        for error in view.errors:
            print(error, file=sys.stderr)
        return 1

    artifact = controller.download()
    if artifact is None:
        _print_alerts(controller.view())
        return 1

    try:
        body = base64.b64decode(artifact.data)
    except (binascii.Error, ValueError):
        print("Result is not valid base64; nothing written.", file=sys.stderr)
        return 1

    target = output or os.path.join(os.getcwd(), artifact.file_name)
    with open(target, "wb") as f:
        f.write(body)

    print(f"Saved {artifact.mime_type or 'image'} to {target}")
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return run(args.photo, args.output)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
