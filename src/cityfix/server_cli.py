"""CLI entry point for the CityFix API server."""

import argparse
import os


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="cityfix-server",
        description="CityFix API server: civic issue reports, uploads and classification",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=5000, help="Bind port (default: 5000)")
    parser.add_argument(
        "--local",
        action="store_true",
        help="Local dev mode: SQLite database file, console logs",
    )
    parser.add_argument(
        "--image-store",
        choices=["database", "filesystem"],
        help="Where uploaded images are kept (default: from CITYFIX_IMAGE_STORE)",
    )
    args = parser.parse_args(argv)

    # Settings are read at import time, so these must be set before the app loads
    if args.local:
        os.environ["CITYFIX_LOCAL_MODE"] = "1"
    if args.image_store:
        os.environ["CITYFIX_IMAGE_STORE"] = args.image_store

    import uvicorn

    uvicorn.run("cityfix.main:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
