import argparse
import logging
import os

import uvicorn

from xray_react import state
from xray_react.config import AVAILABLE_UI_MODES
from xray_react.services.source_map import SourceIndex


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the CLI.

    - Resolves the project root (argument, XRAY_REACT_PROJECT_ROOT, nearest
      package.json, current directory).
    - Scans the project sources once.
    - Starts the FastAPI server that resolves component paths to files,
      unless --no-server is given.
    """
    parser = argparse.ArgumentParser(
        prog="xray-react",
        description=(
            "Component source resolver for the xray-react overlay. "
            "By default, scans the project containing the current directory."
        ),
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Project root to scan (default: detected from the current directory).",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host interface to bind the server to (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to run the server on (default: XRAY_REACT_PORT or 8124).",
    )
    parser.add_argument(
        "--mode",
        choices=AVAILABLE_UI_MODES,
        default=None,
        help="Overlay display mode pushed to clients (default: XRAY_REACT_MODE or full).",
    )
    parser.add_argument(
        "--no-server",
        action="store_true",
        help="Scan and print a summary, then exit without starting the server.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO).",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.path is not None and not os.path.exists(args.path):
        raise SystemExit(f"Path does not exist: {os.path.abspath(args.path)}")

    options = state.build_options(
        source_path=args.path,
        port=args.port,
        mode=args.mode,
        server=not args.no_server,
    )
    state.configure(options)
    print(f"📂 Project root: {options.project_root}")

    index = SourceIndex(options.project_root).rebuild()
    state.set_source_index(index)
    print(
        f"📦 {len(index.project_files)} project files, "
        f"{len(index.usage_map)} with JSX usage, {len(index.import_map)} with imports"
    )

    if not options.server:
        return

    url = f"http://{args.host}:{options.port}"
    print(f"🚀 Starting server at {url}")
    print(f"   Editor: {options.editor or 'not set'}")
    print("   Press Ctrl+C to stop.")

    uvicorn.run(
        "xray_react.main:app",
        host=args.host,
        port=options.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
