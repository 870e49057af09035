import argparse
import sys

import uvicorn
from dotenv import load_dotenv

from learnx.backend.api import create_app
from learnx.core.config import get_api_host, get_api_port, load_settings, setup_logging
from learnx.core.errors import ConfigurationError


def main():
    """Main entry point for the LearnX functions API."""
    load_dotenv()
    setup_logging()

    parser = argparse.ArgumentParser(
        description="Serve the LearnX request handlers over HTTP"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=get_api_host(),
        help="Interface to bind (default: api.host from config.yaml)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=get_api_port(),
        help="Port to listen on (default: api.port from config.yaml)",
    )

    args = parser.parse_args()

    # Fail fast before binding the port
    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Set the missing variables in your environment or .env file.", file=sys.stderr)
        sys.exit(1)

    print(f"Serving LearnX functions on http://{args.host}:{args.port}")
    uvicorn.run(create_app(settings), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
