"""
Start the edge service: `python -m app.server --listen [::]:3319 --base-url https://zaiko.io`.
"""

import argparse
import logging
from typing import Optional, Sequence, Tuple

import uvicorn

from .core.config import settings
from .main import create_app

logger = logging.getLogger(__name__)


def parse_listen(value: str) -> Tuple[str, int]:
    """Split "host:port" / "[v6]:port" into (host, port)."""
    host, sep, port = value.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise argparse.ArgumentTypeError(f"invalid listen address: {value!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Zaiko edge service")
    parser.add_argument("-l", "--listen", type=parse_listen, default=parse_listen(settings.LISTEN),
                        help="Listen address, e.g. [::]:3319 or 127.0.0.1:8000.")
    parser.add_argument("-b", "--base-url", default=settings.BASE_URL,
                        help="Upstream event site base URL.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host, port = args.listen
    app_settings = settings.model_copy(update={"BASE_URL": args.base_url})
    logger.info("[server] listening on %s:%d (upstream %s)", host, port, app_settings.BASE_URL)
    uvicorn.run(create_app(app_settings), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
