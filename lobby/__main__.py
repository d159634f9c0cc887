import argparse
import asyncio
import logging

from tractor.models import RoomConfig
from .server import RoomServer


def main() -> None:
    parser = argparse.ArgumentParser(description="Tractor table room server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--seed", type=int, default=None, help="Seed every room's shuffles (testing)")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG shows every applied event)")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    server = RoomServer(RoomConfig(seed=args.seed))
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
