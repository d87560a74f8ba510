import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Sequence

from .client import request_products
from .credentials import CredentialStore
from .errors import AuthRejected, SocketSetupError
from .log import configure_logging
from .server import EXIT_FAILURE, EXIT_OK, ServerConfig, VectorServer
from .vectors import VectorPolicy

"""
run_server.py — single entry point for the server and a one-shot client.

Quick examples:
  Server:  python -m vecauth.run_server -b users.txt -j sessions.log -p 9090
  Forever: python -m vecauth.run_server -b users.txt -j sessions.log -p 9090 -n 0
  Client:  python -m vecauth.run_server --mode client -p 9090 \
               --user alice --secret secret123 --vector 10,10,10 --vector 2,3,4

No arguments (or -h) prints the help text and exits with status 1.
"""

logger = logging.getLogger("vecauth.run")


# -------------------------
# Process runners (thin wrappers)
# -------------------------

async def run_server(config: ServerConfig) -> int:
    """Serve according to config; returns the process exit status."""
    server = VectorServer(config, CredentialStore(config.base_path))
    try:
        await server.open()
    except SocketSetupError:
        return EXIT_FAILURE
    return await server.serve()


async def run_client(args: argparse.Namespace) -> int:
    """Authenticate, send the --vector values, print one product per line."""
    vectors = args.vector or []
    try:
        products = await request_products(args.address, args.port, args.user, args.secret, vectors)
    except AuthRejected as exc:
        print(exc.token, file=sys.stderr)
        return EXIT_FAILURE
    except OSError as exc:
        print(f"connection failed: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    for p in products:
        print(p)
    return EXIT_OK


# -------------------------
# Argument parsing
# -------------------------

def parse_vector(text: str) -> List[int]:
    """'1,2,3' → [1, 2, 3]; an empty string is the empty vector."""
    text = text.strip()
    if not text:
        return []
    values = [int(part) for part in text.split(",")]
    for v in values:
        if not 0 <= v <= 0xFFFF:
            raise argparse.ArgumentTypeError(f"element {v} does not fit in u16")
    return values


def build_parser() -> argparse.ArgumentParser:
    # -h is ours so that help exits with status 1 instead of argparse's 0.
    p = argparse.ArgumentParser(prog="vecauth-server", add_help=False,
                                description="Authenticated vector-product server")
    p.add_argument("-h", "--help", action="store_true", help="Show help")
    p.add_argument("--mode", choices=["server", "client"], default="server")
    p.add_argument("-b", "--base", help="Credential store (username:secret per line)")
    p.add_argument("-j", "--journal", help="Session journal file")
    p.add_argument("-l", "--log", default="journal.txt", help="Error log file")
    p.add_argument("-p", "--port", type=int, help="Port")
    p.add_argument("-a", "--address", default="127.0.0.1", help="Bind/connect address")
    p.add_argument("-n", "--max-connections", type=int, default=1,
                   help="Sessions to serve before exiting (0 = until interrupted)")
    p.add_argument("--policy", choices=[v.value for v in VectorPolicy],
                   default=VectorPolicy.HARDENED.value,
                   help="hardened: reject vectors over 10000 elements; permissive: no cap")

    # client mode
    p.add_argument("--user")
    p.add_argument("--secret")
    p.add_argument("--vector", action="append", type=parse_vector,
                   help="Comma-separated u16 elements (repeatable)")
    return p


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    if not args.base or not args.journal or args.port is None:
        raise SystemExit("--base, --journal and --port are required for server mode")
    return ServerConfig(
        base_path=args.base,
        journal_path=args.journal,
        log_path=args.log,
        address=args.address,
        port=args.port,
        max_connections=args.max_connections,
        vector_policy=VectorPolicy(args.policy),
    )


# -------------------------
# Main entrypoint
# -------------------------

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Dispatch into the chosen mode; returns the exit status."""
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    if not argv:
        parser.print_help()
        return EXIT_FAILURE
    args = parser.parse_args(argv)
    if args.help:
        parser.print_help()
        return EXIT_FAILURE

    if args.mode == "client":
        if args.port is None or not args.user or args.secret is None:
            raise SystemExit("--port, --user and --secret are required for client mode")
        configure_logging(console=True)
        return asyncio.run(run_client(args))

    config = config_from_args(args)
    configure_logging(config.log_path, config.journal_path)
    try:
        return asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
