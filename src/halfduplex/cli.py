from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Callable, TextIO

from .client import HalfDuplexTelnet
from .constants import DEFAULT_CHUNK_SIZE, DEFAULT_CONNECT_TIMEOUT_S, DEFAULT_PING_OPTION, DEFAULT_PORT
from .errors import ConfigurationError, Disconnected

logger = logging.getLogger(__name__)

Connector = Callable[[argparse.Namespace], HalfDuplexTelnet]


def open_session(args: argparse.Namespace) -> HalfDuplexTelnet:
    return HalfDuplexTelnet.connect(
        args.host,
        args.port,
        ping_option=args.ping_option,
        timeout=args.connect_timeout,
        chunk_size=args.chunk_size,
    )


def _text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def cmd_shell(args: argparse.Namespace, connect: Connector, stdin: TextIO, stdout: TextIO) -> int:
    def emit(command: str | None, output: bytes) -> None:
        if args.json:
            stdout.write(json.dumps({"command": command, "output": _text(output)}) + "\n")
        else:
            stdout.write(_text(output))
        stdout.flush()

    with connect(args) as tn:
        emit(None, tn.read())
        for line in stdin:
            emit(line.rstrip("\r\n"), tn.command(line))
    return 0


def cmd_run(args: argparse.Namespace, connect: Connector, stdin: TextIO, stdout: TextIO) -> int:
    results = []
    with connect(args) as tn:
        banner = tn.read()
        logger.debug("banner: %d bytes", len(banner))
        for command in args.commands:
            results.append({"command": command, "output": _text(tn.command(command))})

    if args.json:
        stdout.write(json.dumps(results, indent=2) + "\n")
    else:
        for r in results:
            stdout.write(r["output"])
    stdout.flush()
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="halfduplex",
        description="Telnet client that reads each command's full output (ping/pong heuristic).",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(x: argparse.ArgumentParser) -> None:
        x.add_argument("--host", required=True)
        x.add_argument("--port", type=int, default=DEFAULT_PORT)
        x.add_argument("--ping-option", type=int, default=DEFAULT_PING_OPTION, help="option code 40-239 used as the ping")
        x.add_argument("--connect-timeout", type=float, default=DEFAULT_CONNECT_TIMEOUT_S)
        x.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE)
        x.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
        x.add_argument("--json", action="store_true")

    shell = sub.add_parser("shell", help="interactive session: one stdin line per command")
    add_common(shell)
    shell.set_defaults(func=cmd_shell)

    run = sub.add_parser("run", help="run commands and print their output")
    add_common(run)
    run.add_argument("commands", nargs="+")
    run.set_defaults(func=cmd_run)

    return p


def main(
    argv: list[str] | None = None,
    connect: Connector = open_session,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")

    try:
        return int(args.func(args, connect, stdin or sys.stdin, stdout or sys.stdout))
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 2
    except Disconnected as exc:
        logger.error("%s", exc)
        return 1
    except OSError as exc:
        logger.error("connection to %s:%d failed: %s", args.host, args.port, exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
