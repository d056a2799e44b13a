"""Command line interface for ftp_uploader."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.logging import RichHandler

from .cli_progress import QueueProgressDisplay, render_configuration_summary
from .models import Behavior, Credentials, UploadConfig
from .orchestrator import FileCollector, Uploader
from .utils.paths import join_remote


DEFAULT_FTP_PORT = 21


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug, --log-level or LOG_LEVEL is
    provided. Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    env_level = os.getenv("LOG_LEVEL")
    if silent or (not debug and not log_level and not env_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, (log_level or env_level).upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    # aioftp logs every FTP command at INFO
    logging.getLogger("aioftp").setLevel(logging.DEBUG if debug else logging.WARNING)
    return logging.getLevelName(level)


def _normalize_dest(dest: Optional[str]) -> str:
    return join_remote((dest or "").strip())


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _resolve_credentials(args: argparse.Namespace) -> Credentials:
    """Command line options first, then FTP_* environment variables."""
    host = args.host or os.getenv("FTP_HOST")
    if not host:
        raise CLIError("no FTP host given (use --host or FTP_HOST)")

    raw_port = args.port if args.port is not None else os.getenv("FTP_PORT", DEFAULT_FTP_PORT)
    try:
        port = int(raw_port)
    except (TypeError, ValueError) as exc:
        raise CLIError(f"invalid FTP port: {raw_port}") from exc

    return Credentials(
        host=host,
        port=port,
        user=args.user or os.getenv("FTP_USER") or "anonymous",
        password=args.password if args.password is not None else os.getenv("FTP_PASSWORD", ""),
    )


async def _run_upload(
    source: Path,
    dest: str,
    credentials: Credentials,
    behavior: Behavior,
) -> int:
    descriptors = FileCollector.collect(source, dest)
    if not descriptors:
        raise CLIError(f"nothing to upload in {source}")

    display = QueueProgressDisplay()
    async with Uploader(credentials, behavior, UploadConfig()) as uploader:
        display.attach(uploader)
        status = await uploader.upload(descriptors)

    return 0 if status.all_success else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ftp-up",
        description="Upload a file or folder to an FTP server, one file at a time.",
    )
    parser.add_argument("source", nargs="?", type=Path, help="Source file or folder path")
    parser.add_argument(
        "-g",
        "--dest",
        default=None,
        help="Destination folder on the server (example: /backups/2026)",
    )
    parser.add_argument("--host", default=None, help="FTP host (default from FTP_HOST)")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help=f"FTP port (default from FTP_PORT or {DEFAULT_FTP_PORT})",
    )
    parser.add_argument("--user", default=None, help="FTP user (default from FTP_USER)")
    parser.add_argument(
        "--password",
        default=None,
        help="FTP password (default from FTP_PASSWORD)",
    )
    parser.add_argument(
        "-b",
        "--behavior",
        default=Behavior.VERIFY.value.lower(),
        choices=[b.value.lower() for b in Behavior],
        help="What to do with files that already exist on the server (default: verify)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="ftp-up (from ftp_uploader)",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if args.source is None:
        parser.print_help()
        return 0

    source = Path(args.source).expanduser()
    if not source.exists():
        print(f"ERROR: source does not exist: {source}", file=sys.stderr)
        return 1

    try:
        credentials = _resolve_credentials(args)
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    behavior = Behavior.parse(args.behavior)
    dest = _normalize_dest(args.dest)
    source_kind = "file" if source.is_file() else "folder" if source.is_dir() else "unknown"
    render_configuration_summary(
        {
            "Source": str(source),
            "Source Type": source_kind,
            "Dest": dest,
            "Server": f"{credentials.host}:{credentials.port}",
            "User": credentials.user,
            "Behavior": behavior.value,
            "Env File": str(used_env_file) if used_env_file else "-",
            "Logging": effective_log_mode,
        }
    )

    try:
        return asyncio.run(
            _run_upload(
                source=source,
                dest=dest,
                credentials=credentials,
                behavior=behavior,
            )
        )
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
