from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from companion_io.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from companion_io.logging.error_log import ErrorLogBuffer
from companion_io.logging.init import setup_logging
from companion_io.models.config_models import AppConfig
from companion_io.models.entities import EntityKind
from companion_io.models.processing_result import ExportFormat, TransferStatus
from companion_io.services.quota import StoreQuotaPolicy
from companion_io.services.transfer import TransferService
from companion_io.store.base import RecordStore, StoreError
from companion_io.store.memory import MemoryStore
from companion_io.store.postgres import PostgresStore, postgres_connection

"""Command line host for the import / export engine.

    python -m companion_io.cli export clients --format xlsx [--out DIR]
    python -m companion_io.cli export-all [--out DIR]
    python -m companion_io.cli import clients path/to/clients.csv

Exit codes:
    0  the action finished with a success status
    1  fatal: configuration could not be loaded
    2  the action finished with an error status (unsupported kind, bad file, ...),
       or an import ran against the in-memory store and nothing was persisted
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_ERROR_STATUS = 2

KIND_CHOICES = [k.value for k in EntityKind]
FORMAT_CHOICES = [f.value for f in ExportFormat]


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv.

    override=True: .env の値で既存の環境変数を上書き (DB 接続情報を優先)
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="companion_io", description="Record book CSV / XLSX import & export")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to the YAML config")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    exp = sub.add_parser("export", help="Export one collection to a file")
    exp.add_argument("kind", choices=KIND_CHOICES)
    exp.add_argument("--format", dest="fmt", choices=FORMAT_CHOICES, default="csv")
    exp.add_argument("--out", type=Path, default=None, help="Output directory (config output_directory by default)")

    exp_all = sub.add_parser("export-all", help="Export every collection into one XLSX workbook")
    exp_all.add_argument("--out", type=Path, default=None, help="Output directory (config output_directory by default)")

    imp = sub.add_parser("import", help="Import rows from a CSV / XLSX file")
    imp.add_argument("kind", choices=KIND_CHOICES)
    imp.add_argument("file", type=Path)
    return p.parse_args(argv)


def _run(args: argparse.Namespace, cfg: AppConfig, store: RecordStore, error_log: ErrorLogBuffer) -> TransferStatus:
    policy = StoreQuotaPolicy(store, paid=cfg.plan.paid, ceiling=cfg.plan.client_limit)
    service = TransferService(store, policy, error_log=error_log)
    if args.command in ("export", "export-all"):
        out_dir = args.out if args.out is not None else Path(cfg.output_directory)
        if args.command == "export-all":
            return service.export_all(out_dir)
        return service.export(args.kind, args.fmt, out_dir)
    return service.import_file(args.kind, args.file)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときだけ sys.argv を読む (テストから main([]) を呼べるように)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        for h in logger.handlers:
            h.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer(Path(cfg.logs_directory))

    # DISABLE_DB_CONNECT=1 でテスト時は常にメモリストア
    use_db = cfg.store_backend == "postgres" and os.getenv("DISABLE_DB_CONNECT") != "1"
    store_mode = "memory"
    if use_db:
        try:
            with postgres_connection(cfg.database) as cur:
                store = PostgresStore(cur)
                store.ensure_schema()
                store_mode = "postgres"
                status = _run(args, cfg, store, error_log)
        except StoreError as e:
            logger.info(f"DB connection failed -> fallback to memory store: {e}")
            store_mode = "memory"
            status = _run(args, cfg, MemoryStore(), error_log)
    else:
        status = _run(args, cfg, MemoryStore(), error_log)

    logger.debug(f"store={store_mode}")
    if store_mode == "memory" and status.ok:
        # メモリストアはプロセス終了で消える
        if args.command == "import":
            logger.warning("memory store: imported records were not persisted (set store.backend: postgres)")
            return EXIT_ERROR_STATUS
        logger.warning("memory store: exported from the in-memory store, not the database")
    return EXIT_SUCCESS if status.ok else EXIT_ERROR_STATUS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
