from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, load_config
from ..excel.reader import SheetReadError
from ..excel.template import write_template
from ..logging.init import log_summary, setup_logging
from ..logging.issue_log import CellIssueLog
from ..models.query import RateQuery
from ..services.cache import RuleSetCache
from ..services.data_source import DataOrigin, LoadStatus, load_current, load_spreadsheet, reset_to_default
from ..services.normalizer import EmptyInputError
from ..services.resolver import NoMatchError, find_rule
from ..services.state import RuleSetHolder
from ..services.summary import render_summary_line

"""CLI entrypoint.

Subcommands:
- load FILE      normalize a spreadsheet and keep it as the current data (cached)
- quote          price for --origin / --destination / --weight
- options        origins, destinations and fixed weights available
- preview        columns and the first raw rows of the current data
- reset          forget the uploaded data, back to the default spreadsheet
- template FILE  write a sample spreadsheet

Config path: --config, else $FREIGHT_RATES_CONFIG, else config/freight.yml.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_NO_MATCH = 3

CONFIG_ENV_VAR = "FREIGHT_RATES_CONFIG"


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv (values override the process environment)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="freight-rates", description="Freight rate lookup from spreadsheet rate tables")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help="Config file (YAML)")
    sub = p.add_subparsers(dest="command", required=True)

    load_p = sub.add_parser("load", help="Load a rate spreadsheet and save it as the current data")
    load_p.add_argument("file", type=Path)
    load_p.add_argument("--sheet", default=None, help="Sheet name (default: config / first sheet)")

    quote_p = sub.add_parser("quote", help="Look up the price for a route and weight")
    quote_p.add_argument("--origin", required=True)
    quote_p.add_argument("--destination", required=True)
    quote_p.add_argument("--weight", required=True, type=float)

    sub.add_parser("options", help="List origins, destinations and fixed weights")
    sub.add_parser("preview", help="Show columns and the first rows of the current data")
    sub.add_parser("reset", help="Clear the uploaded data and reload the default spreadsheet")

    tpl_p = sub.add_parser("template", help="Write a sample rate spreadsheet")
    tpl_p.add_argument("file", type=Path)
    return p.parse_args(argv)


def _config_path(args: argparse.Namespace) -> Path:
    if args.config is not None:
        return args.config
    env_path = os.getenv(CONFIG_ENV_VAR)
    return Path(env_path) if env_path else DEFAULT_CONFIG_PATH


def _restore(cfg: AppConfig, holder: RuleSetHolder, logger: logging.Logger) -> LoadStatus:
    status = load_current(holder, RuleSetCache(Path(cfg.cache_file)), Path(cfg.default_file), sheet=cfg.sheet)
    if status.origin is DataOrigin.NONE:
        logger.error(status.message)
    else:
        logger.debug(status.message)
    return status


def _report_load(status: LoadStatus, logger: logging.Logger) -> None:
    result = status.result
    if result is None:
        return
    if result.issues:
        issue_log = CellIssueLog()
        issue_log.extend(result.issues)
        path = issue_log.flush()
        logger.info(f"{len(result.issues)} unparsable cells recorded in {path}")
    if status.origin is DataOrigin.UPLOAD and not status.cached:
        logger.warning(status.message)
    else:
        logger.info(status.message)
    # log_summary が "SUMMARY " を付けるので先頭ラベルを除く
    log_summary(render_summary_line(result)[len("SUMMARY "):])


def _cmd_load(args: argparse.Namespace, cfg: AppConfig, logger: logging.Logger) -> int:
    holder = RuleSetHolder()
    try:
        status = load_spreadsheet(
            args.file,
            holder,
            sheet=args.sheet or cfg.sheet,
            cache=RuleSetCache(Path(cfg.cache_file)),
        )
    except SheetReadError as e:
        logger.error(f"read: {e}")
        return EXIT_FATAL
    except EmptyInputError as e:
        logger.error(f"empty spreadsheet: {e}")
        return EXIT_FATAL
    _report_load(status, logger)
    return EXIT_SUCCESS


def _cmd_quote(args: argparse.Namespace, cfg: AppConfig, logger: logging.Logger) -> int:
    holder = RuleSetHolder()
    # 復元は DEBUG のみ (SUMMARY と不正セルログは load / reset 時に出す)
    _restore(cfg, holder, logger)
    snapshot = holder.current
    if snapshot is None:
        return EXIT_FATAL
    query = RateQuery(origin=args.origin, destination=args.destination, weight=args.weight)
    try:
        rule = find_rule(snapshot, query)
    except NoMatchError as e:
        logger.warning(f"no matching rate rule: {e}")
        return EXIT_NO_MATCH
    logger.debug(f"matched rule {rule.to_dict()}")
    print(f"{rule.price:.{cfg.price_precision}f}")
    return EXIT_SUCCESS


def _cmd_options(args: argparse.Namespace, cfg: AppConfig, logger: logging.Logger) -> int:
    holder = RuleSetHolder()
    _restore(cfg, holder, logger)
    snapshot = holder.current
    if snapshot is None:
        return EXIT_FATAL
    print("origins: " + ", ".join(snapshot.origin_options()))
    print("destinations: " + ", ".join(snapshot.destination_options()))
    weights = snapshot.weight_options()
    if weights:
        print("weights: " + ", ".join(f"{w:g} kg" for w in weights))
    return EXIT_SUCCESS


def _cmd_preview(args: argparse.Namespace, cfg: AppConfig, logger: logging.Logger) -> int:
    holder = RuleSetHolder()
    _restore(cfg, holder, logger)
    snapshot = holder.current
    if snapshot is None:
        return EXIT_FATAL
    print(f"rules={len(snapshot)} columns={list(snapshot.columns)}")
    for raw in snapshot.preview(cfg.preview_rows):
        print("  " + ", ".join(f"{c}={raw.get(c, '')}" for c in snapshot.columns))
    return EXIT_SUCCESS


def _cmd_reset(args: argparse.Namespace, cfg: AppConfig, logger: logging.Logger) -> int:
    holder = RuleSetHolder()
    status = reset_to_default(holder, RuleSetCache(Path(cfg.cache_file)), Path(cfg.default_file), sheet=cfg.sheet)
    logger.info("uploaded data cleared")
    if status.origin is DataOrigin.NONE:
        logger.warning(status.message)
        return EXIT_SUCCESS
    _report_load(status, logger)
    return EXIT_SUCCESS


def _cmd_template(args: argparse.Namespace, cfg: AppConfig, logger: logging.Logger) -> int:
    try:
        path = write_template(args.file)
    except OSError as e:
        logger.error(f"template: {e}")
        return EXIT_FATAL
    logger.info(f"template written to {path}")
    return EXIT_SUCCESS


_COMMANDS = {
    "load": _cmd_load,
    "quote": _cmd_quote,
    "options": _cmd_options,
    "preview": _cmd_preview,
    "reset": _cmd_reset,
    "template": _cmd_template,
}


def main(argv: list[str] | None = None) -> int:
    # NOTE: main([]) をテストから呼ぶ場合に sys.argv が混入しないよう None の時だけ読む
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    config_path = _config_path(args)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    return _COMMANDS[args.command](args, cfg, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
