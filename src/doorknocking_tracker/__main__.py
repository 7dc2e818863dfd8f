from __future__ import annotations

import argparse
import json
import os
import sys
from typing import List, Optional

from .config import get_settings, reset_settings_cache
from .directory import PropertyDirectory
from .errors import TrackerError
from .export import write_export
from .ledger import ActivityLedger
from .logging_setup import configure_logging
from .models import ActivityAction
from .storage import SQLiteKeyValueStore


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="doorknocking_tracker",
        description="Doorknocking tracker CLI",
    )
    parser.add_argument(
        "--db",
        default=settings.state_db,
        help="SQLite path for the local key-value store",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (DEBUG, INFO, etc.)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        default=settings.log_json,
        help="Emit one JSON object per log line",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_lookup = sub.add_parser("lookup", help="Find the property record for an address")
    p_lookup.add_argument("--address", required=True)
    p_lookup.add_argument(
        "--properties",
        default=settings.properties_csv,
        help="Property dataset CSV",
    )
    p_lookup.add_argument(
        "--legacy-csv",
        action="store_true",
        help="Use the plain comma-split dataset reader",
    )

    p_log = sub.add_parser("log", help="Record an activity button press")
    p_log.add_argument(
        "--action",
        required=True,
        help="Flyer Dropped Off, Conversation Had, Don't Contact Me Again (or flyer/conversation/dnc)",
    )
    p_log.add_argument("--location", default="", help="Current street address")

    sub.add_parser("list", help="List logged activities, newest first")
    sub.add_parser("stats", help="Show today's activity counts")

    p_export = sub.add_parser("export", help="Write the activity log as CSV")
    p_export.add_argument("--output-dir", default=settings.export_dir)
    p_export.add_argument(
        "--stdout",
        action="store_true",
        help="Print the CSV instead of writing a file",
    )

    p_clear = sub.add_parser("clear", help="Delete every logged activity")
    p_clear.add_argument("--yes", action="store_true", help="Confirm deletion")

    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, json_lines=args.log_json)
    settings = get_settings()

    if args.cmd == "lookup":
        directory = PropertyDirectory.load(
            args.properties,
            strict=not args.legacy_csv,
            numeric_default=settings.numeric_default,
        )
        record = directory.find_property(args.address)
        print(
            json.dumps(
                {
                    "query": args.address,
                    "found": record is not None,
                    "property": record.to_dict() if record else None,
                    "properties_loaded": len(directory),
                }
            )
        )
        return 0 if record is not None else 1

    if args.cmd == "serve":
        import uvicorn

        os.environ["DKT_STATE_DB"] = str(args.db)
        reset_settings_cache()
        uvicorn.run(
            "doorknocking_tracker.api.app:app",
            host=args.host,
            port=int(args.port),
            log_level=str(args.log_level).lower(),
        )
        return 0

    store = SQLiteKeyValueStore(str(args.db))
    try:
        ledger = ActivityLedger(store)

        if args.cmd == "log":
            try:
                action = ActivityAction.parse(args.action)
            except TrackerError as exc:
                parser.error(exc.message)
            record = ledger.log_activity(args.location, action)
            print(json.dumps({"activity": record.to_dict(), **ledger.daily_counts().to_dict()}))
            return 0

        if args.cmd == "list":
            print(json.dumps({"activities": [r.to_dict() for r in ledger.records]}))
            return 0

        if args.cmd == "stats":
            print(json.dumps(ledger.daily_counts().to_dict()))
            return 0

        if args.cmd == "export":
            if args.stdout:
                sys.stdout.write(ledger.to_csv())
                return 0
            try:
                path = write_export(ledger, args.output_dir)
            except TrackerError as exc:
                print(json.dumps({"ok": False, "error": exc.to_dict()}))
                return 1
            print(json.dumps({"ok": True, "path": str(path), "count": len(ledger)}))
            return 0

        if args.cmd == "clear":
            if not args.yes:
                parser.error("clear requires --yes")
            count = len(ledger)
            ledger.clear_all()
            print(json.dumps({"cleared": count}))
            return 0
    finally:
        store.close()

    parser.error("Unknown command")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
