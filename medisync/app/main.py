"""Command-line entry point for the dispenser sync client.

``watch`` keeps the three subscriptions open and logs every published view;
the remaining subcommands issue a single schedule command and exit.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import threading
from typing import List, Optional, Sequence

from medisync.adapters.storage_local import StorageLocal
from medisync.app.controller import AppController
from medisync.domain.ports import UseCaseError
from medisync.utils import logging as logging_utils
from medisync.viewmodels.dashboard_vm import LogRow, Overview, ScheduleRow
from medisync.viewmodels.settings_vm import SettingsVM

LOGGER = logging.getLogger(__name__)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI args for the sync client."""
    parser = argparse.ArgumentParser(description="Pill dispenser schedule sync client.")
    parser.add_argument(
        "--settings-dir",
        default=os.getenv("MEDISYNC_SETTINGS_DIR", "."),
        help="directory holding user_settings.json",
    )
    parser.add_argument("--database-url", help="override the configured database URL")
    parser.add_argument("--device-id", help="override the configured device id")
    parser.add_argument("--debug", action="store_true", help="enable DEBUG logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("watch", help="stream schedule, journal, and connectivity")

    configure = sub.add_parser("configure", help="schedule a slot")
    configure.add_argument("slot", type=int)
    configure.add_argument("hour", type=int)
    configure.add_argument("minute", type=int)
    configure.add_argument("name", nargs="?", default="")

    for name, help_text in (
        ("disable", "disable a slot"),
        ("trigger", "dispense a slot now"),
        ("reset", "reset a slot to pending"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("slot", type=int)

    sub.add_parser("clear-logs", help="delete the whole activity journal")
    sub.add_parser("save-settings", help="persist the effective settings")
    return parser.parse_args(argv)


def _load_settings(args: argparse.Namespace, storage: StorageLocal) -> SettingsVM:
    settings = SettingsVM()
    persisted = storage.load_user_settings()
    if persisted:
        settings.apply_dict(persisted)
    settings.apply_env()
    if args.database_url:
        settings.database_url = args.database_url
    if args.device_id:
        settings.device_id = args.device_id
    if args.debug:
        settings.set_debug_logging(True)
    return settings


def _log_schedule(rows: List[ScheduleRow]) -> None:
    if not rows:
        LOGGER.info("schedule: no active slots")
        return
    for row in rows:
        LOGGER.info(
            "schedule %s slot%s %-20s %s",
            row.time,
            row.slot_id,
            row.medication_name,
            row.status_label,
        )


def _log_journal(rows: List[LogRow]) -> None:
    if rows:
        latest = rows[0]
        LOGGER.info(
            "journal (%s): latest %s %s slot%s %s",
            len(rows),
            latest.date,
            latest.timestamp,
            latest.slot_id,
            latest.status_label,
        )
    else:
        LOGGER.info("journal: empty")


def _log_overview(overview: Overview) -> None:
    LOGGER.debug(
        "overview: %s/%s active, %s pending, %s log entries",
        overview.active_schedules,
        overview.total_slots,
        overview.pending,
        overview.total_logs,
    )


def _watch(controller: AppController) -> int:
    dashboard = controller.dashboard
    dashboard.on_schedule_rows = _log_schedule
    dashboard.on_log_rows = _log_journal
    dashboard.on_overview = _log_overview
    dashboard.on_connection = lambda label: LOGGER.info("connection: %s", label)
    stop = threading.Event()
    controller.sync.start()
    try:
        while not stop.wait(1.0):
            pass
    except KeyboardInterrupt:
        LOGGER.info("interrupted")
    finally:
        controller.sync.stop()
    return 0


def _run_command(controller: AppController, args: argparse.Namespace) -> int:
    machine = controller.machine
    if args.command == "configure":
        ok = machine.configure(args.slot, args.hour, args.minute, args.name)
        if not ok:
            LOGGER.error(
                "rejected: slot must be 1..%s, hour 0..23, minute 0..59", machine.slot_count
            )
            return 2
        return 0
    if args.command in {"disable", "trigger", "reset"}:
        if not controller.slots.paths.is_valid_slot(args.slot):
            LOGGER.error("rejected: slot must be 1..%s", machine.slot_count)
            return 2
    if args.command == "disable":
        machine.disable(args.slot)
        return 0
    if args.command == "trigger":
        result = machine.trigger_dispense(args.slot)
        LOGGER.info("trigger slot%s: %s", args.slot, result.value)
        return 0
    if args.command == "reset":
        if not machine.reset_status(args.slot):
            LOGGER.info("reset slot%s: no record, nothing to do", args.slot)
        return 0
    if args.command == "clear-logs":
        controller.journal.clear()
        return 0
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entrypoint."""
    args = _parse_args(argv)
    logging_utils.configure_root()
    storage = StorageLocal(root_dir=args.settings_dir)
    try:
        settings = _load_settings(args, storage)
    except ValueError as exc:
        LOGGER.error("invalid settings: %s", exc)
        return 2
    logging_utils.apply_preferences(settings.debug_logging)

    if args.command == "save-settings":
        settings.on_save = storage.save_user_settings
        try:
            settings.cmd_save()
        except ValueError as exc:
            LOGGER.error("not saved: %s", exc)
            return 2
        LOGGER.info("settings saved to %s", storage.settings_path)
        return 0

    controller = AppController(settings)
    if not controller.ensure_ready():
        LOGGER.error("database URL missing; use --database-url or MEDISYNC_DATABASE_URL")
        return 2

    if args.command == "watch":
        return _watch(controller)
    try:
        return _run_command(controller, args)
    except UseCaseError as exc:
        LOGGER.error("%s failed [%s]: %s", args.command, exc.code, exc.message)
        return 1


if __name__ == "__main__":
    sys.exit(main())
