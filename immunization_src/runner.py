"""CLI runner for immunization schedules.

Usage:
    python -m immunization_src.runner --dob 2024-03-15                          # Standard schedule
    python -m immunization_src.runner --dob 2022-01-10 --history doses.json     # Catch-up schedule
    python -m immunization_src.runner --dob 2022-01-10 --history doses.json --format pivot
    python -m immunization_src.runner --dob 2022-01-10 --mode catchup --today 2026-10-19 --format json

History file: a JSON list of {"vaccine_id", "dose_number", "date_given"}
objects. A combination product id (e.g. "vaxelis") expands to its components.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import config
from .errors import InvalidInputError, ScheduleError
from .models import DoseStatus, ScheduleMode, ScheduledDoseRecord, parse_date
from .reporting import pivot_schedule, series_completion
from .scheduler import ImmunizationScheduler

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging.

    Args:
        verbose: If True, use DEBUG level.
    """
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def load_history(path: str | None) -> list[dict]:
    """Load a history file (JSON list of dose objects)."""
    if not path:
        return []
    try:
        with open(Path(path), "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise InvalidInputError(f"Cannot read history file {path}: {e.strerror or e}") from e
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"History file is not valid JSON: {path} ({e.msg}, line {e.lineno})") from e
    if not isinstance(data, list):
        raise ScheduleError(f"History file must contain a JSON list: {path}")
    return data


def print_table(records: list[ScheduledDoseRecord], mode: ScheduleMode) -> None:
    """Print the schedule as a dated list."""
    status_icon = {
        DoseStatus.COMPLETED: "✓",
        DoseStatus.INVALID: "✗",
        DoseStatus.OVERDUE: "!",
        DoseStatus.DUE: "*",
        DoseStatus.UPCOMING: "○",
    }

    print("=" * 60)
    print(f"IMMUNIZATION SCHEDULE - {mode.value.upper()}")
    print("=" * 60)

    if not records:
        print("\nNo doses to schedule.")
        return

    for record in records:
        when = record.scheduled_date.strftime(config.DISPLAY_DATE_FORMAT)
        label = f" ({record.age_label})" if record.age_label else ""
        print(
            f"  [{status_icon[record.status]}] {when}  {record.vaccine_name} "
            f"D{record.dose_number}{label}: {record.status.value}"
        )

    counts = {status: 0 for status in DoseStatus}
    for record in records:
        counts[record.status] += 1

    print("-" * 60)
    print("Summary: " + ", ".join(f"{counts[s]} {s.value}" for s in DoseStatus))


def run(
    dob: str,
    history_path: str | None = None,
    mode: str | None = None,
    today: str | None = None,
    output_format: str = "table",
    strict: bool | None = None,
) -> list[ScheduledDoseRecord]:
    """Compute and print a schedule.

    Args:
        dob: Birth date (YYYY-MM-DD).
        history_path: Optional JSON history file.
        mode: "standard" or "catchup"; defaults to catchup when history is given.
        today: Optional reference date (YYYY-MM-DD).
        output_format: "table", "pivot" or "json".
        strict: Override Config.STRICT_HISTORY.

    Returns:
        The computed records.
    """
    history = load_history(history_path)
    schedule_mode = ScheduleMode(mode) if mode else (
        ScheduleMode.CATCHUP if history else ScheduleMode.STANDARD
    )
    reference = parse_date(today, field_name="today") if today else None

    scheduler = ImmunizationScheduler(strict=strict)
    if schedule_mode == ScheduleMode.CATCHUP:
        records = scheduler.catchup_schedule(dob, history, reference)
    else:
        records = scheduler.standard_schedule(dob, history, reference)

    logger.info(f"Computed {len(records)} {schedule_mode.value} record(s) for DOB {dob}")

    if output_format == "json":
        print(json.dumps([r.to_dict() for r in records], indent=2))
    elif output_format == "pivot":
        grid = pivot_schedule(records)
        grid.columns = [d.strftime(config.DISPLAY_DATE_FORMAT) for d in grid.columns]
        print(grid.to_string())
        if schedule_mode == ScheduleMode.CATCHUP:
            print()
            print(series_completion(records).to_string())
    else:
        print_table(records, schedule_mode)

    return records


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Immunization Scheduler - standard and catch-up childhood schedules",
    )
    parser.add_argument(
        "--dob",
        type=str,
        required=True,
        help="Date of birth (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--history",
        type=str,
        help="JSON file with administered doses",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ScheduleMode],
        help="Schedule mode (default: catchup if history given, else standard)",
    )
    parser.add_argument(
        "--today",
        type=str,
        help="Reference date (YYYY-MM-DD); defaults to SCHEDULE_TODAY or the current date",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=["table", "pivot", "json"],
        default="table",
        help="Output format",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Ignore unknown vaccines in history instead of failing",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(args.verbose)

    try:
        run(
            dob=args.dob,
            history_path=args.history,
            mode=args.mode,
            today=args.today,
            output_format=args.output_format,
            strict=False if args.lenient else None,
        )
    except ScheduleError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
