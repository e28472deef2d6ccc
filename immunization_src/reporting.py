"""Tabular views of a computed schedule.

Read-only consumers of the scheduler output:
- schedule_to_dataframe: one row per record
- pivot_schedule: rows = vaccines, columns = dates, cells = "D<n>"
- series_completion: completed vs. remaining doses per vaccine
"""

import logging
from typing import Sequence

import pandas as pd

from .models import DoseStatus, ScheduledDoseRecord

logger = logging.getLogger(__name__)

SCHEDULE_COLUMNS = [
    "vaccine_id",
    "vaccine_name",
    "dose_number",
    "scheduled_date",
    "age_label",
    "status",
]

PENDING_STATUSES = {DoseStatus.UPCOMING.value, DoseStatus.DUE.value, DoseStatus.OVERDUE.value}


def schedule_to_dataframe(records: Sequence[ScheduledDoseRecord]) -> pd.DataFrame:
    """Convert schedule records to a DataFrame.

    Returns:
        DataFrame with SCHEDULE_COLUMNS; ``scheduled_date`` holds date objects
        and ``status`` holds the status string.
    """
    if not records:
        return pd.DataFrame(columns=SCHEDULE_COLUMNS)

    return pd.DataFrame(
        [
            {
                "vaccine_id": r.vaccine_id,
                "vaccine_name": r.vaccine_name,
                "dose_number": r.dose_number,
                "scheduled_date": r.scheduled_date,
                "age_label": r.age_label,
                "status": r.status.value,
            }
            for r in records
        ],
        columns=SCHEDULE_COLUMNS,
    )


def pivot_schedule(records: Sequence[ScheduledDoseRecord]) -> pd.DataFrame:
    """Pivot a schedule into a vaccine-by-date grid.

    Rows keep the order vaccines first appear in the schedule; columns are
    sorted dates. A cell is "D<n>" for the dose on that date, joined with
    "/" when one vaccine has several records on the same day, and empty
    otherwise.
    """
    df = schedule_to_dataframe(records)
    if df.empty:
        return pd.DataFrame()

    df["cell"] = "D" + df["dose_number"].astype(str)
    vaccine_order = list(dict.fromkeys(df["vaccine_name"]))

    grid = (
        df.groupby(["vaccine_name", "scheduled_date"], sort=False)["cell"]
        .agg("/".join)
        .unstack("scheduled_date")
    )
    grid = grid.reindex(index=vaccine_order, columns=sorted(grid.columns))
    return grid.fillna("")


def series_completion(records: Sequence[ScheduledDoseRecord]) -> pd.DataFrame:
    """Summarize series progress per vaccine.

    Returns:
        DataFrame indexed by vaccine_id with columns completed, invalid,
        remaining and is_complete (no dose left to give).
    """
    df = schedule_to_dataframe(records)
    if df.empty:
        return pd.DataFrame(columns=["completed", "invalid", "remaining", "is_complete"])

    summary = pd.DataFrame({
        "completed": df["status"].eq(DoseStatus.COMPLETED.value).groupby(df["vaccine_id"], sort=False).sum(),
        "invalid": df["status"].eq(DoseStatus.INVALID.value).groupby(df["vaccine_id"], sort=False).sum(),
        "remaining": df["status"].isin(PENDING_STATUSES).groupby(df["vaccine_id"], sort=False).sum(),
    })
    summary = summary.astype(int)
    summary["is_complete"] = summary["remaining"].eq(0)
    return summary
