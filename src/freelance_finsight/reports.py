# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
One-pass orchestration of every dashboard report.

The dashboard shows all reports for the same snapshot and date range at
once. ``compute_reports()`` builds the id lookups and the per-task facts a
single time and derives every report from them:

1. Financial summary (revenue, collaborator and fixed costs, profit)
2. Revenue breakdown per client (completed tasks)
3. Task details (revenue and cost lines)
4. Additional financials (future and lost revenue) and their task lines
5. Monthly time series
6. Fixed cost details

Separation of concerns
----------------------
- ``engine.py`` is the single source of truth for task facts and the
  realised figures.
- ``projections.py`` handles forward-looking figures.
- ``reports.py`` assembles everything for one run and returns a single
  immutable bundle, which the CLI and views consume.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .engine import (
    FinancialSummary,
    FixedCostDetails,
    MonthlyFinancials,
    RevenueBreakdownItem,
    TaskDetails,
    breakdown_from_facts,
    collect_task_facts,
    fixed_cost_details_for,
    monthly_from_facts,
    summary_from_facts,
    task_details_from_facts,
)
from .lookup import LookupIndex
from .models import Snapshot
from .periods import ALL_TIME, DateRange
from .projections import (
    AdditionalFinancials,
    AdditionalTaskDetails,
    additional_from_facts,
    additional_task_details_from_facts,
)

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinancialReports:
    """
    Every report computed for one snapshot and one date range.

    Attributes
    ----------
    date_range :
        Range the reports were computed for (all-time when none given).
    summary, revenue_breakdown, task_details, additional,
    additional_task_details, monthly, fixed_costs :
        The individual reports, see engine.py and projections.py.
    """

    date_range: DateRange
    summary: FinancialSummary
    revenue_breakdown: tuple[RevenueBreakdownItem, ...]
    task_details: TaskDetails
    additional: AdditionalFinancials
    additional_task_details: AdditionalTaskDetails
    monthly: tuple[MonthlyFinancials, ...]
    fixed_costs: FixedCostDetails


def compute_reports(
    snapshot: Snapshot,
    date_range: Optional[DateRange] = None,
    *,
    as_of: Optional[date] = None,
    logger: Optional[logging.Logger] = None,
) -> FinancialReports:
    """
    Compute all dashboard reports for ``snapshot`` in a single pass.

    Parameters
    ----------
    snapshot :
        Full data snapshot (never modified).
    date_range :
        Reporting range. None means all time.
    as_of :
        Day treated as "today" for running fixed costs and for the default
        month of the fixed cost details.
    logger :
        Receives DEBUG messages for records that were skipped.

    Returns
    -------
    FinancialReports
    """
    log = logger or _LOG
    date_range = date_range or ALL_TIME

    index = LookupIndex.build(snapshot)
    facts = collect_task_facts(snapshot, index, log)
    log.debug(
        "Computing reports for %s: %d reportable task(s), %d fixed cost(s)",
        date_range.label,
        len(facts),
        len(snapshot.fixed_costs),
    )

    return FinancialReports(
        date_range=date_range,
        summary=summary_from_facts(facts, snapshot.fixed_costs, date_range, as_of, log),
        revenue_breakdown=tuple(breakdown_from_facts(facts, index, date_range)),
        task_details=task_details_from_facts(facts, index, date_range),
        additional=additional_from_facts(facts, date_range),
        additional_task_details=additional_task_details_from_facts(facts, index, date_range),
        monthly=tuple(monthly_from_facts(facts, snapshot.fixed_costs, date_range, as_of)),
        fixed_costs=fixed_cost_details_for(snapshot.fixed_costs, date_range, as_of, log),
    )
