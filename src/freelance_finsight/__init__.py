# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Freelance FinSight
------------------

The financial reporting engine behind a freelancer's business dashboard.
From a snapshot of tasks, client quotes, collaborator quotes, clients and
fixed costs it computes, for any date range:

- revenue, costs and profit (financial summary),
- revenue of completed work per client,
- per-task revenue and collaborator cost lines,
- future (unpaid) and lost (on-hold) revenue,
- a monthly revenue / costs / profit time series,
- prorated fixed costs.

Quotes are valued through configurable columns and sandboxed row formulas;
payments are recognised from itemized payments, a direct paid amount or a
"paid" status, and dated so that every report agrees with the others.

Freelance FinSight separates computation (engine), configuration (TOML)
and presentation (CLI), making it suitable for scripting and automation.


Version: 0.5.0

Usage:
    freelance-finsight --help
"""

import logging

__all__ = ["engine", "projections", "reports", "views", "io"]

__version__ = "0.5.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
