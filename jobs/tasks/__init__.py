"""
Background tasks.

Dramatiq task definitions.
"""

from jobs.tasks.deposit_monitoring import monitor_deposits
from jobs.tasks.financial_reconciliation import (
    perform_financial_reconciliation,
)
from jobs.tasks.process_stakes import process_stakes

__all__ = [
    "process_stakes",
    "monitor_deposits",
    "perform_financial_reconciliation",
]
