"""FastAPI dependencies for enrollment and progress endpoints."""

from typing import Annotated

from fastapi import Depends

from coursehub.core.dependencies import ServiceSlot
from coursehub.progress.ledger import EnrollmentLedger
from coursehub.progress.tracker import ProgressTracker


get_enrollment_ledger = ServiceSlot[EnrollmentLedger]("EnrollmentLedger")
set_enrollment_ledger_getter = get_enrollment_ledger.set_getter

get_progress_tracker = ServiceSlot[ProgressTracker]("ProgressTracker")
set_progress_tracker_getter = get_progress_tracker.set_getter

EnrollmentLedgerDep = Annotated[EnrollmentLedger, Depends(get_enrollment_ledger)]
ProgressTrackerDep = Annotated[ProgressTracker, Depends(get_progress_tracker)]
