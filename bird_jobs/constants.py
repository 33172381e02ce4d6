"""
Application constants.
Centralized location for all constant values used across the application.
"""

from enum import StrEnum


class JobStatus(StrEnum):
    """
    Job lifecycle states.

    State transitions:
    - QUEUED -> PROCESSING (claimed by a worker)
    - PROCESSING -> COMPLETE (lookup succeeded, with or without an extract)
    - PROCESSING -> FAILED (lookup failed after every retry)

    COMPLETE and FAILED are terminal.
    """

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.QUEUED: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETE, JobStatus.FAILED}),
    JobStatus.COMPLETE: frozenset(),
    JobStatus.FAILED: frozenset(),
}

TERMINAL_STATUSES = frozenset({JobStatus.COMPLETE, JobStatus.FAILED})

# Default values
DEFAULT_MAX_RETRIES = 5
DEFAULT_BASE_DELAY_SECONDS = 0.5
DEFAULT_POLL_INTERVAL_SECONDS = 1.0
DEFAULT_WORKER_CONCURRENCY = 1

# External lookup
WIKIPEDIA_API_URL = "https://en.wikipedia.org/w/api.php"
WIKIPEDIA_QUERY_PARAMS: dict[str, str] = {
    "action": "query",
    "prop": "extracts",
    "exintro": "1",
    "explaintext": "1",
    "redirects": "1",
    "format": "json",
    "formatversion": "2",
}

# Counter keys (persistent counter store)
COUNTER_JOBS_CREATED = "jobs_created"
COUNTER_RESULT_REQUESTS = "result_requests"
COUNTER_PROCESSING_ERRORS = "processing_errors"
COUNTER_JOBS_PROCESSED_PREFIX = "jobs_processed:"

# Metrics names (Prometheus)
METRIC_JOBS_CREATED = "jobs_created_total"
METRIC_RESULT_REQUESTS = "result_requests_total"
METRIC_PROCESSING_ERRORS = "processing_errors_total"
METRIC_JOBS_PROCESSED = "jobs_processed_total"

# Trace span names
SPAN_CLAIM_JOB = "claim_job"
SPAN_PROCESS_JOB = "process_job"
SPAN_FETCH_EXTRACT = "fetch_extract"

# API error messages
ERROR_JOB_EXISTS = "Job with this name already exists"
ERROR_JOB_NOT_FOUND = "Job not found"
ERROR_JOB_NOT_COMPLETE = "Job not complete"
