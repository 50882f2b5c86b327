"""Persistence hand-off for assignment records."""

from shiftassign.output.batch_writer import (
    AssignmentStore,
    BatchFailure,
    BatchWriter,
    InMemoryAssignmentStore,
    SubmissionReport,
    chunk_records,
)

__all__ = [
    "AssignmentStore",
    "BatchFailure",
    "BatchWriter",
    "InMemoryAssignmentStore",
    "SubmissionReport",
    "chunk_records",
]
