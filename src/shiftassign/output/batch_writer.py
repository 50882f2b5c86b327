"""Hand-off of validated assignment records to persistence.

Records are written in fixed-size batches. A batch that fails is reported
with the keys of every record it held so the caller can retry or abort;
it is never silently dropped.
"""

import concurrent.futures
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator, Optional

from shiftassign.domain.models import AssignmentRecord
from shiftassign.utils.logging_setup import get_logger

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 20


class AssignmentStore(ABC):
    """Destination for assignment records."""

    @abstractmethod
    def insert_batch(self, records: list[AssignmentRecord]) -> None:
        """Persist a batch of records. Raise on failure."""
        pass


class InMemoryAssignmentStore(AssignmentStore):
    """Store keeping records in a dict keyed by (schedule, employee, date).

    Inserting a record whose key already exists replaces it, so retrying a
    batch never produces duplicates.
    """

    def __init__(self):
        self.records: dict[tuple[str, str, str], dict] = {}
        self.batches_received = 0

    def insert_batch(self, records: list[AssignmentRecord]) -> None:
        self.batches_received += 1
        for record in records:
            self.records[record.key] = record.to_dict()

    def __len__(self) -> int:
        return len(self.records)


def chunk_records(
    records: list[AssignmentRecord],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Iterator[list[AssignmentRecord]]:
    """Yield consecutive batches of at most ``batch_size`` records."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    for i in range(0, len(records), batch_size):
        yield records[i : i + batch_size]


@dataclass
class BatchFailure:
    """A batch the store rejected."""

    batch_index: int
    records: list[AssignmentRecord]
    error: Exception

    @property
    def record_keys(self) -> list[tuple[str, str, str]]:
        return [r.key for r in self.records]


@dataclass
class SubmissionReport:
    """Outcome of submitting records to a store."""

    total_batches: int = 0
    written: int = 0
    failures: list[BatchFailure] = field(default_factory=list)
    skipped: list[AssignmentRecord] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.skipped

    @property
    def failed_records(self) -> list[AssignmentRecord]:
        return [r for f in self.failures for r in f.records]


class BatchWriter:
    """Submits records to an AssignmentStore in bounded batches.

    With ``max_workers > 1`` batches are submitted concurrently through a
    thread pool; the store must then tolerate concurrent ``insert_batch``
    calls. ``abort_on_failure`` only applies to sequential submission, where
    batches after the first failure are left unsent and reported as skipped.

    Example:
        >>> writer = BatchWriter(InMemoryAssignmentStore())
        >>> report = writer.submit(result.assignments)
        >>> if not report.ok:
        ...     report = writer.retry_failed(report)
    """

    def __init__(
        self,
        store: AssignmentStore,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_workers: int = 1,
        abort_on_failure: bool = False,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.store = store
        self.batch_size = batch_size
        self.max_workers = max(1, max_workers)
        self.abort_on_failure = abort_on_failure

    def submit(self, records: list[AssignmentRecord]) -> SubmissionReport:
        batches = list(chunk_records(records, self.batch_size))
        report = SubmissionReport(total_batches=len(batches))
        logger.info(
            "Submitting %d records in %d batches of up to %d",
            len(records),
            len(batches),
            self.batch_size,
        )

        if self.max_workers > 1 and len(batches) > 1:
            self._submit_concurrent(batches, report)
        else:
            self._submit_sequential(batches, report)

        logger.info(
            "Submission finished: %d written, %d batches failed, %d records skipped",
            report.written,
            len(report.failures),
            len(report.skipped),
        )
        return report

    def retry_failed(self, report: SubmissionReport) -> SubmissionReport:
        """Resubmit the records of failed and skipped batches."""
        pending = report.failed_records + report.skipped
        logger.info("Retrying %d records", len(pending))
        return self.submit(pending)

    def _submit_sequential(
        self,
        batches: list[list[AssignmentRecord]],
        report: SubmissionReport,
    ) -> None:
        for index, batch in enumerate(batches):
            failure = self._write(index, batch)
            if failure is None:
                report.written += len(batch)
                continue
            report.failures.append(failure)
            if self.abort_on_failure:
                for remaining in batches[index + 1 :]:
                    report.skipped.extend(remaining)
                logger.warning(
                    "Aborting after batch %d failed; %d records not submitted",
                    index,
                    len(report.skipped),
                )
                return

    def _submit_concurrent(
        self,
        batches: list[list[AssignmentRecord]],
        report: SubmissionReport,
    ) -> None:
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._write, index, batch): (index, batch)
                for index, batch in enumerate(batches)
            }
            for future in concurrent.futures.as_completed(futures):
                index, batch = futures[future]
                failure = future.result()
                if failure is None:
                    report.written += len(batch)
                else:
                    report.failures.append(failure)
        report.failures.sort(key=lambda f: f.batch_index)

    def _write(self, index: int, batch: list[AssignmentRecord]) -> Optional[BatchFailure]:
        try:
            self.store.insert_batch(batch)
        except Exception as e:
            logger.error(
                "Batch %d failed (%d records: %s): %s",
                index,
                len(batch),
                ", ".join("/".join(k) for k in (r.key for r in batch)),
                e,
            )
            return BatchFailure(batch_index=index, records=list(batch), error=e)
        logger.debug("Batch %d written (%d records)", index, len(batch))
        return None
