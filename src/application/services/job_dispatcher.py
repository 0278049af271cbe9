"""Routes queued jobs to handlers and reports their outcome."""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from src.application.services.retry import RetryPolicy
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.telemetry import LogContext, get_logger
from src.domain.exceptions import UnknownJobTypeError, ValidationError
from src.domain.models import Job, JobStatus

JobHandler = Callable[[Job], Awaitable[Any]]


class JobDispatcher:
    """Runs one job through its registered handler.

    The queue owns the job record. The dispatcher returns an updated copy
    describing the outcome (status, attempts, next run time) and, when a
    document store is given, writes it back. Handler errors are reported in
    the returned record and never raised.
    """

    def __init__(
        self,
        retry_policy: RetryPolicy,
        handlers: dict[str, JobHandler] | None = None,
        document_db: DocumentDBBase | None = None,
        jobs_collection: str = "jobs",
    ) -> None:
        """Initialize the dispatcher.

        Args:
            retry_policy: Decides retries and backoff delays.
            handlers: Handlers keyed by job type.
            document_db: Optional store the updated job is written to.
            jobs_collection: Collection holding job records.
        """
        self._retry_policy = retry_policy
        self._handlers: dict[str, JobHandler] = dict(handlers or {})
        self._document_db = document_db
        self._jobs_collection = jobs_collection
        self._logger = get_logger(__name__)

    def register(self, job_type: str, handler: JobHandler) -> None:
        """Register the handler for a job type, replacing any previous one."""
        self._handlers[job_type] = handler

    @property
    def job_types(self) -> list[str]:
        """Job types with a registered handler."""
        return sorted(self._handlers)

    async def dispatch(self, job: Job) -> Job:
        """Run a job and report its outcome.

        Args:
            job: Job record delivered by the queue.

        Returns:
            The updated job record.
        """
        with LogContext(correlation_id=job.id, job_id=job.id, job_type=job.type):
            if job.is_terminal:
                self._logger.warning(
                    "Skipping job in terminal state",
                    extra={"status": job.status.value},
                )
                return job

            handler = self._handlers.get(job.type)
            if handler is None:
                error = UnknownJobTypeError(job.type)
                self._logger.error("Unknown job type", extra=error.details)
                return await self._save(self._failed(job, str(error)))

            if job.attempt_count >= job.max_attempts:
                return await self._save(
                    self._failed(job, job.last_error or "attempts exhausted")
                )

            attempt = job.attempt_count + 1
            running = job.model_copy(
                update={
                    "status": JobStatus.PROCESSING,
                    "updated_at": datetime.now(UTC),
                }
            )

            try:
                await handler(running)
            except Exception as e:
                return await self._save(self._after_failure(job, attempt, e))

            self._logger.info("Job completed", extra={"attempt": attempt})
            return await self._save(
                job.model_copy(
                    update={
                        "status": JobStatus.COMPLETED,
                        "attempt_count": attempt,
                        "last_error": None,
                        "updated_at": datetime.now(UTC),
                    }
                )
            )

    def _after_failure(self, job: Job, attempt: int, error: Exception) -> Job:
        retryable = getattr(error, "retryable", None)
        if retryable is None:
            retryable = not isinstance(
                error, ValidationError
            ) and self._retry_policy.should_retry(attempt, job.max_attempts)
        # a handler may not allow more attempts than the job has left
        retryable = retryable and attempt < job.max_attempts

        if not retryable:
            self._logger.error(
                "Job failed permanently",
                extra={"attempt": attempt, "error": str(error)},
            )
            failed = self._failed(job, str(error))
            return failed.model_copy(update={"attempt_count": attempt})

        now = datetime.now(UTC)
        run_after = now + self._retry_policy.next_delay(attempt)
        self._logger.warning(
            "Job failed, scheduling retry",
            extra={
                "attempt": attempt,
                "max_attempts": job.max_attempts,
                "run_after": run_after.isoformat(),
                "error": str(error),
            },
        )
        return job.model_copy(
            update={
                "status": JobStatus.PENDING,
                "attempt_count": attempt,
                "run_after": run_after,
                "last_error": str(error),
                "updated_at": now,
            }
        )

    @staticmethod
    def _failed(job: Job, error: str) -> Job:
        return job.model_copy(
            update={
                "status": JobStatus.FAILED,
                "last_error": error,
                "updated_at": datetime.now(UTC),
            }
        )

    async def _save(self, job: Job) -> Job:
        if self._document_db is not None:
            await self._document_db.upsert(
                self._jobs_collection,
                job.id,
                job.model_dump(mode="json", exclude={"id"}),
            )
        return job
