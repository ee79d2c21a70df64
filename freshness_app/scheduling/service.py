"""
Recurring transaction scheduler service.

Holds an explicit map from transaction id to its APScheduler job. The
service is constructed once at process start and handed to whoever needs
it; the persistence callbacks are injected so the service never touches
the database itself.
"""

from typing import Any, Callable, Iterable, Optional

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler

from ..config.defaults import SchedulerParams
from ..errors import SchedulingError
from ..logging.config import get_scheduler_logger
from .cron import build_cron_trigger

logger = get_scheduler_logger(__name__)

CreateTransaction = Callable[[int], Any]
LogRun = Callable[[int, str, Optional[str]], Any]


def _record_field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


class RecurringTransactionScheduler:
    """Schedules recurring transactions on cron expressions."""

    def __init__(
        self,
        create_transaction: CreateTransaction,
        log_run: LogRun,
        scheduler: Optional[BaseScheduler] = None,
        params: Optional[SchedulerParams] = None
    ) -> None:
        """
        Args:
            create_transaction: Inserts the next occurrence of a recurring transaction
            log_run: Records a run as (transaction_id, status, error_message)
            scheduler: APScheduler instance, a BackgroundScheduler if omitted
            params: Scheduler timezone and misfire grace
        """
        self.params = params or SchedulerParams()
        self.scheduler = scheduler or BackgroundScheduler(timezone=self.params.timezone)
        self.create_transaction = create_transaction
        self.log_run = log_run
        self.logger = logger
        self._jobs: dict[int, Job] = {}

    def start(self) -> None:
        """Start the underlying scheduler if it is not running yet."""
        if not self.scheduler.running:
            self.scheduler.start()

    def schedule_transaction(self, transaction_id: int, expression: str) -> None:
        """
        Schedule a transaction, replacing any existing schedule for it.

        Raises:
            SchedulingError: If the cron expression is invalid
        """
        self.remove_schedule(transaction_id)

        try:
            trigger = build_cron_trigger(expression, self.params.timezone)
        except SchedulingError as e:
            e.transaction_id = transaction_id
            self.logger.error(
                "Invalid cron expression",
                transaction_id=transaction_id,
                expression=expression
            )
            raise

        job = self.scheduler.add_job(
            self._run,
            trigger,
            args=[transaction_id],
            id=f"recurring-transaction-{transaction_id}",
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=self.params.misfire_grace_seconds,
        )
        self._jobs[transaction_id] = job

        self.logger.info(
            "Scheduled recurring transaction",
            transaction_id=transaction_id,
            expression=expression
        )

    def remove_schedule(self, transaction_id: int) -> None:
        """Stop and forget the schedule of a transaction, if any."""
        job = self._jobs.pop(transaction_id, None)
        if job is None:
            return

        try:
            job.remove()
        except JobLookupError:
            self.logger.debug("Job already gone from scheduler", transaction_id=transaction_id)

    def is_scheduled(self, transaction_id: int) -> bool:
        return transaction_id in self._jobs

    def scheduled_transactions(self) -> list[int]:
        return list(self._jobs)

    def initialize(self, transactions: Iterable[Any]) -> int:
        """
        Schedule every recurring transaction loaded at startup.

        A transaction with an invalid expression is logged and skipped so
        that one bad row does not keep the others from running.

        Args:
            transactions: Records (mappings or objects) with id and recurrence

        Returns:
            Number of transactions scheduled
        """
        self.logger.info("Initializing recurring transaction scheduler")
        scheduled = 0

        for transaction in transactions:
            transaction_id = _record_field(transaction, "id")
            recurrence = _record_field(transaction, "recurrence")

            if not recurrence or not str(recurrence).strip():
                continue

            try:
                self.schedule_transaction(transaction_id, recurrence)
                scheduled += 1
            except SchedulingError as e:
                self.logger.error(
                    "Failed to schedule transaction",
                    transaction_id=transaction_id,
                    error=str(e)
                )

        self.logger.info("Scheduler initialized", scheduled_count=scheduled)
        return scheduled

    def schedule_if_recurring(self, transaction_id: int, recurrence: Optional[str] = None) -> bool:
        """
        Schedule a newly created transaction when it has a recurrence.

        Returns:
            True if a schedule was registered

        Raises:
            SchedulingError: If the recurrence is not a valid cron expression
        """
        if not recurrence or not recurrence.strip():
            return False

        self.schedule_transaction(transaction_id, recurrence)
        return True

    def shutdown(self, wait: bool = False) -> None:
        """Remove every job and stop the scheduler."""
        self.logger.info("Shutting down recurring transaction scheduler")

        for transaction_id in list(self._jobs):
            self.remove_schedule(transaction_id)

        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

    def _run(self, transaction_id: int) -> None:
        # Failures are recorded as a failed run; the job stays scheduled
        try:
            self.create_transaction(transaction_id)
        except Exception as e:
            self.logger.exception("Recurring transaction run failed", transaction_id=transaction_id)
            self.log_run(transaction_id, "failed", str(e))
            return

        self.log_run(transaction_id, "completed", None)
        self.logger.info("Recurring transaction run completed", transaction_id=transaction_id)
