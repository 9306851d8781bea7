"""Background resume analysis with status polling.

Each submitted analysis runs as an asyncio task owned by the manager. The
task record keeps the status, the result or the error message, and the
optional completion callback is invoked once the task settles.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Awaitable, Callable

from models.schemas.analysis import AnalysisResult
from services.resume_analyzer import ResumeAnalyzer

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class AnalysisTask:
    id: str
    analysis_type: str
    status: TaskStatus = TaskStatus.PENDING
    result: AnalysisResult | None = None
    error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None


TaskCallback = Callable[[AnalysisTask], Awaitable[None] | None]


class AnalysisTaskManager:
    """Owns background analyses and their status records.

    Settled records are kept for ``retention_seconds`` so clients can poll
    them, and at most ``max_tasks`` records are held at once.
    """

    def __init__(self, analyzer: ResumeAnalyzer, retention_seconds: int = 3600, max_tasks: int = 1000):
        self.analyzer = analyzer
        self.retention = timedelta(seconds=retention_seconds)
        self.max_tasks = max_tasks
        self._tasks: dict[str, AnalysisTask] = {}
        self._running: dict[str, asyncio.Task] = {}

    def submit(
        self,
        resume_text: str,
        analysis_type: str = "general",
        job_description: str | None = None,
        on_complete: TaskCallback | None = None,
    ) -> AnalysisTask:
        """Schedule an analysis and return its task record immediately.

        Input errors are raised here, before anything is scheduled.
        """
        self.analyzer.validate_input(resume_text, analysis_type, job_description)
        self._prune()
        task = AnalysisTask(id=uuid.uuid4().hex, analysis_type=analysis_type)
        self._tasks[task.id] = task
        self._running[task.id] = asyncio.create_task(
            self._run(task, resume_text, job_description, on_complete)
        )
        logger.info("Queued analysis task %s (%s)", task.id[:8], analysis_type)
        return task

    async def _run(
        self,
        task: AnalysisTask,
        resume_text: str,
        job_description: str | None,
        on_complete: TaskCallback | None,
    ) -> None:
        task.status = TaskStatus.PROCESSING
        try:
            task.result = await self.analyzer.analyze(resume_text, task.analysis_type, job_description)
            task.status = TaskStatus.COMPLETED
        except asyncio.CancelledError:
            task.status = TaskStatus.FAILED
            task.error = "cancelled"
            raise
        except Exception as e:
            logger.exception("Analysis task %s failed", task.id[:8])
            task.status = TaskStatus.FAILED
            task.error = str(e) or type(e).__name__
        finally:
            task.completed_at = datetime.now(timezone.utc)
            self._running.pop(task.id, None)

        if on_complete is not None:
            try:
                maybe = on_complete(task)
                if asyncio.iscoroutine(maybe):
                    await maybe
            except Exception:
                logger.exception("Completion callback for task %s failed", task.id[:8])

    def _prune(self) -> None:
        """Drop expired settled records, then the oldest settled ones over the cap."""
        cutoff = datetime.now(timezone.utc) - self.retention
        settled = [
            t for t in self._tasks.values()
            if t.completed_at is not None and t.id not in self._running
        ]
        expired = [t for t in settled if t.completed_at <= cutoff]
        overflow = len(self._tasks) - len(expired) - self.max_tasks + 1
        if overflow > 0:
            rest = sorted((t for t in settled if t.completed_at > cutoff), key=lambda t: t.completed_at)
            expired.extend(rest[:overflow])
        for t in expired:
            del self._tasks[t.id]
        if expired:
            logger.debug("Pruned %d settled analysis tasks", len(expired))

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> AnalysisTask | None:
        return self._tasks.get(task_id)

    async def wait(self, task_id: str, timeout: float | None = None) -> AnalysisTask | None:
        """Wait for a task to settle and return its record."""
        running = self._running.get(task_id)
        if running is not None:
            await asyncio.wait_for(asyncio.shield(running), timeout=timeout)
        return self._tasks.get(task_id)

    async def shutdown(self) -> None:
        """Cancel every task that is still running."""
        pending = list(self._running.values())
        for running in pending:
            running.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
