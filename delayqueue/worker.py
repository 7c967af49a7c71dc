import logging
import time
from typing import Iterable, Optional, Union

from .client import Client
from .exceptions import ClassNotFoundError, SubClassError
from .handler import HandlerRegistry

logger = logging.getLogger(__name__)


class Worker:
    """
    Pops jobs from the delay queue and runs their handlers.

    Successful jobs are finished. A failing handler leaves its job
    unfinished, so the server re-delivers it once the job's TTR expires.
    Jobs naming an unknown handler are deleted.
    """

    def __init__(
        self,
        client: Client,
        topics: Union[str, Iterable[str]],
        registry: Optional[HandlerRegistry] = None,
        poll_interval: float = 1.0,
    ):
        self.client = client
        self.topics = [topics] if isinstance(topics, str) else list(topics)
        self.registry = registry if registry is not None else client.registry
        self.poll_interval = poll_interval
        self._running = False

    def run_once(self) -> bool:
        """
        Pop and process at most one job.

        Returns:
            True if a job was popped
        """
        job = self.client.dequeue(self.topics)
        if job is None:
            return False

        try:
            descriptor = self.registry.validate(job.handler)
        except (ClassNotFoundError, SubClassError) as e:
            logger.warning("Dropping job %s: %s", job.id, e)
            self.client.delete(job.id)
            return True

        logger.info("Processing job %s with %s", job.id, job.handler)
        try:
            descriptor.target(job).run()
        except Exception:
            logger.exception("Job %s failed in %s", job.id, job.handler)
            return True

        self.client.finish(job.id)
        return True

    def run(self, max_jobs: Optional[int] = None) -> int:
        """
        Process jobs until stop() is called or max_jobs jobs were popped.

        Returns:
            Number of jobs popped
        """
        self._running = True
        processed = 0
        while self._running:
            if max_jobs is not None and processed >= max_jobs:
                break
            if self.run_once():
                processed += 1
            elif self._running:
                time.sleep(self.poll_interval)
        self._running = False
        return processed

    def stop(self) -> None:
        self._running = False
