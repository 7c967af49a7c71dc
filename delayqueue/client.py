import json
import logging
import os
from typing import Any, Dict, Iterable, Optional, Union

import requests

from .exceptions import InvalidResponseError, OperationError, TransportError
from .handler import HandlerRegistry, default_registry
from .job import HANDLER_KEY, Job, PoppedJob

logger = logging.getLogger(__name__)


class Client:
    """Delay queue HTTP client."""

    def __init__(
        self,
        server: str = "http://127.0.0.1:9277",
        timeout: float = 10,
        registry: Optional[HandlerRegistry] = None,
    ):
        """
        Initialize delay queue client.

        Args:
            server: Base URL of the delay queue server
            timeout: Request timeout in seconds
            registry: Handler registry used to validate enqueued jobs
        """
        self.server = server.rstrip("/")
        self.timeout = timeout
        self.registry = registry if registry is not None else default_registry

    @classmethod
    def from_env(cls, prefix: str = "DELAY_QUEUE_", **kwargs: Any) -> "Client":
        """
        Build a client from <prefix>SERVER and <prefix>TIMEOUT.

        Raises:
            ValueError: <prefix>SERVER is not set
        """
        server = os.getenv(prefix + "SERVER")
        if not server:
            raise ValueError(f"{prefix}SERVER is not set")
        timeout = os.getenv(prefix + "TIMEOUT")
        if timeout:
            kwargs.setdefault("timeout", float(timeout))
        return cls(server, **kwargs)

    @property
    def timeout(self) -> float:
        return self._timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        if value <= 0:
            raise ValueError(f"timeout must be > 0, got {value}")
        self._timeout = value

    def enqueue(self, handler: Union[str, type], job: Job) -> None:
        """
        Push a job onto the delay queue.

        Args:
            handler: Identifier (or registered class) of the job's handler
            job: Job to push

        Raises:
            ClassNotFoundError: handler is not registered
            SubClassError: handler is registered but is not a job handler
        """
        name = handler if isinstance(handler, str) else self.registry.name_of(handler)
        self.registry.validate(name)
        self._request("/push", job.to_payload(name))

    def dequeue(self, topics: Union[str, Iterable[str]]) -> Optional[PoppedJob]:
        """
        Pop a ready job from any of the given topics.

        Args:
            topics: Topic names, polled in the given order

        Returns:
            The popped job, or None when no job is ready
        """
        if isinstance(topics, str):
            topics = [topics] if topics else []
        topics = list(topics)
        if not topics:
            return None

        resp = self._request("/pop", {"topic": ",".join(topics)})
        data = resp.get("data")
        if not data:
            return None

        if not isinstance(data, dict) or "id" not in data or "body" not in data:
            raise InvalidResponseError("response body miss required parameter, id or body")

        try:
            body = json.loads(data["body"])
        except (TypeError, ValueError):
            raise InvalidResponseError("job body is not valid JSON") from None
        if not isinstance(body, dict) or not isinstance(body.get(HANDLER_KEY), str):
            raise InvalidResponseError(f"response body miss required parameter {HANDLER_KEY}")

        handler = body.pop(HANDLER_KEY)
        return PoppedJob(id=data["id"], handler=handler, body=body)

    def delete(self, job_id: str) -> None:
        """
        Delete a job from the delay queue.

        Args:
            job_id: Job ID
        """
        self._request("/delete", {"id": job_id})

    def finish(self, job_id: str) -> None:
        """
        Acknowledge job completion.

        Args:
            job_id: Job ID
        """
        self._request("/finish", {"id": job_id})

    def _request(self, path: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """POST to the delay queue server and check the response envelope."""
        url = self.server + path

        try:
            resp = requests.post(
                url,
                json=data,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
                allow_redirects=False,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request failed: {e}") from e

        logger.debug("POST %s -> HTTP %s", path, resp.status_code)

        if 300 <= resp.status_code < 400:
            raise InvalidResponseError(
                f"HTTP {resp.status_code}: unexpected redirect to {resp.headers.get('location')}"
            )

        try:
            body = resp.json()
        except ValueError:
            raise InvalidResponseError(f"HTTP {resp.status_code}: response body is not JSON") from None

        _check_envelope(body)
        return body


def _check_envelope(body: Any) -> None:
    if not isinstance(body, dict) or "code" not in body or "message" not in body:
        raise InvalidResponseError("response body miss required parameter, code or message")
    if type(body["code"]) is not int or body["code"] != 0:
        raise OperationError(body["message"], code=body["code"])
