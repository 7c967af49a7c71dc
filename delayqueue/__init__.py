"""
Delay Queue Python Client

Simple HTTP-based client for a delay queue server.

Example:
    from delayqueue import Client, Handler, Job, register_handler

    @register_handler(name="send_email")
    class SendEmail(Handler):
        def perform(self):
            print(f"Sending to {self.body['to']}")

    client = Client("http://127.0.0.1:9277")

    # Push a job, ready in 30 seconds
    client.enqueue("send_email", Job("emails", delay=30, body={"to": "user@example.com"}))

    # Pop, process and finish
    job = client.dequeue(["emails"])
    if job is not None:
        print(f"Processing {job.id}")
        # ... do work ...
        client.finish(job.id)
"""

__version__ = "0.1.0"

from .client import Client
from .exceptions import (
    ClassNotFoundError,
    DelayQueueError,
    InvalidResponseError,
    OperationError,
    SubClassError,
    TransportError,
)
from .handler import (
    HANDLER_CAPABILITY,
    Handler,
    HandlerDescriptor,
    HandlerRegistry,
    default_registry,
    register_handler,
)
from .job import HANDLER_KEY, Job, PoppedJob
from .worker import Worker

__all__ = [
    "Client",
    "ClassNotFoundError",
    "DelayQueueError",
    "HANDLER_CAPABILITY",
    "HANDLER_KEY",
    "Handler",
    "HandlerDescriptor",
    "HandlerRegistry",
    "InvalidResponseError",
    "Job",
    "OperationError",
    "PoppedJob",
    "SubClassError",
    "TransportError",
    "Worker",
    "default_registry",
    "register_handler",
]
