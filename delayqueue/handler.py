"""
Job handler base class and registry.

Popped jobs carry the identifier of the handler that processes them. The
registry maps identifiers to handler descriptors; ``Client.enqueue`` checks
an identifier against it before anything is sent to the server.

Example:
    from delayqueue import Handler, register_handler

    @register_handler(name="send_email")
    class SendEmail(Handler):
        def perform(self):
            send(self.body["to"])
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional

from .exceptions import ClassNotFoundError, SubClassError
from .job import PoppedJob

logger = logging.getLogger(__name__)

HANDLER_CAPABILITY = "handler"


class Handler:
    """Base class for job handlers."""

    def __init__(self, job: PoppedJob):
        self.job = job
        self.id = job.id
        self.body = job.body

    def set_up(self) -> None:
        pass

    def perform(self) -> None:
        raise NotImplementedError

    def tear_down(self) -> None:
        pass

    def run(self) -> None:
        """Run set_up, perform and tear_down; tear_down runs even if perform fails."""
        self.set_up()
        try:
            self.perform()
        finally:
            self.tear_down()


@dataclass(frozen=True)
class HandlerDescriptor:
    name: str
    target: Any
    capabilities: FrozenSet[str] = frozenset()

    def provides(self, capability: str) -> bool:
        return capability in self.capabilities


def _default_name(target: Any) -> str:
    return f"{target.__module__}.{target.__qualname__}"


class HandlerRegistry:
    """Maps handler identifiers to descriptors."""

    def __init__(self):
        self._handlers: Dict[str, HandlerDescriptor] = {}

    def register(
        self,
        target: Any = None,
        name: Optional[str] = None,
        capabilities: Optional[Iterable[str]] = None,
    ):
        """
        Register a handler.

        Works as a plain call or as a decorator, with or without arguments.

        Args:
            target: Handler class (or any object to register)
            name: Identifier, defaults to "module.QualName"
            capabilities: Capability tags; Handler subclasses get
                HANDLER_CAPABILITY when omitted

        Returns:
            The registered target (or a decorator when target is omitted)
        """
        if target is None:
            def decorator(cls: Any) -> Any:
                return self.register(cls, name=name, capabilities=capabilities)
            return decorator

        if name is None:
            name = _default_name(target)
        if capabilities is None:
            is_handler = isinstance(target, type) and issubclass(target, Handler)
            capabilities = {HANDLER_CAPABILITY} if is_handler else set()

        self._handlers[name] = HandlerDescriptor(name, target, frozenset(capabilities))
        logger.debug("Registered handler %s", name)
        return target

    def unregister(self, name: str) -> None:
        self._handlers.pop(name, None)

    def names(self) -> List[str]:
        return list(self._handlers.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def resolve(self, name: str) -> HandlerDescriptor:
        if not isinstance(name, str):
            raise ClassNotFoundError(f"can not find handler [{name!r}]")
        try:
            return self._handlers[name]
        except KeyError:
            raise ClassNotFoundError(f"can not find handler [{name}]") from None

    def validate(self, name: str, capability: str = HANDLER_CAPABILITY) -> HandlerDescriptor:
        """
        Resolve a handler and check that it provides a capability.

        Raises:
            ClassNotFoundError: name is not registered
            SubClassError: handler does not provide the capability
        """
        descriptor = self.resolve(name)
        if not descriptor.provides(capability):
            raise SubClassError(f"[{name}] does not provide capability [{capability}]")
        return descriptor

    def name_of(self, target: Any) -> str:
        """Return the identifier a target was registered under."""
        for descriptor in self._handlers.values():
            if descriptor.target is target:
                return descriptor.name
        raise ClassNotFoundError(f"handler {target!r} is not registered")


default_registry = HandlerRegistry()


def register_handler(
    target: Any = None,
    name: Optional[str] = None,
    capabilities: Optional[Iterable[str]] = None,
) -> Callable:
    """Register a handler with the default registry."""
    return default_registry.register(target, name=name, capabilities=capabilities)
