"""Request Registry — exact request type → (kind, handler, rules, invalidation targets).

Invariants:
    - Resolution is by exact type: a subclass of a registered request is NOT registered
    - Kind is decided at registration from the Command / Query base class
    - Registering a type twice raises DuplicateRegistrationError
    - After freeze() the mapping is read-only; resolve() never mutates it
    - Unregistered type → UnregisteredHandlerError (a fault, not a Failure)

Design Decisions:
    - Explicit calls over decorators or module scanning: every mapping visible in
      one place (ADR: no convention-over-config)
    - Handler factory receives the RequestScope: handler classes are built per
      request with that request's unit of work and cache
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping

from pmflow.core.domain_types import RequestKind
from pmflow.core.errors import DuplicateRegistrationError, UnregisteredHandlerError
from pmflow.core.requests import Command, Query, Request
from pmflow.core.result import Result
from pmflow.core.validation import RuleSet
from pmflow.services.request_scope import RequestScope

Handler = Callable[[Any], Awaitable[Result]]
HandlerFactory = Callable[[RequestScope], Handler]
InvalidationMap = Callable[[Any], tuple[str, ...]]


@dataclass(frozen=True)
class Registration:
    request_type: type[Request]
    kind: RequestKind
    handler_factory: HandlerFactory
    rules: RuleSet = ()
    invalidation: InvalidationMap | None = None

    def targets(self, request: Request) -> tuple[str, ...]:
        return self.invalidation(request) if self.invalidation else ()


class RequestRegistry:
    def __init__(self) -> None:
        self._entries: dict[type[Request], Registration] = {}
        self._frozen: Mapping[type[Request], Registration] | None = None

    def command(
        self,
        request_type: type[Command],
        handler_factory: HandlerFactory,
        *,
        rules: RuleSet = (),
        invalidation: InvalidationMap | None = None,
    ) -> None:
        if not issubclass(request_type, Command):
            raise TypeError(f"{request_type.__name__} is not a Command")
        self._add(Registration(
            request_type, RequestKind.COMMAND, handler_factory, rules, invalidation,
        ))

    def query(
        self,
        request_type: type[Query],
        handler_factory: HandlerFactory,
        *,
        rules: RuleSet = (),
    ) -> None:
        if not issubclass(request_type, Query):
            raise TypeError(f"{request_type.__name__} is not a Query")
        self._add(Registration(
            request_type, RequestKind.QUERY, handler_factory, rules, None,
        ))

    def _add(self, registration: Registration) -> None:
        if self._frozen is not None:
            raise RuntimeError("Registry is frozen")
        if registration.request_type in self._entries:
            raise DuplicateRegistrationError(registration.request_type.__name__)
        self._entries[registration.request_type] = registration

    def freeze(self) -> "RequestRegistry":
        self._frozen = MappingProxyType(dict(self._entries))
        return self

    @property
    def registrations(self) -> Mapping[type[Request], Registration]:
        return self._frozen if self._frozen is not None else MappingProxyType(self._entries)

    def resolve(self, request_type: type[Request]) -> Registration:
        registration = self.registrations.get(request_type)
        if registration is None:
            raise UnregisteredHandlerError(request_type.__name__)
        return registration

    def __contains__(self, request_type: object) -> bool:
        return request_type in self.registrations

    def __len__(self) -> int:
        return len(self.registrations)
