from __future__ import annotations

import inspect
from typing import Any

from ._factory import ReflectiveFactoryResolver
from ._provider import ProviderNormalizer


def _resolver(cls: type, deps: dict[type, None]) -> None:
    if cls in deps:
        return

    deps[cls] = None

    for provider in ProviderNormalizer.normalize([cls]):
        for dependency in ReflectiveFactoryResolver.resolve(provider).dependencies:
            token = dependency.key.token
            if inspect.isclass(token):
                _resolver(token, deps)


class ReflectiveDependencyResolver:
    @staticmethod
    def resolve(*inputs: type) -> list[type]:
        """Collect the given classes and every class they depend on.

        Classes are listed once each, in the order they are first reached by
        a depth-first walk of the constructor dependencies. Optional
        dependencies are included. Non-class tokens (`InjectionToken`,
        strings) are skipped, they need explicit providers.

        Important: dependencies found this way are invisible to static
        analysis tools, which will see them as unused.

        Example:
          class HTTP: ...

          class Database: ...

          class PersonService:
              def __init__(self, http: HTTP, database: Database): ...

          class OrganizationService:
              def __init__(self, http: HTTP, person_service: PersonService): ...

          injector = ReflectiveInjector.resolve_and_create(
              ReflectiveDependencyResolver.resolve(OrganizationService)
          )
          injector.get(OrganizationService)

        """
        # dict keeps first-discovery order
        deps: dict[Any, None] = {}

        for input_ in inputs:
            _resolver(input_, deps)

        return list(deps)


resolve_dependencies = ReflectiveDependencyResolver.resolve
