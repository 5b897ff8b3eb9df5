from dataclasses import dataclass
from typing import Callable, Optional, Sequence
import inspect

from archsim.models.graph import SystemEdge, SystemNode
from archsim.models.metrics import MetricSnapshot
from archsim.models.validation import ValidationCheck, ValidationContext

DIMENSION_IDS = ("reliability", "performance", "dataIntegrity", "security", "observability", "ai")


@dataclass
class CheckContext:
    """Everything a validation check may look at."""
    nodes: Sequence[SystemNode]
    edges: Sequence[SystemEdge]
    spof_ids: Sequence[str]
    metrics: MetricSnapshot
    ctx: ValidationContext

    def has_kind(self, *kinds: str) -> bool:
        return any(n.component_kind in kinds for n in self.nodes)

    def nodes_of_kind(self, *kinds: str) -> list[SystemNode]:
        return [n for n in self.nodes if n.component_kind in kinds]

    def labels(self, node_ids: Sequence[str]) -> str:
        wanted = set(node_ids)
        return ", ".join(n.config.label for n in self.nodes if n.id in wanted)


CheckFunc = Callable[[CheckContext], Optional[ValidationCheck]]


def register_check(dimension: str) -> Callable[[CheckFunc], CheckFunc]:
    """Decorator that marks a function as a validation check for *dimension*."""
    if dimension not in DIMENSION_IDS:
        raise ValueError(f"Unknown validation dimension '{dimension}'")

    def decorator(func: CheckFunc) -> CheckFunc:
        func._is_check = True
        func._check_name = func.__name__
        func._check_dimension = dimension
        return func

    return decorator


class CheckRegistry:
    """Registry of check functions grouped by dimension, kept in registration order."""

    def __init__(self) -> None:
        self._checks: dict[str, list[tuple[str, CheckFunc]]] = {d: [] for d in DIMENSION_IDS}

    def register(self, dimension: str, name: str, func: CheckFunc) -> None:
        """Register *func* under *dimension*, replacing any check with the same name."""
        entries = self._checks[dimension]
        for i, (existing, _func) in enumerate(entries):
            if existing == name:
                entries[i] = (name, func)
                return
        entries.append((name, func))

    def register_from_module(self, module: object) -> None:
        """Scan a module for @register_check functions, registering them in source order."""
        found = [
            obj for _name, obj in inspect.getmembers(module, callable)
            if getattr(obj, "_is_check", False)
        ]
        found.sort(key=lambda f: f.__code__.co_firstlineno)
        for func in found:
            self.register(func._check_dimension, func._check_name, func)

    def checks_for(self, dimension: str) -> list[CheckFunc]:
        return [func for _name, func in self._checks.get(dimension, [])]

    def run(self, dimension: str, check_ctx: CheckContext) -> list[ValidationCheck]:
        """Run every check of *dimension*; checks returning ``None`` are not applicable."""
        results = []
        for func in self.checks_for(dimension):
            check = func(check_ctx)
            if check is not None:
                results.append(check)
        return results

    def list_checks(self) -> list[str]:
        """Return a sorted list of all registered check names."""
        return sorted(name for entries in self._checks.values() for name, _func in entries)

