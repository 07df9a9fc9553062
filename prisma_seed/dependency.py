"""Dependency graph for model seeding order."""

import logging
from collections import defaultdict

from prisma_seed.models import SchemaModel

logger = logging.getLogger(__name__)


class DependencyGraph:
    """Directed graph of model dependencies (model -> models it references)."""

    def __init__(self):
        self._graph: dict[str, set[str]] = {}
        self._optional: dict[str, set[str]] = defaultdict(set)
        self._order: list[str] = []

    def add_model(self, model: str) -> None:
        """Add a model to the graph (declaration order is remembered)."""
        if model not in self._graph:
            self._graph[model] = set()
            self._order.append(model)

    def add_dependency(self, model: str, depends_on: str, required: bool = True) -> None:
        """
        Add a dependency: model depends on depends_on.

        Self-references are ignored. Optional dependencies are the first to be
        dropped when a cycle has to be broken.
        """
        self.add_model(model)
        self.add_model(depends_on)
        if model == depends_on:
            return

        if required:
            self._graph[model].add(depends_on)
            self._optional[model].discard(depends_on)
        elif depends_on not in self._graph[model]:
            self._graph[model].add(depends_on)
            self._optional[model].add(depends_on)

    def get_dependencies(self, model: str) -> list[str]:
        """Get all models that this model depends on."""
        return sorted(self._graph.get(model, set()))

    def topological_sort(self) -> list[str]:
        """
        Sort models so dependencies come before dependents (Kahn's algorithm).

        Among ready models, declaration order wins. When no model is ready
        (a cycle), the earliest model whose outstanding dependencies are all
        optional is forced out, otherwise the earliest remaining model. This
        is best effort: under cyclic required foreign keys the result can
        place a dependent before its parent.

        Returns:
            Model names in seeding order
        """
        outstanding = {model: set(deps) for model, deps in self._graph.items()}
        pending = list(self._order)
        result: list[str] = []

        while pending:
            ready = [model for model in pending if not outstanding[model]]
            if ready:
                chosen = ready[0]
            else:
                soft = [m for m in pending if outstanding[m] <= self._optional[m]]
                chosen = soft[0] if soft else pending[0]
                logger.warning(
                    f"Circular dependency among {sorted(pending)}; "
                    f"seeding '{chosen}' before {sorted(outstanding[chosen])}"
                )

            result.append(chosen)
            pending.remove(chosen)
            for model in pending:
                outstanding[model].discard(chosen)

        return result

    def detect_cycles(self) -> list[list[str]]:
        """
        Detect circular dependencies (self-references are never edges).

        Returns:
            List of cycles, each a list of model names ending where it started
        """
        cycles: list[list[str]] = []
        visited: set[str] = set()
        path: list[str] = []

        def dfs(node: str) -> None:
            if node in path:
                cycle = path[path.index(node) :] + [node]
                if cycle not in cycles:
                    cycles.append(cycle)
                return
            if node in visited:
                return

            visited.add(node)
            path.append(node)
            for dep in sorted(self._graph.get(node, set())):
                dfs(dep)
            path.pop()

        for node in self._order:
            dfs(node)

        return cycles


def build_dependency_graph(models: list[SchemaModel]) -> DependencyGraph:
    """
    Build the graph from foreign key fields.

    References to models absent from the set are treated as already satisfied.
    """
    names = {model.name for model in models}
    graph = DependencyGraph()

    for model in models:
        graph.add_model(model.name)
        for fk in model.foreign_keys:
            parent = fk.relation_model
            if parent is None or parent not in names:
                if parent is not None:
                    logger.debug(f"'{model.name}.{fk.name}' references unknown model '{parent}'")
                continue
            graph.add_dependency(model.name, parent, required=fk.is_required)

    return graph


def resolve_seed_order(models: list[SchemaModel]) -> list[SchemaModel]:
    """
    Order models so every referenced parent is seeded before its children.

    Args:
        models: Parsed models in declaration order

    Returns:
        The same models in dependency order
    """
    by_name = {model.name: model for model in models}
    order = build_dependency_graph(models).topological_sort()
    return [by_name[name] for name in order]
