"""Named generator plugins, looked up by a field's ``generator`` setting."""

import logging

logger = logging.getLogger(__name__)


class GeneratorRegistry:
    """
    Map plugin names to generator classes.

    Names are matched exactly, so ``sku`` and ``SKU`` are different plugins.
    A registered name shadows a Faker provider of the same name.
    """

    def __init__(self):
        self._plugins: dict[str, type] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._plugins

    def register(self, name: str, generator_class: type) -> None:
        """
        Add or replace a plugin.

        Raises:
            ValueError: If the name is blank or the class has no callable generate()
        """
        if not name or not name.strip():
            raise ValueError("Generator name must be a non-empty string")
        if not callable(getattr(generator_class, "generate", None)):
            raise ValueError(
                f"Cannot register '{name}': {generator_class.__name__} does not define "
                f"a callable generate(field_name, config=None, **context)"
            )
        if name in self._plugins and self._plugins[name] is not generator_class:
            logger.warning(
                f"Replacing generator '{name}' "
                f"({self._plugins[name].__name__} -> {generator_class.__name__})"
            )
        self._plugins[name] = generator_class

    def unregister(self, name: str) -> None:
        """Remove a plugin; unknown names are ignored."""
        self._plugins.pop(name, None)

    def get(self, name: str) -> type | None:
        return self._plugins.get(name)

    def names(self) -> list[str]:
        """Plugin names in registration order."""
        return list(self._plugins)

    def clear(self) -> None:
        self._plugins.clear()


# Process-wide registry behind the module functions
_registry = GeneratorRegistry()


def register_generator(name: str, generator_class: type) -> None:
    """
    Register a custom generator.

    Example:
        >>> from prisma_seed import BaseGenerator, register_generator
        >>>
        >>> class SKUGenerator(BaseGenerator):
        ...     def generate(self, field_name, config=None, **context):
        ...         return f"SKU-{context.get('instance', 1):06d}"
        >>>
        >>> register_generator('sku', SKUGenerator)
        >>> # config: models.Product.fields.sku.generator = "sku"
    """
    _registry.register(name, generator_class)


def unregister_generator(name: str) -> None:
    _registry.unregister(name)


def get_generator(name: str) -> type | None:
    """Get a registered generator class (None if not found)."""
    return _registry.get(name)


def list_generators() -> list[str]:
    return _registry.names()


def clear_generators() -> None:
    """Forget every registered generator (tests call this between cases)."""
    _registry.clear()
