"""exporter registry and formatter entry points."""

from typing import Callable, TypeVar

from dualchat.exporters.base import Exporter, RenderContext


class ExporterRegistry:
    """registry for export formats."""

    def __init__(self) -> None:
        self._exporters: dict[str, Exporter] = {}

    def register(self, exporter_instance: Exporter) -> None:
        """registers an exporter under its format name and extension."""
        self._exporters[exporter_instance.format_name] = exporter_instance
        self._exporters[exporter_instance.extension] = exporter_instance

    def get(self, name: str) -> Exporter:
        """
        returns the exporter for a format name or extension.

        Raises:
            KeyError: no exporter registered under name
        """
        key = name.lower().lstrip(".")
        if key not in self._exporters:
            raise KeyError(f"Unknown export format: {name}")
        return self._exporters[key]

    def formats(self) -> list[str]:
        """registered format names, sorted."""
        return sorted({e.format_name for e in self._exporters.values()})


# global registry
registry = ExporterRegistry()

T = TypeVar("T", bound=Exporter)


def exporter(
    format_name: str,
    extension: str,
    target_registry: ExporterRegistry = registry,
) -> Callable[[type[T]], type[T]]:
    """
    decorator to register an exporter class.

    Args:
        format_name: format name used on the command line
        extension: file extension without the dot
        target_registry: registry to register with (defaults to global)

    Returns:
        decorator function
    """

    def decorator(cls: type[T]) -> type[T]:
        cls.format_name = format_name
        cls.extension = extension
        target_registry.register(cls())
        return cls

    return decorator


def get_exporter(name: str) -> Exporter:
    """returns the globally registered exporter for a format name or extension."""
    return registry.get(name)


# registers built-in formats
from dualchat.exporters import html, json, text  # noqa: E402,F401  pylint: disable=wrong-import-position

__all__ = ["Exporter", "ExporterRegistry", "RenderContext", "exporter", "get_exporter", "registry"]
