import dataclasses
import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence

from searchbridge.config import Settings, settings
from searchbridge.errors import SchemaError
from searchbridge.executor import QueryExecutor
from searchbridge.filters import FilterItem, SearchFilter
from searchbridge.schema.loader import load_schema_source
from searchbridge.schema.model import ColumnType, SchemaSource
from searchbridge.sql import JoinResolver
from .base import SearchSource, SourceDescriptor, SourceType
from .comment import CommentSource
from .meta import CommentMetaSource, PostMetaSource, UserMetaSource
from .options import OptionsSource
from .post import PostSource
from .table import TableSource
from .terms import TermsSource
from .user import UserSource

SourceTransform = Callable[[List[SourceDescriptor]], List[SourceDescriptor]]

PRELOAD_INTEGER_LOGIC = ("equals", "notequals")

CORE_SOURCES = (
    SourceDescriptor("posts", PostSource, "Posts (core & custom)", SourceType.core),
    SourceDescriptor("comment", CommentSource, "Comments", SourceType.core),
    SourceDescriptor("user", UserSource, "Users", SourceType.core),
    SourceDescriptor("options", OptionsSource, "Options", SourceType.core),
)

ADVANCED_SOURCES = (
    SourceDescriptor("post-meta", PostMetaSource, "Post Meta", SourceType.advanced),
    SourceDescriptor("comment-meta", CommentMetaSource, "Comment Meta", SourceType.advanced),
    SourceDescriptor("user-meta", UserMetaSource, "User Meta", SourceType.advanced),
    SourceDescriptor("terms", TermsSource, "Terms", SourceType.advanced),
)

GROUP_LABELS = {
    SourceType.core: "Standard",
    SourceType.advanced: "Advanced",
    SourceType.plugin: "Plugins",
}


class SourceProvider(Protocol):
    def get_sources(self) -> Iterable[SourceDescriptor]:
        ...


class SchemaFileProvider:
    """Registers one TableSource per schema file (YAML or JSON)."""

    def __init__(self, paths: Iterable[str | Path]) -> None:
        self._paths = [Path(path) for path in paths]
        self._logger = logging.getLogger(__name__)

    def get_sources(self) -> List[SourceDescriptor]:
        descriptors: List[SourceDescriptor] = []
        for path in self._paths:
            try:
                schema = load_schema_source(path)
            except SchemaError as exc:
                self._logger.error("Skipping plugin schema %s: %s", path, exc)
                continue
            descriptors.append(
                SourceDescriptor(
                    name=schema.name,
                    source_class=TableSource,
                    label=schema.label or schema.name,
                    type=SourceType.plugin,
                    schema=schema,
                )
            )
        return descriptors


class SourceManager:
    """
    Maps source names to their descriptors, schemas and handlers.

    The three categories are fixed when the manager is built: the built-in
    tables, then each category's transforms in order, and plugins read once
    from the registered providers.
    """

    def __init__(
        self,
        *,
        providers: Sequence[SourceProvider] = (),
        transforms: Optional[Mapping[str, Sequence[SourceTransform]]] = None,
        executor: Optional[QueryExecutor] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._executor = executor
        self._config = config or settings
        self._resolver = JoinResolver(table_prefix=self._config.TABLE_PREFIX)
        transforms = transforms or {}

        plugins: List[SourceDescriptor] = []
        for provider in providers:
            for descriptor in provider.get_sources():
                plugins.append(dataclasses.replace(descriptor, type=SourceType.plugin))

        self._core = self._apply(list(CORE_SOURCES), transforms.get(SourceType.core.value, ()))
        self._advanced = self._apply(list(ADVANCED_SOURCES), transforms.get(SourceType.advanced.value, ()))
        self._plugin = self._apply(plugins, transforms.get(SourceType.plugin.value, ()))

        self._schemas: Dict[str, SchemaSource] = {}
        self._schema_lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        executor: Optional[QueryExecutor] = None,
    ) -> "SourceManager":
        config = config or settings
        providers = [SchemaFileProvider(config.PLUGIN_SCHEMA_PATHS)] if config.PLUGIN_SCHEMA_PATHS else []
        return cls(providers=providers, executor=executor, config=config)

    @staticmethod
    def _apply(descriptors: List[SourceDescriptor], transforms: Sequence[SourceTransform]) -> List[SourceDescriptor]:
        for transform in transforms:
            descriptors = list(transform(list(descriptors)))
        return descriptors

    def list_core(self) -> List[SourceDescriptor]:
        return list(self._core)

    def list_advanced(self) -> List[SourceDescriptor]:
        return list(self._advanced)

    def list_plugin(self) -> List[SourceDescriptor]:
        return list(self._plugin)

    def get_all_sources(self) -> List[SourceDescriptor]:
        seen: set[str] = set()
        sources: List[SourceDescriptor] = []
        for descriptor in self._core + self._advanced + self._plugin:
            if descriptor.name in seen:
                continue
            seen.add(descriptor.name)
            sources.append(descriptor)
        return sources

    def get_all_source_names(self) -> List[str]:
        return [descriptor.name for descriptor in self.get_all_sources()]

    def get_all_grouped(self) -> List[Dict[str, Any]]:
        sources = self.get_all_sources()
        groups = []
        for source_type, label in GROUP_LABELS.items():
            members = [descriptor.to_json() for descriptor in sources if descriptor.type == source_type]
            if members:
                groups.append({"name": source_type.value, "label": label, "sources": members})
        return groups

    def get_descriptor(self, source_name: str) -> Optional[SourceDescriptor]:
        for descriptor in self.get_all_sources():
            if descriptor.name == source_name:
                return descriptor
        return None

    def instantiate(self, source_name: str, filters: Sequence[SearchFilter] = ()) -> Optional[SearchSource]:
        descriptor = self.get_descriptor(source_name)
        if descriptor is None:
            self._logger.debug("Unknown source '%s'", source_name)
            return None

        own_filters = [search_filter for search_filter in filters if search_filter.is_for_source(source_name)]
        return descriptor.source_class(
            descriptor, own_filters, self._executor, resolver=self._resolver, config=self._config
        )

    def get(self, source_names: Iterable[str], filters: Sequence[SearchFilter] = ()) -> List[SearchSource]:
        handlers: List[SearchSource] = []
        for name in source_names:
            handler = self.instantiate(name, filters)
            if handler is not None:
                handlers.append(handler)
            else:
                self._logger.info("Skipping unknown source '%s'", name)
        return handlers

    def get_source_schema(self, source_name: str) -> Optional[SchemaSource]:
        with self._schema_lock:
            schema = self._schemas.get(source_name)
            if schema is None:
                handler = self.instantiate(source_name)
                if handler is None:
                    return None
                schema = handler.get_schema_source()
                self._schemas[source_name] = schema
            return schema

    def get_schema(self, sources: Iterable[str] = ()) -> List[SchemaSource]:
        wanted = set(sources)
        schemas: List[SchemaSource] = []
        for name in self.get_all_source_names():
            if wanted and name not in wanted:
                continue
            schema = self.get_source_schema(name)
            if schema is not None:
                schemas.append(schema)
        return schemas

    def create_filters(self, payload: Iterable[Mapping[str, Any]]) -> List[SearchFilter]:
        """Build SearchFilters from `{type, items}` mappings, dropping unknown sources and invalid groups."""
        filters: List[SearchFilter] = []
        for data in payload:
            schema = self.get_source_schema(str(data.get("type", "")))
            if schema is None:
                self._logger.info("Skipping filter for unknown source %r", data.get("type"))
                continue
            search_filter = SearchFilter.create(data, schema, self._resolver)
            if search_filter.is_valid():
                filters.append(search_filter)
        return filters

    def get_schema_preload(self, source_name: str, raw_filter: Mapping[str, Any]) -> List[Dict[str, str]]:
        if "column" not in raw_filter:
            return []

        handler = self.instantiate(source_name)
        if handler is None:
            return []

        schema = self.get_source_schema(source_name)
        column = schema.get_column(str(raw_filter["column"])) if schema is not None else None
        if column is None:
            return []

        logic = raw_filter.get("logic")
        eligible = column.type == ColumnType.member or (
            column.type == ColumnType.integer
            and (logic is None or str(logic).lower() in PRELOAD_INTEGER_LOGIC)
        )
        if not eligible:
            return []

        filter_item = FilterItem.create(raw_filter, column, self._resolver)
        if filter_item is None:
            return []
        return handler.get_filter_preload(column, filter_item)
