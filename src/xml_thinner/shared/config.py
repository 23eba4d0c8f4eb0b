"""Configuration classes for XML thinning.

This module provides configuration objects for the event source, the tree
builder, and the public API, plus an immutable top-level configuration that
bundles them with presets and JSON round-tripping.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Dict, List, Optional

_COMPONENTS = ("source", "tree", "api")


class EventBackend(Enum):
    """XML parser used to produce structural events."""

    ELEMENTTREE = auto()   # xml.etree.ElementTree pull parser (stdlib)
    LXML = auto()          # lxml.etree pull parser (optional extra)


class AttributeMergePolicy(Enum):
    """How attributes of repeated occurrences are combined."""

    UNION_LAST_WINS = auto()   # Keep every key, later values overwrite
    UNION_FIRST_WINS = auto()  # Keep every key, first value sticks
    DISCARD = auto()           # Do not record attributes


class TextMergePolicy(Enum):
    """How text content of repeated occurrences is combined."""

    DISCARD = auto()       # Do not record text
    FIRST = auto()         # Keep the first non-empty text seen
    LAST = auto()          # Keep the last non-empty text seen
    CONCATENATE = auto()   # Join all text with the configured separator


class ChildOrder(Enum):
    """Order in which children are reported to readers."""

    FIRST_SEEN = auto()    # Insertion order of first occurrence
    ALPHABETICAL = auto()  # Sorted by tag name


@dataclass
class SourceConfig:
    """Configuration for the event source."""

    backend: EventBackend = EventBackend.ELEMENTTREE
    chunk_size: int = 65536
    encoding: Optional[str] = None
    keep_namespaces: bool = False  # Report tags as {uri}local instead of local

    def __post_init__(self) -> None:
        """Validate source configuration."""
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if self.encoding is not None and not self.encoding:
            raise ValueError("encoding must be a non-empty string or None")


@dataclass
class TreeConfig:
    """Configuration for the thinning tree builder."""

    root_name: str = "#root"
    attribute_policy: AttributeMergePolicy = AttributeMergePolicy.UNION_LAST_WINS
    text_policy: TextMergePolicy = TextMergePolicy.DISCARD
    text_separator: str = " "
    ignore_whitespace_text: bool = True
    child_order: ChildOrder = ChildOrder.FIRST_SEEN
    max_depth: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if not self.root_name:
            raise ValueError("root_name cannot be empty")
        if self.max_depth is not None and self.max_depth <= 0:
            raise ValueError("max_depth must be > 0 or None")


@dataclass
class ApiConfig:
    """Configuration for the public API layer."""

    raise_errors: bool = False
    include_diagnostics: bool = True


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ThinningConfig:
    """Complete configuration for a thinning run.

    Immutable so a single instance can be shared between threads and reused
    across many runs; use :meth:`override` to derive variants.
    """

    source: SourceConfig = field(default_factory=SourceConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    api: ApiConfig = field(default_factory=ApiConfig)

    correlation_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            self.source.__post_init__()
            self.tree.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if (
            self.tree.text_policy is TextMergePolicy.CONCATENATE
            and not self.tree.ignore_whitespace_text
            and self.tree.text_separator == ""
        ):
            raise ConfigValidationError(
                "Concatenating whitespace text without a separator merges "
                "indentation into the recorded text",
                field_name="tree.text_separator",
                suggestions=["Set tree.ignore_whitespace_text=True",
                             "Use a non-empty tree.text_separator"]
            )

    def override(self, **kwargs: Any) -> "ThinningConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field overrides; component fields use ``component__field``

        Returns:
            New ThinningConfig instance with overrides applied

        Example:
            >>> config = ThinningConfig()
            >>> config.override(tree__text_policy=TextMergePolicy.LAST).tree.text_policy
            <TextMergePolicy.LAST: 3>
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=[f"Use one of: {', '.join(_COMPONENTS)}"]
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for component in _COMPONENTS:
            current = getattr(self, component)
            if component in nested_overrides and isinstance(
                nested_overrides[component], dict
            ):
                try:
                    new_fields[component] = replace(
                        current, **nested_overrides[component]
                    )
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=component) from e
            elif component in nested_overrides:
                new_fields[component] = nested_overrides[component]

        for key, value in nested_overrides.items():
            if key not in _COMPONENTS:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ThinningConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so typos in configuration files do not pass
        silently.
        """
        component_types = {
            "source": SourceConfig,
            "tree": TreeConfig,
            "api": ApiConfig,
        }

        def _build(target_class: type, values: Dict[str, Any], prefix: str) -> Any:
            known = target_class.__dataclass_fields__
            field_values: Dict[str, Any] = {}
            for key, value in values.items():
                if key not in known:
                    raise ConfigValidationError(
                        f"Unknown configuration field: {prefix}{key}",
                        field_name=f"{prefix}{key}"
                    )
                field_type = known[key].type
                enum_type = _ENUM_FIELDS.get(key)
                if enum_type is not None and isinstance(value, str):
                    try:
                        value = enum_type[value.upper()]
                    except KeyError as e:
                        raise ConfigValidationError(
                            f"Invalid value for {prefix}{key}: {value}",
                            field_name=f"{prefix}{key}",
                            suggestions=[m.name for m in enum_type]
                        ) from e
                elif hasattr(field_type, "__dataclass_fields__"):
                    value = _build(field_type, value, f"{key}.")
                field_values[key] = value
            try:
                return target_class(**field_values)
            except ValueError as e:
                raise ConfigValidationError(str(e)) from e

        top_level: Dict[str, Any] = {}
        for key, value in data.items():
            if key in component_types:
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"Configuration section '{key}' must be an object",
                        field_name=key
                    )
                top_level[key] = _build(component_types[key], value, f"{key}.")
            elif key in ("correlation_id", "name", "description"):
                top_level[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration field: {key}", field_name=key
                )
        return cls(**top_level)

    @classmethod
    def from_json(cls, json_str: str) -> "ThinningConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def schema_only(cls) -> "ThinningConfig":
        """Preset recording tag structure only."""
        return cls(
            tree=TreeConfig(
                attribute_policy=AttributeMergePolicy.DISCARD,
                text_policy=TextMergePolicy.DISCARD,
            ),
            name="schema_only",
            description="Tag structure only, attributes and text discarded"
        )

    @classmethod
    def full_capture(cls) -> "ThinningConfig":
        """Preset keeping every attribute key and all text content."""
        return cls(
            tree=TreeConfig(
                attribute_policy=AttributeMergePolicy.UNION_LAST_WINS,
                text_policy=TextMergePolicy.CONCATENATE,
                text_separator=" ",
            ),
            name="full_capture",
            description="Attribute union and concatenated text for every node"
        )

    @classmethod
    def corpus(cls) -> "ThinningConfig":
        """Preset for thinning many documents into one comparable shape."""
        return cls(
            tree=TreeConfig(
                attribute_policy=AttributeMergePolicy.UNION_FIRST_WINS,
                text_policy=TextMergePolicy.DISCARD,
                child_order=ChildOrder.ALPHABETICAL,
            ),
            name="corpus",
            description="Stable alphabetical output for comparing document sets"
        )

    @classmethod
    def preset(cls, name: str) -> "ThinningConfig":
        """Look up a preset by name."""
        presets = {
            "default": cls,
            "schema_only": cls.schema_only,
            "full_capture": cls.full_capture,
            "corpus": cls.corpus,
        }
        if not isinstance(name, str) or name not in presets:
            raise ConfigValidationError(
                f"Unknown preset: {name}",
                field_name="preset",
                suggestions=sorted(presets)
            )
        return presets[name]()


PRESET_NAMES = ("default", "schema_only", "full_capture", "corpus")

_ENUM_FIELDS = {
    "backend": EventBackend,
    "attribute_policy": AttributeMergePolicy,
    "text_policy": TextMergePolicy,
    "child_order": ChildOrder,
}
