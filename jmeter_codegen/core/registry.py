"""Registry of the DSL builder API surface.

The registry describes the builder types of the DSL, their ancestry and
their public methods, so generated calls can be resolved against the
real API without introspecting it at generation time. The surface is
declared in dsl_api.yaml and loaded once.

Example:
    >>> registry = default_registry()
    >>> method = registry.find_method("DslDefaultThreadGroup", "rampTo", params)
    >>> method.declaring_type
    'DslDefaultThreadGroup'
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Sequence

import yaml

from jmeter_codegen.core.params import MethodParam
from jmeter_codegen.exceptions import CodegenException, UnsupportedMappingException

logger = logging.getLogger(__name__)

DSL_API_PATH = Path(__file__).parent / "dsl_api.yaml"

OBJECT_TYPE = "Object"
PRIMITIVE_TYPES = frozenset({"int", "long", "boolean", "double"})
CHILDREN_METHOD_NAME = "children"


@dataclass(frozen=True)
class BuilderMethod:
    """A method declared by a builder type.

    Attributes:
        name: Method name
        declaring_type: Name of the type declaring the method
        param_types: Formal parameter types, varargs as "X[]"
        return_type: Returned type, None for fluent methods returning the receiver
        static: Whether the method is a static factory
        visibility: "public", "protected" or "private"
    """

    name: str
    declaring_type: str
    param_types: tuple[str, ...] = ()
    return_type: Optional[str] = None
    static: bool = False
    visibility: str = "public"

    @property
    def is_public(self) -> bool:
        return self.visibility == "public"

    def resolve_return_type(self, receiver_type: str) -> str:
        return self.return_type or receiver_type

    def __str__(self) -> str:
        return f"{self.declaring_type}.{self.name}({', '.join(self.param_types)})"


@dataclass
class BuilderType:
    """A type of the builder API with its declared methods.

    Attributes:
        name: Simple type name, unique in the registry
        package: Java package of the type
        parent: Name of the extended type, if any
        interfaces: Names of implemented interfaces
        methods: Methods declared by this type (inherited ones excluded)
    """

    name: str
    package: str = ""
    parent: Optional[str] = None
    interfaces: tuple[str, ...] = ()
    methods: list[BuilderMethod] = field(default_factory=list)

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name


class BuilderRegistry:
    """Resolves builder methods by name and parameter shape.

    Resolution walks a type's ancestry from the most derived type up and
    returns the first declared method matching name, visibility, arity and
    parameter types. The registry is read only once loaded, so it can be
    shared by concurrent conversions.
    """

    def __init__(self, types: Iterable[BuilderType] = ()) -> None:
        self._types: dict[str, BuilderType] = {}
        for builder_type in types:
            self.register(builder_type)

    @classmethod
    def from_yaml(cls, path: Path) -> "BuilderRegistry":
        """Load a registry from a YAML surface declaration.

        Args:
            path: Path to YAML file with a top level "types" list

        Returns:
            BuilderRegistry with all declared types

        Raises:
            CodegenException: If the file is missing or malformed
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise CodegenException(f"Failed to load DSL API surface from {path}: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> "BuilderRegistry":
        if not isinstance(data, dict) or not isinstance(data.get("types"), list):
            raise CodegenException("Invalid DSL API surface: expected a 'types' list")
        return cls(cls._parse_type(entry) for entry in data["types"])

    @staticmethod
    def _parse_type(entry: dict[str, Any]) -> BuilderType:
        if "name" not in entry:
            raise CodegenException(f"Invalid DSL API type without name: {entry}")
        name = entry["name"]
        methods = []
        for method in entry.get("methods", []):
            if "name" not in method:
                raise CodegenException(f"Invalid method without name in type {name}: {method}")
            methods.append(
                BuilderMethod(
                    name=method["name"],
                    declaring_type=name,
                    param_types=tuple(method.get("params", [])),
                    return_type=method.get("returns"),
                    static=bool(method.get("static", False)),
                    visibility=method.get("visibility", "public"),
                )
            )
        return BuilderType(
            name=name,
            package=entry.get("package", ""),
            parent=entry.get("extends"),
            interfaces=tuple(entry.get("implements", [])),
            methods=methods,
        )

    def register(self, builder_type: BuilderType) -> None:
        self._types[builder_type.name] = builder_type

    def get_type(self, type_name: str) -> Optional[BuilderType]:
        return self._types.get(type_name)

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._types

    def ancestry(self, type_name: str) -> Iterator[BuilderType]:
        """Yield the type and its registered parents, most derived first."""
        current = self._types.get(type_name)
        while current is not None:
            yield current
            current = self._types.get(current.parent) if current.parent else None

    def supertypes(self, type_name: str) -> set[str]:
        """All names the type is assignable to, itself included."""
        ret = {type_name}
        pending = [type_name]
        while pending:
            builder_type = self._types.get(pending.pop())
            if builder_type is None:
                continue
            for parent in (builder_type.parent, *builder_type.interfaces):
                if parent and parent not in ret:
                    ret.add(parent)
                    pending.append(parent)
        return ret

    def is_assignable(self, formal: str, actual: str) -> bool:
        """Whether a value of type actual can be passed where formal is expected."""
        if formal == actual:
            return True
        if formal == OBJECT_TYPE:
            return actual not in PRIMITIVE_TYPES
        if formal.endswith("[]") or actual.endswith("[]"):
            return (
                formal.endswith("[]")
                and actual.endswith("[]")
                and self.is_assignable(formal[:-2], actual[:-2])
            )
        return formal in self.supertypes(actual)

    def find_params_matching_method(
        self, methods: Iterable[BuilderMethod], params: Sequence[MethodParam]
    ) -> Optional[BuilderMethod]:
        """Return the first method accepting the non ignored params, positionally."""
        final_params = [p for p in params if not p.is_ignored()]
        for method in methods:
            if self._matches_params(method, final_params):
                return method
        return None

    def _matches_params(self, method: BuilderMethod, params: list[MethodParam]) -> bool:
        if len(method.param_types) != len(params):
            return False
        return all(
            self.is_assignable(formal, param.param_type)
            for formal, param in zip(method.param_types, params)
        )

    def find_method(
        self, type_name: str, method_name: str, params: Sequence[MethodParam]
    ) -> Optional[BuilderMethod]:
        """Find a chainable method in the ancestry of a type.

        Args:
            type_name: Type the method is invoked on
            method_name: Name of the method
            params: Parameters of the call (ignored ones are skipped)

        Returns:
            Most derived matching method, or None when there is none
        """
        for holder in self.ancestry(type_name):
            candidates = [
                m
                for m in holder.methods
                if m.name == method_name
                and m.is_public
                and not m.static
                and (m.return_type is None or self.is_assignable(m.return_type, holder.name))
            ]
            ret = self.find_params_matching_method(candidates, params)
            if ret is not None:
                logger.debug("Resolved %s for %s with %s", ret, type_name, params)
                return ret
        return None

    def find_required_method(
        self, type_name: str, method_name: str, params: Sequence[MethodParam]
    ) -> BuilderMethod:
        """Same as find_method, but a missing method is an error.

        Raises:
            UnsupportedMappingException: If no method matches
        """
        ret = self.find_method(type_name, method_name, params)
        if ret is None:
            raise UnsupportedMappingException(method_name, type_name, params)
        return ret

    def find_static_method(
        self, type_name: str, method_name: str, params: Sequence[MethodParam]
    ) -> BuilderMethod:
        """Find a public static method declared by exactly the given type.

        Raises:
            UnsupportedMappingException: If the type is unknown, or no method
                or more than one method matches
        """
        builder_type = self._types.get(type_name)
        if builder_type is None:
            raise UnsupportedMappingException(
                method_name, type_name, params, "Type is not registered in the DSL API surface."
            )
        final_params = [p for p in params if not p.is_ignored()]
        matches = [
            m
            for m in builder_type.methods
            if m.name == method_name
            and m.static
            and m.is_public
            and self._matches_params(m, final_params)
        ]
        if len(matches) != 1:
            reason = (
                f"Ambiguous methods: {[str(m) for m in matches]}."
                if matches
                else "Check that no dependencies or APIs have been changed."
            )
            raise UnsupportedMappingException(method_name, type_name, params, reason)
        return matches[0]

    def find_children_method(self, type_name: str) -> Optional[BuilderMethod]:
        """Find the public single argument children method in a type ancestry."""
        for holder in self.ancestry(type_name):
            for method in holder.methods:
                if (
                    method.name == CHILDREN_METHOD_NAME
                    and method.is_public
                    and not method.static
                    and len(method.param_types) == 1
                ):
                    return method
        return None


@lru_cache(maxsize=None)
def default_registry() -> BuilderRegistry:
    """Registry of the jmeter-java-dsl surface shipped with the package."""
    return BuilderRegistry.from_yaml(DSL_API_PATH)
