"""Transformation utilities: the unit of work a template registers.

A utility is defined once, registered into exactly one template, and later run
by an execution engine that is not part of this package. Everything here is
definition-time state: names, ownership, execution order and the target the
utility acts on.
"""

from __future__ import annotations

import threading
from typing import Any, Protocol

from transformkit.errors import AlreadyOwnedError


class UtilityParent(Protocol):
    @property
    def name(self) -> str:
        ...


class Step(Protocol):
    """Capability set every utility kind offers to a template."""

    @property
    def parent(self) -> UtilityParent | None:
        ...

    @property
    def order(self) -> int | None:
        ...

    @property
    def name(self) -> str | None:
        ...

    def set_name(self, name: str) -> Any:
        ...

    def set_parent(self, parent: UtilityParent, order: int) -> Any:
        ...

    @property
    def relative_path(self) -> str | None:
        ...

    @property
    def absolute_file_from_context_attribute(self) -> str | None:
        ...


def require_identifier(value: Any, *, label: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{label} must be a string (type={type(value).__name__})")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError(f"{label} cannot be empty")
    return trimmed


def normalize_relative_path(value: Any, *, label: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{label} must be a string (type={type(value).__name__})")
    if value == "":
        return value
    normalized = value.strip().replace("\\", "/")
    if not normalized:
        raise ValueError(f'{label} cannot be blank (use "" for the application folder)')
    if normalized.startswith("/"):
        raise ValueError(f"{label} must be relative to the application folder (got {value!r})")
    return normalized


class TransformationUtility:
    """Base class for every utility kind.

    Subclasses describe what they do through `get_description()`. The
    template owning the utility assigns `parent` and `order`; when no explicit
    name was set, the name is derived from both on every read.
    """

    def __init__(self, *, name: str | None = None) -> None:
        self._parent_lock = threading.Lock()
        self._parent: UtilityParent | None = None
        self._order: int | None = None
        self._name: str | None = None

        self._relative_path: str | None = None
        self._context_attribute: str | None = None
        self._additional_relative_path: str | None = None

        self._dependencies: tuple[str, ...] = ()
        self._execute_if: str | None = None
        self._context_attribute_name: str | None = None
        self._save_result = True

        if name is not None:
            self.set_name(name)

    def get_description(self) -> str:
        raise NotImplementedError

    @property
    def parent(self) -> UtilityParent | None:
        return self._parent

    @property
    def order(self) -> int | None:
        return self._order

    @property
    def name(self) -> str | None:
        if self._name is not None:
            return self._name
        if self._parent is None:
            return None
        return self._default_name()

    def _default_name(self) -> str:
        return f"{self._parent.name}-{self._order}-{type(self).__name__}"

    def set_name(self, name: str) -> "TransformationUtility":
        self._name = require_identifier(name, label="Utility name")
        return self

    def set_parent(self, parent: UtilityParent, order: int) -> "TransformationUtility":
        if parent is None:
            raise TypeError("Utility parent cannot be None")
        if isinstance(order, bool) or not isinstance(order, int):
            raise TypeError(f"Utility order must be an int (type={type(order).__name__})")
        if order < 1:
            raise ValueError(f"Utility order must be >= 1 (got {order})")

        with self._parent_lock:
            if self._parent is not None:
                raise AlreadyOwnedError(
                    f"Transformation utility {self.name} is already registered "
                    f"to transformation template {self._parent.name} (order={self._order})"
                )
            self._parent = parent
            self._order = order
        return self

    @property
    def relative_path(self) -> str | None:
        return self._relative_path

    @property
    def absolute_file_from_context_attribute(self) -> str | None:
        return self._context_attribute

    @property
    def additional_relative_path(self) -> str | None:
        return self._additional_relative_path

    def relative(self, relative_path: str) -> "TransformationUtility":
        """Target a file or folder relative to the application root ("" is the root)."""

        self._relative_path = normalize_relative_path(relative_path, label="Utility relative path")
        return self

    def absolute(
        self, context_attribute: str, additional_relative_path: str | None = None
    ) -> "TransformationUtility":
        """Target the file held by a context attribute, resolved at run time."""

        self._context_attribute = require_identifier(
            context_attribute, label="Utility context attribute"
        )
        if additional_relative_path is None:
            self._additional_relative_path = None
        else:
            self._additional_relative_path = normalize_relative_path(
                additional_relative_path, label="Utility additional relative path"
            )
        return self

    def has_target(self) -> bool:
        return self._relative_path is not None or self._context_attribute is not None

    @property
    def dependencies(self) -> tuple[str, ...]:
        return self._dependencies

    def depends_on(self, *names: str) -> "TransformationUtility":
        self._dependencies = tuple(
            require_identifier(name, label=f"Utility dependency[{idx}]")
            for idx, name in enumerate(names)
        )
        return self

    @property
    def execute_if_attribute(self) -> str | None:
        return self._execute_if

    def execute_if(self, context_attribute: str) -> "TransformationUtility":
        self._execute_if = require_identifier(context_attribute, label="Utility condition attribute")
        return self

    @property
    def context_attribute_name(self) -> str | None:
        """Key the execution engine stores this utility's result under (defaults to its name)."""

        return self._context_attribute_name or self.name

    def set_context_attribute_name(self, attribute_name: str) -> "TransformationUtility":
        self._context_attribute_name = require_identifier(
            attribute_name, label="Utility result attribute"
        )
        return self

    @property
    def save_result(self) -> bool:
        return self._save_result

    def set_save_result(self, save_result: bool) -> "TransformationUtility":
        if not isinstance(save_result, bool):
            raise TypeError(f"save_result must be a boolean (type={type(save_result).__name__})")
        self._save_result = save_result
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, order={self._order!r})"


class TransformationOperation(TransformationUtility):
    """A utility that modifies application files.

    Only operations can serve as the per-file template of a
    `MultipleOperations` utility.
    """
