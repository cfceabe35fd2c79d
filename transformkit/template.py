"""Transformation templates: ordered lists of exclusively owned utilities.

A template is built once, usually at start-up, by a subclass that registers its
utilities from `__init__`. Registration may also happen from several threads;
computing the order, claiming the utility and appending it form one critical
section per template.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from transformkit.errors import AlreadyOwnedError, UnresolvableTargetError
from transformkit.utilities.log import Log
from transformkit.utilities.multiple import MultipleOperations
from transformkit.utility import Step, TransformationOperation

logger = logging.getLogger(__name__)

_REQUIRED_STEP_ATTRIBUTES = (
    "parent",
    "order",
    "name",
    "relative_path",
    "absolute_file_from_context_attribute",
)
_REQUIRED_STEP_METHODS = ("set_name", "set_parent")


def _group_name(group: Any) -> str:
    if isinstance(group, type):
        return group.__name__
    if isinstance(group, str) and group.strip():
        return group.strip()
    raise TypeError(
        "get_extension_class() must return a class or a non-empty string "
        f"(type={type(group).__name__})"
    )


class TransformationTemplate:
    """Ordered set of utilities to apply against an application.

    Subclasses implement `get_extension_class()` and `get_description()` and
    register utilities with `add()`. The template name is
    `"<extension>:<template type>"`.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._utilities: list[Step] = []
        self._name = f"{_group_name(self.get_extension_class())}:{self.template_type_name()}"

    def get_extension_class(self) -> type | str:
        """Return the extension this template belongs to."""

        raise NotImplementedError

    def get_description(self) -> str:
        raise NotImplementedError

    def template_type_name(self) -> str:
        return type(self).__name__

    @property
    def name(self) -> str:
        return self._name

    def _validate_utility(self, utility: Any) -> None:
        for attr in _REQUIRED_STEP_ATTRIBUTES:
            if not hasattr(utility, attr):
                raise TypeError(
                    f"Transformation utility missing required attribute: {attr} "
                    f"(type={type(utility).__name__})"
                )
        for method_name in _REQUIRED_STEP_METHODS:
            method = getattr(utility, method_name, None)
            if method is None or not callable(method):
                raise TypeError(
                    f"Transformation utility missing required method: {method_name} "
                    f"(type={type(utility).__name__})"
                )

    def _already_owned(self, utility: Step) -> AlreadyOwnedError:
        return AlreadyOwnedError(
            f"Invalid attempt to add already registered transformation utility "
            f"{utility.name} to transformation template {self._name}"
        )

    def add(self, utility: Step, name: str | None = None) -> str:
        """Append a utility and make this template its only owner.

        Returns the utility name, explicit or derived from this template's name
        and the utility's order. The utility is claimed before it is appended,
        so readers never see it without its order and a refused utility is
        never appended. A utility failing target validation stays registered;
        the error signals a definition bug to fix at the source.
        """

        self._validate_utility(utility)
        if name is not None:
            utility.set_name(name)

        with self._lock:
            # Order of execution starts at 1; it is not the list index.
            order = len(self._utilities) + 1
            if utility.parent is not None:
                raise self._already_owned(utility)
            try:
                utility.set_parent(self, order)
            except AlreadyOwnedError as exc:
                raise self._already_owned(utility) from exc
            self._utilities.append(utility)

        if utility.relative_path is None and utility.absolute_file_from_context_attribute is None:
            raise UnresolvableTargetError(
                f"Neither absolute nor relative path has been set for transformation utility "
                f"{utility.name} in transformation template {self._name}"
            )

        utility_name = utility.name
        logger.debug(
            "Registered utility %s (order=%d) in template %s", utility_name, order, self._name
        )
        return utility_name

    def add_multiple(self, template_operation: TransformationOperation, *attributes: str) -> str:
        """Register a `MultipleOperations` applying `template_operation` to each listed file."""

        return self.add(MultipleOperations(template_operation).set_files(*attributes))

    def log(
        self, message: str, *attribute_names: str, level: int | str = logging.INFO
    ) -> str:
        return self.add(Log(message, *attribute_names, level=level))

    def utilities(self) -> tuple[Step, ...]:
        """Read-only snapshot of the registered utilities in execution order."""

        with self._lock:
            return tuple(self._utilities)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, utilities={len(self.utilities())})"
