from __future__ import annotations

from typing import Any

from transformkit.errors import AlreadyOwnedError
from transformkit.utility import (
    TransformationOperation,
    TransformationUtility,
    require_identifier,
)


class MultipleOperations(TransformationUtility):
    """Applies one template operation to every file held by some context attributes.

    Each attribute is expected to hold a list of files at run time. Fanning the
    template out over those files is the execution engine's job; this utility
    only carries the definition.
    """

    def __init__(self, template_operation: TransformationOperation, *, name: str | None = None):
        super().__init__(name=name)
        self.relative("")
        self.set_save_result(False)
        self._template_operation = self._validated_template_operation(template_operation)
        self._file_attributes: tuple[str, ...] = ()

    def _validated_template_operation(self, operation: Any) -> TransformationOperation:
        if not isinstance(operation, TransformationOperation):
            raise TypeError(
                "MultipleOperations template must be a TransformationOperation "
                f"(type={type(operation).__name__})"
            )
        if operation.parent is not None:
            raise AlreadyOwnedError(
                f"Transformation operation {operation.name} is registered to template "
                f"{operation.parent.name} and cannot be used as a MultipleOperations template"
            )
        return operation

    @property
    def template_operation(self) -> TransformationOperation:
        return self._template_operation

    @property
    def file_attributes(self) -> tuple[str, ...]:
        return self._file_attributes

    def set_files(self, *attributes: str) -> "MultipleOperations":
        if not attributes:
            raise ValueError("MultipleOperations requires at least one context attribute")
        self._file_attributes = tuple(
            require_identifier(attr, label=f"MultipleOperations attribute[{idx}]")
            for idx, attr in enumerate(attributes)
        )
        return self

    def get_description(self) -> str:
        attributes = ", ".join(self._file_attributes) or "<none>"
        return (
            f"Perform operation '{self._template_operation.get_description()}' "
            f"against files held by context attribute(s): {attributes}"
        )
