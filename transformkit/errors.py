from __future__ import annotations


class TransformationDefinitionError(Exception):
    """A transformation template or utility was defined incorrectly.

    These are programming errors in template definition code. They are raised
    while templates are being built, never retried, and are expected to be fixed
    at the source.
    """


class AlreadyOwnedError(TransformationDefinitionError):
    """A utility that already belongs to a template was registered again."""


class UnresolvableTargetError(TransformationDefinitionError):
    """A registered utility has neither a relative path nor a context attribute."""
