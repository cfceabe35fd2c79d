"""Registration and ordering kernel for declarative transformation templates.

Core modules (`errors`, `utility`, `utilities`, `template`, `extension`) never
import the recipe layer (`config_io`, `config_namespace`, `utility_registry`,
`recipes`) or the CLI. See `transformkit.docs`.
"""

from transformkit.errors import (
    AlreadyOwnedError,
    TransformationDefinitionError,
    UnresolvableTargetError,
)
from transformkit.extension import Extension
from transformkit.template import TransformationTemplate
from transformkit.utilities import LOG_LEVELS, Log, MultipleOperations, parse_log_level
from transformkit.utility import (
    Step,
    TransformationOperation,
    TransformationUtility,
    UtilityParent,
)

__all__ = [
    "AlreadyOwnedError",
    "Extension",
    "LOG_LEVELS",
    "Log",
    "MultipleOperations",
    "Step",
    "TransformationDefinitionError",
    "TransformationOperation",
    "TransformationTemplate",
    "TransformationUtility",
    "UnresolvableTargetError",
    "UtilityParent",
    "parse_log_level",
]
