"""
Normalization of query dimensions into key -> list-of-values form.
"""

from typing import Any, Optional

from .models.query_spec import DimensionValue
from .templating import TemplateService


def normalize_dimensions(
    dimensions: dict[str, DimensionValue],
    templates: TemplateService,
    scoped_vars: Optional[dict[str, Any]] = None,
) -> dict[str, list[str]]:
    """
    Convert dimensions to a map of key to list of values.

    Lists pass through unchanged. A string referencing a multi-valued
    variable expands to one entry per selected value; any other string
    becomes a one-element list, substituted if it references a declared
    variable and kept literally otherwise.

    Args:
        dimensions: Dimension key to value or list of values.
        templates: Template service used for substitution.
        scoped_vars: Per-call variable overrides.

    Returns:
        Dimension key to list of values.
    """
    result: dict[str, list[str]] = {}
    for key, value in dimensions.items():
        if isinstance(value, list):
            result[key] = value
            continue

        name = templates.get_variable_name(value)
        variable = next((v for v in templates.variables if v.name == name), None)
        if variable is None:
            result[key] = [value]
        elif variable.multi:
            result[key] = templates.replace(value, scoped_vars, "pipe").split("|")
        else:
            result[key] = [templates.replace(value, scoped_vars)]
    return result
