"""
Template variable substitution for query fields.

Supports the dashboard variable syntaxes $name, ${name}, ${name:format},
[[name]] and [[name:format]]. Any object exposing replace(),
variable_exists(), get_variable_name() and a variables list can stand in
for TemplateService.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Optional

VARIABLE_PATTERN = re.compile(
    r"\$(\w+)|\[\[(\w+?)(?::(\w+))?\]\]|\$\{(\w+)(?::(\w+))?\}"
)


@dataclass
class TemplateVariable:
    """
    A declared dashboard variable.

    Attributes:
        name: Variable name without the leading "$".
        current: Currently selected value, or values for multi-valued variables.
        multi: Whether the variable allows selecting several values.
    """

    name: str
    current: Any = ""
    multi: bool = False


def _match_parts(match: re.Match) -> tuple[str, Optional[str]]:
    name = match.group(1) or match.group(2) or match.group(4)
    fmt = match.group(3) or match.group(5)
    return name, fmt


def format_value(value: Any, fmt: Optional[str] = None) -> str:
    """
    Render a variable value for interpolation.

    Args:
        value: Single value or list of values. Numbers and other scalars are
            rendered with str().
        fmt: "pipe", "csv", "raw" or "glob"; None uses glob for several values.

    Returns:
        Interpolated text. A plain string is returned unchanged.
    """
    if isinstance(value, str):
        return value
    if not isinstance(value, list):
        return str(value)

    items = [str(v) for v in value]
    if fmt == "pipe":
        return "|".join(items)
    if fmt in ("csv", "raw"):
        return ",".join(items)
    if len(items) == 1:
        return items[0]
    return "{" + ",".join(items) + "}"


class TemplateService:
    """
    Resolves template variables in query strings.

    Example:
        templates = TemplateService([
            TemplateVariable(name="region", current="eu-west-1"),
            TemplateVariable(name="instance", current=["i-1", "i-2"], multi=True),
        ])

        templates.replace("$region")                 # "eu-west-1"
        templates.replace("$instance", fmt="pipe")   # "i-1|i-2"
    """

    def __init__(self, variables: Optional[list[TemplateVariable]] = None):
        self.variables: list[TemplateVariable] = list(variables or [])

    def _find(self, name: Optional[str]) -> Optional[TemplateVariable]:
        for variable in self.variables:
            if variable.name == name:
                return variable
        return None

    def get_variable_name(self, expression: Optional[str]) -> Optional[str]:
        """
        Extract the variable name referenced by an expression.

        Args:
            expression: Text that may contain a variable reference.

        Returns:
            Name of the first referenced variable, or None.
        """
        if not isinstance(expression, str):
            return None
        match = VARIABLE_PATTERN.search(expression)
        if not match:
            return None
        return _match_parts(match)[0]

    def variable_exists(self, expression: Optional[str]) -> bool:
        """
        Check whether an expression references a declared variable.

        Args:
            expression: Text that may contain a variable reference.

        Returns:
            True if the referenced variable is declared.
        """
        return self._find(self.get_variable_name(expression)) is not None

    def replace(
        self,
        target: Optional[str],
        scoped_vars: Optional[dict[str, Any]] = None,
        fmt: Optional[str] = None
    ) -> str:
        """
        Substitute every variable reference in target.

        Scoped variables take precedence over declared ones and may be given
        either as raw values or as {"text": ..., "value": ...} entries. A
        format in the reference itself (${name:csv}) wins over fmt. Unknown
        variables are left untouched.

        Args:
            target: Text to interpolate; None is treated as "".
            scoped_vars: Per-call variable overrides.
            fmt: Default format for multi-valued variables.

        Returns:
            Interpolated text.
        """
        if not target:
            return target or ""
        scoped_vars = scoped_vars or {}

        def _substitute(match: re.Match) -> str:
            name, ref_fmt = _match_parts(match)
            if name in scoped_vars:
                value = scoped_vars[name]
                if isinstance(value, dict):
                    value = value.get("value", "")
            else:
                variable = self._find(name)
                if variable is None:
                    return match.group(0)
                value = variable.current
            return format_value(value, ref_fmt or fmt)

        return VARIABLE_PATTERN.sub(_substitute, target)
