"""Message template rendering against a configuration snapshot."""

import re
from collections.abc import Mapping

__all__ = ["RenderError", "render_template"]

_ACTION = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_FIELD = re.compile(r"^\s*\.([A-Za-z_][A-Za-z0-9_]*)\s*$")


class RenderError(ValueError):
    """Raised when a template cannot be rendered with the given variables."""


def render_template(template: str, variables: Mapping[str, str]) -> str:
    """Substitute ``{{.name}}`` placeholders with values from variables.

    Args:
        template: Text with ``{{.name}}`` placeholders.
        variables: Current configuration snapshot.

    Returns:
        Rendered text.

    Raises:
        RenderError: If a placeholder is malformed, unterminated, or names a
            variable missing from variables.
    """
    parts: list[str] = []
    pos = 0

    for match in _ACTION.finditer(template):
        parts.append(template[pos : match.start()])
        field = _FIELD.match(match.group(1))
        if field is None:
            raise RenderError(f"Malformed action {match.group(0)!r} at offset {match.start()}")

        name = field.group(1)
        try:
            parts.append(str(variables[name]))
        except KeyError:
            raise RenderError(f"No value for variable {name!r}") from None
        pos = match.end()

    tail = template[pos:]
    if "{{" in tail:
        raise RenderError(f"Unterminated action at offset {pos + tail.index('{{')}")
    parts.append(tail)

    return "".join(parts)
