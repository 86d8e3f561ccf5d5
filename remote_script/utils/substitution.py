"""${NAME} placeholder substitution."""

import re
from collections.abc import Mapping

_PLACEHOLDER = re.compile(r"\$\{([^{}]+)\}")


def substitute(text: str, variables: Mapping[str, str]) -> str:
    """Replace ``${NAME}`` tokens with values from ``variables``.

    Only exact tokens are replaced and the text is scanned once, so values
    that themselves contain placeholders are not expanded again. Unknown
    names are left verbatim.

    Args:
        text: Text containing placeholders
        variables: Substitution values keyed by bare name

    Returns:
        Text with known placeholders replaced
    """

    def _replace(match: re.Match[str]) -> str:
        return variables.get(match.group(1), match.group(0))

    return _PLACEHOLDER.sub(_replace, text)
