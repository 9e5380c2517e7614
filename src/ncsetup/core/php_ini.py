"""php.ini directive rewriting.

Pure text transform: given ini content and the desired directives, return
content where each directive is set exactly once to the desired value.
"""

import re
from collections.abc import Mapping


def _directive_re(key: str) -> re.Pattern[str]:
    return re.compile(rf"^[ \t]*(;[ \t]*)?{re.escape(key)}[ \t]*=.*$", re.MULTILINE)


def apply_ini_settings(text: str, settings: Mapping[str, str]) -> str:
    """Set ini directives, uncommenting or appending as needed.

    Every active (uncommented) line is rewritten, since PHP honours the last
    one. Without an active line the first commented template line is
    uncommented; if neither exists the directive is appended at the end.

    Example:
        >>> apply_ini_settings("memory_limit = 128M\\n", {"memory_limit": "512M"})
        'memory_limit = 512M\\n'
    """
    for key, value in settings.items():
        line = f"{key} = {value}"
        matches = list(_directive_re(key).finditer(text))
        targets = [m for m in matches if m.group(1) is None] or matches[:1]
        if not targets:
            if text and not text.endswith("\n"):
                text += "\n"
            text += line + "\n"
            continue
        for match in reversed(targets):
            text = text[: match.start()] + line + text[match.end() :]
    return text


def ini_satisfied(text: str, settings: Mapping[str, str]) -> bool:
    return apply_ini_settings(text, settings) == text
