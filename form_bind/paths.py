"""Composition of dash-separated form element paths.

Every field of a mapping carries its full path from the root mapping,
for e.g. ``order-items[2]-quantity``. These helpers are pure and shared
by the mapping tree, the binder and the CSRF token handling.
"""

import re
from collections.abc import Iterable

from form_bind.errors import MappingConfigurationError

PATH_SEP = "-"
AUTH_TOKEN_FIELD_NAME = "formAuthToken"

_INDEX_PATTERN = re.compile(r"\[[0-9]*\]")
_BRACKETS = "[]"


def prefix(path: str, path_prefix: str) -> str:
    """Prepend a path prefix to a path.

    Args:
        path: Path to prefix.
        path_prefix: Prefix to prepend, empty string leaves the path unchanged.

    Returns:
        ``path_prefix + PATH_SEP + path``.

    Raises:
        MappingConfigurationError: If the path is already prefixed with the prefix.
    """
    if not path_prefix:
        return path
    if path == path_prefix or path.startswith(path_prefix + PATH_SEP):
        raise MappingConfigurationError(
            f"Path '{path}' is already prefixed with '{path_prefix}'"
        )
    return path_prefix + PATH_SEP + path


def with_index(path: str, index: int, path_prefix: str) -> str:
    """Insert ``[index]`` right after the given prefix of the path.

    Raises:
        MappingConfigurationError: If the path does not start with the prefix.
    """
    if not path.startswith(path_prefix):
        raise MappingConfigurationError(
            f"Path '{path}' must start with prefix '{path_prefix}'"
        )
    return f"{path_prefix}[{index}]{path[len(path_prefix):]}"


def label_key(path: str) -> str:
    """Translation key for a path; list rows share one key."""
    return _INDEX_PATTERN.sub("", path)


def remove_trailing_brackets(name: str) -> str:
    if name.endswith(_BRACKETS):
        return name[: -len(_BRACKETS)]
    return name


def property_name(path: str) -> str:
    """Last segment of the path (the simple property name)."""
    return remove_trailing_brackets(path.rsplit(PATH_SEP, 1)[-1])


def find_max_index(param_names: Iterable[str], path: str) -> int:
    """Find the greatest list index used in parameter names under the path.

    Args:
        param_names: Names of request parameters.
        path: Path of a list mapping.

    Returns:
        Maximum index found, -1 if no indexed parameter matches.
    """
    indexed_path = re.compile(re.escape(path) + r"\[([0-9]+)\].*")
    max_index = -1
    for name in param_names:
        match = indexed_path.fullmatch(name)
        if match:
            max_index = max(max_index, int(match.group(1)))
    return max_index


def trim_values(values: list[str] | None) -> list[str] | None:
    if values is None:
        return None
    return [v.strip() if v is not None else None for v in values]
