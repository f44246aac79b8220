#!/usr/bin/env python3
# =============================================================================
# Naming - Per-user namespacing of Kuiper resource names
# =============================================================================
# Kuiper has no notion of users, so streams and rules are partitioned by
# prepending a prefix derived from the caller identity to every name.

import logging
from typing import List

from .errors import MalformedEntityError

logger = logging.getLogger(__name__)

FROM_KEYWORD = "from"


def prefix(user_id: str) -> str:
    """
    Namespace prefix for a user: the identity with hyphens removed, plus '_'.

    Examples:
        >>> prefix("6c1a-22b0-4f")
        '6c1a22b04f_'
    """
    return user_id.replace("-", "") + "_"


def prepend(user_id: str, name: str) -> str:
    return f"{prefix(user_id)}{name}"


def remove(user_id: str, name: str) -> str:
    """Strip the user prefix from a name; names without it are returned as-is."""
    user_prefix = prefix(user_id)
    if name.startswith(user_prefix):
        return name[len(user_prefix):]
    return name


def remove_all(user_id: str, names: List[str]) -> List[str]:
    return [remove(user_id, name) for name in names]


def namespace_query(user_id: str, sql: str) -> str:
    """
    Namespace the source stream of a rule query.

    The query is split on whitespace and the word right after the first
    case-sensitive ``from`` is prefixed. Words are re-joined with single
    spaces.

    Raises:
        MalformedEntityError: if there is no ``from`` followed by a source
    """
    words = sql.split()
    try:
        idx = words.index(FROM_KEYWORD) + 1
    except ValueError:
        logger.warning("Rule query has no '%s' clause", FROM_KEYWORD)
        raise MalformedEntityError("rule query is missing a 'from' clause") from None
    if idx >= len(words):
        raise MalformedEntityError("rule query is missing the source after 'from'")

    words[idx] = prepend(user_id, words[idx])
    return " ".join(words)


def stream_sql(name: str, topic: str, row: str, fmt: str, stream_type: str) -> str:
    """Build the Kuiper statement that declares a stream."""
    return (
        f'create stream {name} ({row}) '
        f'WITH (DATASOURCE = "{topic}" FORMAT = "{fmt}" TYPE = "{stream_type}")'
    )
