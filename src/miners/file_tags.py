"""
File tagging.

Selects the paths of a content listing that are relevant to the security,
performance and community health metrics. Matching is a case-insensitive
substring test on the full path.
"""

from typing import Iterable, List

SECURITY_MARKERS = (
    "security",
    "license",
    "licence",
    "copying",
    "copyright",
    "sanitize",
    "escape",
    "csrf",
    "xss",
    "validation",
    "sql injection",
)

PERFORMANCE_MARKERS = (
    "cache",
    "redis",
    "memcached",
    "lru",
    "ttl",
    "optimization",
    "performance",
    "index",
    "query",
    "pool",
    "migration",
    "load balancer",
    "scaling",
)

COMMUNITY_MARKERS = (
    "contributing",
    "code-of-conduct",
    "code_of_conduct",
    "community",
    "guidelines",
    "issue_template",
    "pull_request_template",
)


def tag_paths(paths: Iterable[str], markers: Iterable[str]) -> List[str]:
    """
    Return the paths containing any of the markers.

    Args:
        paths (Iterable[str]): Repository paths
        markers (Iterable[str]): Lowercase substrings to look for

    Returns:
        List[str]: Matching paths in input order
    """
    markers = tuple(markers)
    return [path for path in paths if any(marker in path.lower() for marker in markers)]


def security_files(paths: Iterable[str]) -> List[str]:
    return tag_paths(paths, SECURITY_MARKERS)


def performance_files(paths: Iterable[str]) -> List[str]:
    return tag_paths(paths, PERFORMANCE_MARKERS)


def community_files(paths: Iterable[str]) -> List[str]:
    return tag_paths(paths, COMMUNITY_MARKERS)
