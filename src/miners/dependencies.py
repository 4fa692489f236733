"""
Dependency manifest parsing.

Extracts declared dependency names from the manifest formats the miner
understands. Unknown manifests and unparsable content yield no dependencies.
"""

import json
import re
from typing import List

from config import logger

ARTIFACT_ID = re.compile(r"<artifactId>([^<]+)</artifactId>")
REQUIREMENT_SEPARATORS = re.compile(r"==|>=|<=|~=|!=|>|<|\[|;|\s")


def _from_package_json(content: str) -> List[str]:
    package = json.loads(content)
    dependencies = []
    for section in ("dependencies", "devDependencies"):
        if isinstance(package.get(section), dict):
            dependencies.extend(package[section].keys())
    return dependencies


def _from_requirements(content: str) -> List[str]:
    dependencies = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith(("#", "-")):
            continue
        name = REQUIREMENT_SEPARATORS.split(line, maxsplit=1)[0]
        if name:
            dependencies.append(name)
    return dependencies


def _from_pom(content: str) -> List[str]:
    return [match.strip() for match in ARTIFACT_ID.findall(content)]


def _from_go_mod(content: str) -> List[str]:
    dependencies = []
    for line in content.splitlines():
        if line.startswith("\t") and "//" not in line:
            parts = line.strip().split()
            if parts:
                dependencies.append(parts[0])
    return dependencies


PARSERS = {
    "package.json": _from_package_json,
    "requirements.txt": _from_requirements,
    "pom.xml": _from_pom,
    "go.mod": _from_go_mod,
}


def extract_dependencies(content: str, filename: str) -> List[str]:
    """
    Extract dependency names from a manifest.

    Args:
        content (str): Manifest text
        filename (str): Manifest file name, used to pick the parser

    Returns:
        List[str]: Dependency names in declaration order
    """
    parser = PARSERS.get(filename)
    if parser is None:
        return []
    try:
        return parser(content)
    except (ValueError, AttributeError) as e:
        logger.warning(
            {
                "message": "Failed to parse dependency manifest",
                "file": filename,
                "error": str(e),
            }
        )
        return []
