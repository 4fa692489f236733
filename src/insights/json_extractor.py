"""
JSON Block Extraction.

Text generation services often wrap the requested JSON document in prose or
markdown fences. This module finds the first balanced ``{...}`` block in
such text.
"""

from typing import Optional


def extract_json_block(text: str) -> Optional[str]:
    """
    Extract the first balanced JSON object from text.

    Scans from the first ``{`` and tracks brace depth, ignoring braces that
    appear inside JSON string literals.

    Args:
        text (str): Raw text potentially containing a JSON object

    Returns:
        Optional[str]: The object text, or None if no balanced block exists
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        # unbalanced from this brace, try the next one
        start = text.find("{", start + 1)
    return None
