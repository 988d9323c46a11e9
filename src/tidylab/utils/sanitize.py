"""Name sanitization for column headers"""
import re
from typing import Iterable, List


def sanitize_name(name: str) -> str:
    """
    Convert a header to a snake_case identifier.

    - Lowercase
    - Replace spaces/special chars with underscores
    - "%" becomes "percent", "#" becomes "number"
    - Remove consecutive underscores
    - Strip leading/trailing underscores
    - Prefix "x" when the result starts with a digit
    """
    if name is None:
        return "unnamed"

    # Lowercase
    result = str(name).strip().lower()

    result = result.replace('%', ' percent ').replace('#', ' number ')

    # Replace common separators with underscore
    result = re.sub(r'[\s\-./\\()]+', '_', result)

    # Remove any remaining non-alphanumeric (except underscore)
    result = re.sub(r'[^a-z0-9_]', '', result)

    # Collapse multiple underscores
    result = re.sub(r'_+', '_', result)

    # Strip leading/trailing underscores
    result = result.strip('_')

    # Must be usable as an attribute name
    if result and result[0].isdigit():
        result = 'x' + result

    return result or "unnamed"


def clean_names(names: Iterable) -> List[str]:
    """
    Sanitize a whole header row, keeping the names unique.

    Example: clean_names(["Price ($)", "price", "Yield %"])
             -> ["price", "price_1", "yield_percent"]
    """
    seen = {}
    cleaned = []
    for name in names:
        col = sanitize_name(name)
        candidate = col
        # A generated suffix may already be taken by a real header
        while candidate in cleaned:
            seen[col] = seen.get(col, 0) + 1
            candidate = f"{col}_{seen[col]}"
        cleaned.append(candidate)
    return cleaned
