from __future__ import annotations

_LEAF_KEY = "contains"
_NODE_KEYS = ("all", "any", _LEAF_KEY)


def validate_condition(condition: dict) -> list[str]:
    """Return a list of error strings if the condition tree is malformed."""
    errors: list[str] = []
    _validate_node(condition, errors, path="condition")
    return errors


def _validate_node(node: dict, errors: list[str], path: str) -> None:
    if not isinstance(node, dict):
        errors.append(f"{path}: expected dict, got {type(node).__name__}")
        return

    present = [key for key in _NODE_KEYS if key in node]
    if len(present) > 1:
        errors.append(f"{path}: expected exactly one of 'all', 'any' or '{_LEAF_KEY}', got {present}")
        return

    for combinator in ("all", "any"):
        if combinator in node:
            children = node[combinator]
            if not isinstance(children, list):
                errors.append(f"{path}.{combinator}: expected list, got {type(children).__name__}")
                return
            if not children:
                errors.append(f"{path}.{combinator}: must not be empty")
                return
            for i, child in enumerate(children):
                _validate_node(child, errors, path=f"{path}.{combinator}[{i}]")
            return

    # Leaf node: a single substring to look for
    if _LEAF_KEY not in node:
        errors.append(f"{path}: expected one of 'all', 'any' or '{_LEAF_KEY}'")
        return
    value = node[_LEAF_KEY]
    if not isinstance(value, str):
        errors.append(f"{path}: '{_LEAF_KEY}' requires a string value, got {type(value).__name__}")
    elif not value:
        errors.append(f"{path}: '{_LEAF_KEY}' value must not be empty")


def evaluate_condition(condition: dict, line: str) -> bool:
    """Evaluate an all/any condition tree against a single line of text.

    Leaves are plain, case-sensitive substring tests.
    """
    if "all" in condition:
        return all(evaluate_condition(c, line) for c in condition["all"])
    if "any" in condition:
        return any(evaluate_condition(c, line) for c in condition["any"])
    return condition[_LEAF_KEY] in line
