from typing import Any, Callable, Iterable, Optional


def fold_case(value: Optional[str]) -> str:
    """
    Fold a string for case-insensitive comparison.

    Every case-insensitive comparison in the engine (identity grouping,
    identity lookups, field matching, page membership) goes through this
    function so that store-side and in-memory comparisons agree. None folds
    to the empty string.
    """
    if value is None:
        return ""
    return value.lower()


def strip_nulls(value: Any) -> Any:
    """
    Recursively remove keys with value None from dictionaries.

    Lists are preserved, but their elements are also cleaned.
    """
    if isinstance(value, dict):
        return {k: strip_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [strip_nulls(v) for v in value]
    return value


def contains_text(value: Optional[str], term: str) -> bool:
    """Case-insensitive substring match."""
    return fold_case(term) in fold_case(value)


def equals_text(value: Optional[str], term: str) -> bool:
    """Case-insensitive equality."""
    if value is None:
        return False
    return fold_case(value) == fold_case(term)


def any_contains_text(values: Iterable[Optional[str]], term: str) -> bool:
    return any(contains_text(v, term) for v in values)


def distinct(values: Iterable[Any], key: Optional[Callable[[Any], Any]] = None) -> list:
    """Drop repeated values, keeping the first occurrence order."""
    seen = set()
    result = []
    for v in values:
        k = key(v) if key is not None else v
        if k in seen:
            continue
        seen.add(k)
        result.append(v)
    return result
