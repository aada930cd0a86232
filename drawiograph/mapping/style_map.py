"""
Style mapping module

Conversion between draw.io style strings ("key1=value1;key2;") and ordered key-value dicts
"""
from typing import Any, Dict, Mapping, Union

StyleInput = Union[str, Mapping[str, Any], None]


def parse_style(style: StyleInput) -> Dict[str, Any]:
    """
    Parse a style definition into an ordered dict

    Args:
        style: Style string ("rounded=1;whiteSpace=wrap;") or mapping

    Returns:
        New dict. Mappings are shallow copied; for strings, empty segments are
        ignored and keys without a value ("ellipse", "ellipse=") map to "".

    Example:
        parse_style("rounded=1;ellipse;html=1")
        # {"rounded": "1", "ellipse": "", "html": "1"}
    """
    if style is None:
        return {}
    if not isinstance(style, str):
        return dict(style)

    result: Dict[str, Any] = {}
    for part in style.split(";"):
        if not part:
            continue
        key, _, value = part.partition("=")
        result[key] = value
    return result


def _format_value(value: Any) -> str:
    if value is True:
        return "1"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def stringify_style(style: Mapping[str, Any]) -> str:
    """
    Convert a style dict back to a draw.io style string

    None values are dropped entirely. Falsy values that are set ("", 0, False)
    are written as a bare key, which is how draw.io spells flags such as "ellipse".

    Example:
        stringify_style({"a": 0, "b": None, "c": "x"})
        # "a;c=x;"
    """
    parts = []
    for key, value in style.items():
        if value is None:
            continue
        if value:
            parts.append(f"{key}={_format_value(value)};")
        else:
            parts.append(f"{key};")
    return "".join(parts)


def merge_styles(base: StyleInput, overrides: StyleInput) -> Dict[str, Any]:
    """Merge two style definitions; keys in overrides win"""
    merged = parse_style(base)
    merged.update(parse_style(overrides))
    return merged
