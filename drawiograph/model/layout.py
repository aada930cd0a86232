"""
Layout module

Validation of layout requests and delegation to an external layout engine.
Positioning algorithms are not implemented here.
"""
from typing import Any, Callable, Dict, Mapping, Optional

from ..errors import InvalidArgumentError

LAYOUT_HIERARCHICAL = 'hierarchical'
LAYOUT_CIRCLE = 'circle'
LAYOUT_ORGANIC = 'organic'
LAYOUT_COMPACT_TREE = 'compact-tree'
LAYOUT_RADIAL_TREE = 'radial-tree'
LAYOUT_PARTITION = 'partition'
LAYOUT_STACK = 'stack'

SUPPORTED_LAYOUTS = (
    LAYOUT_HIERARCHICAL, LAYOUT_CIRCLE, LAYOUT_ORGANIC, LAYOUT_COMPACT_TREE,
    LAYOUT_RADIAL_TREE, LAYOUT_PARTITION, LAYOUT_STACK,
)

DIRECTION_TOP_DOWN = 'top-down'
DIRECTION_LEFT_RIGHT = 'left-right'

# draw.io direction constants used by the hierarchical layout
DIRECTION_TO_MX = {
    DIRECTION_TOP_DOWN: 'north',
    DIRECTION_LEFT_RIGHT: 'west',
}

# engine(graph, algorithm, options) mutates vertex geometry in place
LayoutEngine = Callable[[Any, str, Dict[str, Any]], None]


def validate_layout(algorithm: str, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Validate a layout request

    Args:
        algorithm: One of SUPPORTED_LAYOUTS
        options: Algorithm options; only 'hierarchical' accepts 'direction'

    Returns:
        Normalized options (direction translated to 'mx_direction' when given)

    Raises:
        InvalidArgumentError: Unsupported algorithm or direction
    """
    if algorithm not in SUPPORTED_LAYOUTS:
        raise InvalidArgumentError(
            f"Unsupported layout algorithm: {algorithm}. Supported: {', '.join(SUPPORTED_LAYOUTS)}"
        )
    normalized = dict(options or {})
    direction = normalized.get('direction')
    if algorithm == LAYOUT_HIERARCHICAL and direction is not None:
        if direction not in DIRECTION_TO_MX:
            raise InvalidArgumentError(
                f"Invalid hierarchical direction: {direction}. "
                f"Allowed: {DIRECTION_TOP_DOWN}, {DIRECTION_LEFT_RIGHT}"
            )
        normalized['mx_direction'] = DIRECTION_TO_MX[direction]
    return normalized
