"""
Shape kind mapping module

Kind name → default style template and size, kind name normalization,
rounded-rectangle corner radius handling, and best-effort style → kind inference
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..config import DEFAULT_CORNER_RADIUS
from ..errors import InvalidArgumentError
from .style_map import parse_style

KIND_RECTANGLE = 'Rectangle'
KIND_ELLIPSE = 'Ellipse'
KIND_CYLINDER = 'Cylinder'
KIND_CLOUD = 'Cloud'
KIND_SQUARE = 'Square'
KIND_CIRCLE = 'Circle'
KIND_STEP = 'Step'
KIND_ACTOR = 'Actor'
KIND_TEXT = 'Text'
KIND_ROUNDED_RECTANGLE = 'RoundedRectangle'

PROP_ARC_SIZE = 'arcSize'
PROP_ABSOLUTE_ARC_SIZE = 'absoluteArcSize'


@dataclass(frozen=True)
class KindTemplate:
    """Default style and size for a shape kind"""
    name: str
    style: Mapping[str, Any]
    width: float
    height: float

    def new_style(self) -> Dict[str, Any]:
        """Return a fresh, mutable copy of the template style"""
        return dict(self.style)


def _template(name: str, style: str, width: float, height: float) -> KindTemplate:
    return KindTemplate(name, MappingProxyType(parse_style(style)), width, height)


KIND_CATALOG: Mapping[str, KindTemplate] = MappingProxyType({
    t.name: t for t in (
        _template(KIND_RECTANGLE, 'rounded=1;whiteSpace=wrap;html=1;', 120, 60),
        _template(KIND_ELLIPSE, 'ellipse;whiteSpace=wrap;html=1;', 120, 80),
        _template(KIND_CYLINDER, 'shape=cylinder3;whiteSpace=wrap;html=1;boundedLbl=1;backgroundOutline=1;size=15;', 60, 80),
        _template(KIND_CLOUD, 'ellipse;shape=cloud;whiteSpace=wrap;html=1;', 120, 80),
        _template(KIND_SQUARE, 'whiteSpace=wrap;html=1;aspect=fixed;rounded=1;', 80, 80),
        _template(KIND_CIRCLE, 'ellipse;whiteSpace=wrap;html=1;aspect=fixed;', 80, 80),
        _template(KIND_STEP, 'shape=step;perimeter=stepPerimeter;whiteSpace=wrap;html=1;fixedSize=1;', 120, 80),
        _template(KIND_ACTOR, 'shape=umlActor;verticalLabelPosition=bottom;verticalAlign=top;html=1;outlineConnect=0;', 30, 60),
        _template(KIND_TEXT, 'text;html=1;strokeColor=none;fillColor=none;align=center;verticalAlign=middle;whiteSpace=wrap;rounded=0;', 60, 30),
        _template(
            KIND_ROUNDED_RECTANGLE,
            f'whiteSpace=wrap;html=1;rounded=1;absoluteArcSize=1;arcSize={DEFAULT_CORNER_RADIUS * 2};',
            120, 60,
        ),
    )
})

# Common misspellings → canonical kind name
_KIND_ALIASES: Dict[str, str] = {
    'Elipse': KIND_ELLIPSE,
}


def normalize_kind(kind: Optional[str]) -> Optional[str]:
    """Correct known misspellings; every other name passes through unchanged"""
    if kind is None:
        return None
    return _KIND_ALIASES.get(kind, kind)


def resolve_kind(kind: str) -> KindTemplate:
    """
    Look up the template for a kind name

    Raises:
        InvalidArgumentError: Unknown kind
    """
    normalized = normalize_kind(kind)
    template = KIND_CATALOG.get(normalized)
    if template is None:
        raise InvalidArgumentError(
            f"Unknown kind: {kind}. Supported: {', '.join(KIND_CATALOG)}"
        )
    return template


def coerce_corner_radius(value: Any, default: int = DEFAULT_CORNER_RADIUS) -> int:
    """Coerce a corner radius to an int >= 1, falling back to default"""
    if value is None or isinstance(value, bool):
        return default
    try:
        radius = int(float(value))
    except (TypeError, ValueError):
        return default
    return radius if radius >= 1 else default


def apply_corner_radius(style: Dict[str, Any], radius: Any, default: int = DEFAULT_CORNER_RADIUS) -> Dict[str, Any]:
    """
    Write the rounded-rectangle corner radius into style (in place)

    draw.io treats arcSize as a diameter when absoluteArcSize is set, so the
    stored value is twice the requested radius.
    """
    style[PROP_ABSOLUTE_ARC_SIZE] = '1'
    style[PROP_ARC_SIZE] = str(coerce_corner_radius(radius, default) * 2)
    return style


def _value(style: Mapping[str, Any], key: str) -> Optional[str]:
    value = style.get(key)
    return None if value is None else str(value)


# Ordered (predicate, kind) rules; first match wins. The ellipse flag comes
# first, so the Cloud and Circle templates (both carry it) read back as Ellipse.
_KIND_RULES: List[Tuple[Callable[[Mapping[str, Any]], bool], str]] = [
    (lambda s: _value(s, 'ellipse') is not None, KIND_ELLIPSE),
    (lambda s: _value(s, 'shape') == 'cylinder3', KIND_CYLINDER),
    (lambda s: _value(s, 'shape') == 'cloud', KIND_CLOUD),
    (lambda s: _value(s, 'shape') == 'step', KIND_STEP),
    (lambda s: _value(s, 'shape') == 'umlActor', KIND_ACTOR),
    (lambda s: _value(s, 'strokeColor') == 'none' and _value(s, 'fillColor') == 'none', KIND_TEXT),
    (lambda s: _value(s, 'ellipse') is not None and _value(s, 'aspect') == 'fixed', KIND_CIRCLE),
    (lambda s: _value(s, 'aspect') == 'fixed', KIND_SQUARE),
    (lambda s: _value(s, 'rounded') == '1' and _value(s, PROP_ABSOLUTE_ARC_SIZE) == '1', KIND_ROUNDED_RECTANGLE),
]


def infer_kind(style: Any) -> str:
    """
    Best-effort reverse mapping from a style to a kind name

    Lossy: any custom style that happens to carry a kind's signature is
    reported as that kind, and Cloud and Circle vertices built from their
    templates report Ellipse.
    """
    parsed = parse_style(style)
    for predicate, kind in _KIND_RULES:
        if predicate(parsed):
            return kind
    return KIND_RECTANGLE


def corner_radius_of(style: Any) -> Optional[int]:
    """Corner radius encoded in a rounded-rectangle style, or None"""
    parsed = parse_style(style)
    if _value(parsed, PROP_ABSOLUTE_ARC_SIZE) != '1':
        return None
    try:
        return int(float(parsed.get(PROP_ARC_SIZE)) // 2) or None
    except (TypeError, ValueError):
        return None
