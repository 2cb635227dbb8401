from dataclasses import dataclass, field
from typing import Any, List, Union
from ..models import Simple


@dataclass
class TurnResponses:
    """One logical turn rendered for each output surface."""
    simple: Union[str, Simple]
    rich: List[Any] = field(default_factory=list)
    immersive: List[Any] = field(default_factory=list)


@dataclass
class Surfaces:
    has_interactive_canvas: bool = False
    has_screen: bool = False


def select_response(responses: TurnResponses, surfaces: Surfaces) -> List[Any]:
    """Picks the richest non-empty rendering the device can show.

    Canvas beats rich chat, rich chat beats voice. Voice is always available.
    """
    immersive = [item for item in responses.immersive if item]
    if surfaces.has_interactive_canvas and immersive:
        return immersive
    rich = [item for item in responses.rich if item]
    if surfaces.has_screen and rich:
        return rich
    return [responses.simple]


@dataclass
class Transition:
    """What the previous handler just said, to be played before the next slide."""
    simple: str
    rich: List[Any]
    immersive: Any
