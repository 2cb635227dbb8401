"""Builds the interactive canvas response of a single turn.

A turn may show several slides in a row ("you said yes", then the next
question). Each slide is one ``CanvasBuilder``; later slides hang off
``next`` and ``build()`` flattens the chain into the ordered ``data`` list the
web app plays back.
"""
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union
from ..models import Canvas
from . import ssml

SCALAR_FIELDS = ("url", "suppress_mic", "action", "template", "speech", "next")
AGGREGATE_FIELDS = ("config", "data", "suggestions")


def deep_clean(value: Any) -> Any:
    """Drops None, empty strings and empty containers, recursively."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        cleaned = {k: deep_clean(v) for k, v in value.items()}
        return {k: v for k, v in cleaned.items() if not _is_empty(v)}
    if isinstance(value, (list, tuple)):
        cleaned_items = [deep_clean(v) for v in value]
        return [v for v in cleaned_items if not _is_empty(v)]
    return value


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, dict, list)) and len(value) == 0)


class CanvasBuilder:
    def __init__(
        self,
        url: Optional[str] = None,
        suppress_mic: bool = False,
        action: Union[str, Enum] = "",
        template: Union[str, Enum] = "",
        speech: str = "",
        config: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[Any]] = None,
        next: Optional["CanvasBuilder"] = None,
    ) -> None:
        self.url = url or ""
        self.suppress_mic = suppress_mic
        self.action = action
        self.template = template
        self.speech = speech
        self.config: Dict[str, Any] = dict(config or {})
        self.data: Dict[str, Any] = dict(data or {})
        self.suggestions: List[Any] = list(suggestions or [])
        self.next = next

    def set_state(self, **state: Any) -> "CanvasBuilder":
        for field, value in state.items():
            if field in SCALAR_FIELDS:
                self.set(field, value)
            elif field in AGGREGATE_FIELDS:
                self.add(field, value)
        return self

    def set(self, field: str, value: Any) -> "CanvasBuilder":
        if field in SCALAR_FIELDS or field in AGGREGATE_FIELDS:
            setattr(self, field, value)
        return self

    def add(self, field: str, value: Any) -> "CanvasBuilder":
        # unknown fields are ignored, like set()
        if field not in SCALAR_FIELDS and field not in AGGREGATE_FIELDS:
            return self
        current = getattr(self, field)
        if isinstance(current, list):
            extra = list(value) if isinstance(value, (list, tuple)) else [value]
            setattr(self, field, current + extra)
        elif isinstance(current, dict):
            setattr(self, field, {**current, **(value or {})})
        else:
            self.set(field, value)
        return self

    def append_slide(self, slide: "CanvasBuilder") -> "CanvasBuilder":
        """Attaches ``slide`` after the last slide of this chain."""
        if not isinstance(slide, CanvasBuilder):
            return self
        chain = list(self._chain())
        if any(s is slide for s in chain):
            raise ValueError("slide is already part of this chain")
        chain[-1].next = slide
        return self

    def _chain(self) -> Iterator["CanvasBuilder"]:
        seen = set()
        node: Optional[CanvasBuilder] = self
        while isinstance(node, CanvasBuilder):
            if id(node) in seen:
                raise ValueError("slide chain contains a cycle")
            seen.add(id(node))
            yield node
            node = node.next

    def _snapshot(self) -> Dict[str, Any]:
        return deep_clean({
            "action": self.action,
            "template": self.template,
            "speech": ssml.clean(self.speech) if self.speech else "",
            "config": self.config,
            "data": self.data,
            "suggestions": self.suggestions,
        })

    def build_state(self) -> Dict[str, Any]:
        state = self._snapshot()
        if isinstance(self.next, CanvasBuilder):
            following = self.next.build_state()
            if following:
                state["next"] = following
        return state

    def build(self, url: Optional[str] = None) -> Canvas:
        if isinstance(url, str) and url:
            self.url = url
        slides = [node._snapshot() for node in self._chain()]
        return Canvas(url=self.url, suppress_mic=self.suppress_mic, data=slides)


class NullCanvasBuilder:
    """Stands in for ``CanvasBuilder`` on devices without a canvas."""

    def set_state(self, **state: Any) -> "NullCanvasBuilder":
        return self

    def set(self, field: str, value: Any) -> "NullCanvasBuilder":
        return self

    def add(self, field: str, value: Any) -> "NullCanvasBuilder":
        return self

    def append_slide(self, slide: Any) -> "NullCanvasBuilder":
        return self

    def build_state(self) -> None:
        return None

    def build(self, url: Optional[str] = None) -> None:
        return None


Composer = Union[CanvasBuilder, NullCanvasBuilder]


def create(enabled: bool, **initial_state: Any) -> Composer:
    if not enabled:
        return NullCanvasBuilder()
    return CanvasBuilder(**initial_state)
