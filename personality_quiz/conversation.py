import copy
from typing import Any, Dict, List, Optional
from .constants import Action, Capability, END_CONVERSATION_SCENE
from .errors import UnknownActionError
from .models import Canvas, Card, HandlerRequest, SessionData, Simple, Suggestion
from .services import ssml
from .services.canvas_builder import Composer, NullCanvasBuilder
from .services.surface import Surfaces
from .state import load_session_data, persist_session_data


class Conversation:
    """One webhook turn: the inbound request plus the response being built."""

    def __init__(self, request: HandlerRequest) -> None:
        self.request = request
        self.handler_name = request.handler.name
        self.intent_name = request.intent.name
        self.intent_params = request.intent.params
        self.locale = request.user.locale
        self.session_id = request.session.id

        capabilities = set(request.device.capabilities)
        self.has_screen = Capability.RICH_RESPONSE.value in capabilities
        self.has_interactive_canvas = Capability.INTERACTIVE_CANVAS.value in capabilities

        self.session_params: Dict[str, Any] = copy.deepcopy(request.session.params)
        self.type_overrides: List[Dict[str, Any]] = copy.deepcopy(request.session.type_overrides)
        self.data: SessionData = load_session_data(self.session_params)
        self._initial = (copy.deepcopy(self.session_params), copy.deepcopy(self.type_overrides), self.data.model_copy(deep=True))

        self.items: List[Any] = []
        self.expected_speech: List[str] = []
        self.scene_next: Optional[str] = None
        self.immersive: Composer = NullCanvasBuilder()
        self.helper = None

    @property
    def action(self) -> Action:
        try:
            return Action(self.handler_name)
        except ValueError:
            raise UnknownActionError(self.handler_name) from None

    @property
    def surfaces(self) -> Surfaces:
        return Surfaces(has_interactive_canvas=self.has_interactive_canvas, has_screen=self.has_screen)

    def add(self, *items: Any) -> None:
        self.items.extend(item for item in items if item)

    def end_conversation(self) -> None:
        self.scene_next = END_CONVERSATION_SCENE

    def rollback(self) -> None:
        """Discards everything the current turn changed."""
        params, overrides, data = self._initial
        self.session_params = copy.deepcopy(params)
        self.type_overrides = copy.deepcopy(overrides)
        self.data = data.model_copy(deep=True)
        self.items = []
        self.expected_speech = []
        self.scene_next = None

    def _prompt(self) -> Dict[str, Any]:
        prompt: Dict[str, Any] = {"override": False}
        simples: List[Simple] = []
        suggestions: List[Dict[str, Any]] = []
        content: Dict[str, Any] = {}
        for item in self.items:
            if isinstance(item, str):
                simples.append(Simple(speech=item))
            elif isinstance(item, Simple):
                simples.append(item)
            elif isinstance(item, Suggestion):
                suggestions.append(item.model_dump(by_alias=True))
            elif isinstance(item, Card):
                content["card"] = item.model_dump(by_alias=True, exclude_none=True)
            elif isinstance(item, Canvas):
                prompt["canvas"] = item.model_dump(mode="json", by_alias=True)
        if simples:
            prompt["firstSimple"] = _dump_simple(simples[0])
        if len(simples) > 1:
            prompt["lastSimple"] = _dump_simple(ssml.merge_simple(*simples[1:]))
        if content:
            prompt["content"] = content
        if suggestions:
            prompt["suggestions"] = suggestions
        return prompt

    def to_response(self) -> Dict[str, Any]:
        persist_session_data(self.session_params, self.data)
        response: Dict[str, Any] = {
            "session": {
                "id": self.session_id,
                "params": self.session_params,
                "typeOverrides": self.type_overrides,
                "languageCode": "",
            },
            "prompt": self._prompt(),
        }
        if self.scene_next:
            response["scene"] = {"name": self.request.scene.get("name", ""), "next": {"name": self.scene_next}}
        if self.expected_speech:
            response["expected"] = {"speech": self.expected_speech}
        return response


def _dump_simple(simple: Simple) -> Dict[str, Any]:
    return {k: v for k, v in simple.model_dump().items() if v}
