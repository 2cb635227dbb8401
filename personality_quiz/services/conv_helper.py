import logging
from typing import Any, Dict, List, Optional, Sequence
import asyncio
import orjson
from ..constants import ANSWER_TYPE, Intent, Prompt, Template, TemplateAction, TYPE_REPLACE, USER_ANSWER_PARAM
from ..errors import QuizStateError
from ..models import Card, Image, Outcome, Question, QuizIntro, Simple, Suggestion
from . import ssml
from .canvas_builder import CanvasBuilder, NullCanvasBuilder
from .content_store import ContentStore
from .surface import Transition, TurnResponses, select_response

logger = logging.getLogger("personality_quiz")

_TRUE_WORDS = {"true", "yes", "y", "1", "on"}
_FALSE_WORDS = {"false", "no", "n", "0", "off", ""}

def convert_type(value: Any, target: type) -> Any:
    """Converts a content value to the type of the setting it overrides."""
    if target is bool:
        if isinstance(value, bool):
            return value
        word = str(value).strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise ValueError(f"not a boolean: {value!r}")
    if target is int:
        if isinstance(value, bool):
            raise ValueError(f"not an integer: {value!r}")
        return int(float(value)) if isinstance(value, str) else int(value)
    if target is float:
        return float(value)
    if target is str:
        return "" if value is None else str(value)
    return value


class ConvHelper:
    """Content access and response plumbing for one conversation turn."""

    def __init__(self, conv, content: ContentStore) -> None:
        self.conv = conv
        self.content = content

    @classmethod
    def create(cls, conv, content: ContentStore) -> "ConvHelper":
        return cls(conv, content)

    def get_locale(self) -> str:
        return self.conv.locale

    def is_new_conversation(self) -> bool:
        return self.conv.intent_name in (Intent.MAIN.value, Intent.PLAY_GAME.value)

    async def get_quiz_settings(self) -> Dict[str, Any]:
        return await self.content.get_quiz_settings(self.get_locale())

    async def get_random_quiz_intro(self) -> QuizIntro:
        return await self.content.get_random_intro(self.get_locale())

    async def get_all_quiz_questions(self) -> List[Question]:
        return await self.content.get_all_questions(self.get_locale())

    async def get_all_quiz_outcomes(self) -> List[Outcome]:
        return await self.content.get_all_outcomes(self.get_locale())

    async def get_random_prompt(self, name: Prompt) -> Simple:
        return await self.content.get_prompt(name, self.get_locale())

    def update_quiz_settings(self, sheet_settings: Dict[str, Any]) -> None:
        """Overrides existing quiz settings only, matching keys case-insensitively.

        Incoming values take the type of the default they replace.
        """
        quiz_settings = self.conv.data.quiz_settings
        lookup: Dict[str, str] = {}
        for name, info in type(quiz_settings).model_fields.items():
            lookup[name.lower()] = name
            if info.alias:
                lookup[info.alias.lower()] = name
        for key, value in sheet_settings.items():
            prop = lookup.get(str(key).lower())
            if prop is None:
                continue
            current = getattr(quiz_settings, prop)
            try:
                setattr(quiz_settings, prop, convert_type(value, type(current)))
            except (TypeError, ValueError):
                logger.warning({"event": "quiz_setting_ignored", "key": key, "value": value, "expected": type(current).__name__})

    def is_valid_transition(self, target: Any) -> bool:
        return (
            isinstance(target, Transition)
            and isinstance(target.simple, str)
            and isinstance(target.rich, list)
            and isinstance(target.immersive, (CanvasBuilder, NullCanvasBuilder))
        )

    def setup_session_type_and_speech_biasing(self) -> None:
        def clean(synonyms: Sequence[str]) -> List[str]:
            return list(dict.fromkeys(ssml.strip_emoji(s).strip() for s in synonyms))

        question = self.get_current_question()
        positive_answers = clean(question.positive_answers)
        negative_answers = clean(question.negative_answers)
        self.conv.expected_speech = [a for a in positive_answers + negative_answers if a]
        self.add_session_type(ANSWER_TYPE, positive_answers, negative_answers)

    def add_session_type(self, type_name: str, *synonyms_entries: Sequence[str]) -> None:
        entries = []
        for synonyms in synonyms_entries:
            tokens = [s.lower().strip() for s in synonyms if s.strip()]
            if tokens:
                entries.append({"name": tokens[0], "synonyms": list(dict.fromkeys(tokens))})
        session_type = {"name": type_name, "mode": TYPE_REPLACE, "synonym": {"entries": entries}}
        overrides = self.conv.type_overrides
        for i, existing in enumerate(overrides):
            if existing.get("name") == type_name:
                overrides[i] = session_type
                return
        overrides.append(session_type)

    def get_question_rich_suggestions(self) -> List[str]:
        question = self.get_current_question()
        return [
            self.clean_rich_suggestion(question.positive_answers[0]),
            self.clean_rich_suggestion(question.negative_answers[0]),
        ]

    def get_and_clear_user_answer(self) -> Optional[str]:
        answer = self.conv.session_params.get(USER_ANSWER_PARAM)
        self.conv.session_params[USER_ANSWER_PARAM] = None
        return answer

    def get_current_question(self) -> Question:
        data = self.conv.data
        if not 0 <= data.count < len(data.questions):
            raise QuizStateError(f"no question at position {data.count} of {len(data.questions)}")
        return data.questions[data.count]

    async def build_prompt_rich_suggestions(self, prompts: Sequence[Prompt]) -> List[str]:
        chips = await asyncio.gather(*(self.get_random_prompt(name) for name in prompts))
        return [self.clean_rich_suggestion(chip) for chip in chips]

    def clean_rich_suggestion(self, chip: Any) -> str:
        text = chip if isinstance(chip, str) else chip.text
        return ssml.strip_emoji(text).strip()

    def build_outcome_basic_card(self, outcome: Outcome) -> Optional[Card]:
        if not outcome.text and not outcome.image_landscape:
            return None
        image = Image(url=outcome.image_landscape, alt=outcome.title or "outcome image") if outcome.image_landscape else None
        return Card(title=outcome.title, text=outcome.text, image=image)

    async def ask_with_prompt(self, name: Prompt, suggestions: Optional[Sequence[str]] = None) -> None:
        prompt = await self.get_random_prompt(name)
        titles = [ssml.strip_emoji(s).strip() for s in suggestions or []]
        self.ask(TurnResponses(
            simple=prompt.speech,
            rich=[prompt, *(Suggestion(title=t) for t in titles if t)],
            immersive=[
                Simple(speech=prompt.speech),
                self.conv.immersive
                    .set("template", Template.SAY)
                    .set("action", TemplateAction.RESET)
                    .set("speech", prompt.speech)
                    .build(),
            ],
        ))

    async def close_with_prompt(self, name: Prompt) -> None:
        prompt = await self.get_random_prompt(name)
        self.close(TurnResponses(
            simple=prompt.speech,
            rich=[prompt],
            immersive=[
                Simple(speech=prompt.speech),
                self.conv.immersive
                    .set("suppress_mic", True)
                    .set("template", Template.TELL)
                    .set("speech", prompt.speech)
                    .build(),
            ],
        ))

    def ask(self, responses: TurnResponses) -> None:
        self.respond("ask", responses)

    def close(self, responses: TurnResponses) -> None:
        self.respond("close", responses)

    def respond(self, kind: str, responses: TurnResponses) -> None:
        logger.debug({
            "event": "session_params_size",
            "session_id": self.conv.session_id,
            "bytes": len(orjson.dumps(self.conv.data.model_dump(mode="json", by_alias=True))),
        })
        self.conv.add(*select_response(responses, self.conv.surfaces))
        if kind == "close":
            self.conv.end_conversation()
