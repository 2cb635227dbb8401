import asyncio
import logging
import random
from typing import Awaitable, Callable, Dict, Optional
from ..config import settings
from ..constants import Action, Answer, COUNT_PARAM, Prompt, Template, TemplateAction
from ..models import Simple, Suggestion
from ..state import apply_quiz_session
from . import canvas_builder, quiz_engine, ssml
from .surface import Transition, TurnResponses

logger = logging.getLogger("personality_quiz")

Handler = Callable[..., Awaitable[None]]


class Fulfillment:
    """Turn handlers for every platform action.

    Each handler either continues the conversation with ``ask`` or ends it
    with ``close``; the settings and setup handlers run silently before the
    platform moves on to the next scene.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self.handlers: Dict[Action, Handler] = {
            Action.LOAD_SETTINGS: self.load_settings,
            Action.SETUP_QUIZ: self.setup_quiz,
            Action.START_SKIP_CONFIRMATION: self.start_skip_confirmation,
            Action.START_CONFIRMATION: self.start_confirmation,
            Action.START_YES: self.start_yes,
            Action.START_NO: self.start_no,
            Action.START_HELP: self.start_help,
            Action.START_REPEAT: self.start_repeat,
            Action.START_NO_MATCH_1: self.start_no_match_1,
            Action.START_NO_MATCH_2: self.start_no_match_2,
            Action.START_NO_INPUT_1: self.start_no_input_1,
            Action.START_NO_INPUT_2: self.start_no_input_2,
            Action.QUESTION_REPEAT: self.question_repeat,
            Action.ANSWER: self.answer,
            Action.ANSWER_ORDINAL: self.answer_ordinal,
            Action.ANSWER_BOTH_OR_NONE: self.answer_both_or_none,
            Action.ANSWER_HELP: self.answer_help,
            Action.ANSWER_SKIP: self.answer_skip,
            Action.ANSWER_NO_MATCH_1: self.answer_no_match_1,
            Action.ANSWER_NO_MATCH_2: self.answer_no_match_2,
            Action.ANSWER_MAX_NO_MATCH: self.answer_max_no_match,
            Action.ANSWER_NO_INPUT_1: self.answer_no_input_1,
            Action.ANSWER_NO_INPUT_2: self.answer_no_input_2,
            Action.ANSWER_MAX_NO_INPUT: self.answer_max_no_input,
            Action.RESTART_CONFIRMATION: self.restart_confirmation,
            Action.RESTART_YES: self.restart_yes,
            Action.RESTART_NO: self.restart_no,
            Action.RESTART_REPEAT: self.restart_repeat,
            Action.PLAY_AGAIN_YES: self.play_again_yes,
            Action.PLAY_AGAIN_NO: self.play_again_no,
            Action.PLAY_AGAIN_REPEAT: self.play_again_repeat,
            Action.QUIT_CONFIRMATION: self.quit_confirmation,
            Action.QUIT_YES: self.quit_yes,
            Action.QUIT_NO: self.quit_no,
            Action.QUIT_REPEAT: self.quit_repeat,
            Action.GENERIC_NO_MATCH: self.generic_no_match,
            Action.GENERIC_MAX_NO_MATCH: self.generic_max_no_match,
            Action.GENERIC_NO_INPUT: self.generic_no_input,
            Action.GENERIC_MAX_NO_INPUT: self.generic_max_no_input,
        }
        missing = [action.value for action in Action if action not in self.handlers]
        if missing:
            raise RuntimeError(f"no handler for actions: {missing}")

    @classmethod
    def create(cls, rng: Optional[random.Random] = None) -> "Fulfillment":
        return cls(rng)

    async def handle(self, conv) -> None:
        action = conv.action
        logger.debug({"event": "handle_action", "session_id": conv.session_id, "action": action.value, "count": conv.data.count, "limit": conv.data.limit})
        await self.handlers[action](conv)

    # Settings and setup

    async def load_settings(self, conv) -> None:
        quiz_settings = await conv.helper.get_quiz_settings()
        conv.helper.update_quiz_settings(quiz_settings)

    async def setup_quiz(self, conv) -> None:
        questions = await conv.helper.get_all_quiz_questions()
        session = quiz_engine.init_session_state(questions, conv.data.quiz_settings.questions_per_quiz, self.rng)
        apply_quiz_session(conv.data, session)
        logger.debug({"event": "quiz_setup", "session_id": conv.session_id, "limit": session.limit, "traits": list(session.trait_to_weight)})

    # Intro

    def _intro_slide(self, conv, intro, speech: str, **extra):
        quiz_settings = conv.data.quiz_settings
        return canvas_builder.create(
            conv.has_interactive_canvas,
            url=settings.immersive_url,
            template=Template.INTRO,
            action=TemplateAction.RESET,
            speech=speech,
            data={
                "header": quiz_settings.intro_title,
                "body": quiz_settings.intro_subtitle,
                "progress": -1,
                "background": {
                    "landscape": intro.background_landscape,
                    "portrait": intro.background_portrait,
                },
            },
            config=quiz_settings.model_dump(by_alias=True),
            **extra,
        )

    async def start_skip_confirmation(self, conv) -> None:
        intro = await conv.helper.get_random_quiz_intro()
        intro_simple = ssml.to_simple(intro.text, intro.speech)
        transition = Transition(
            simple=intro_simple.speech,
            rich=[intro_simple],
            immersive=self._intro_slide(conv, intro, intro_simple.speech),
        )
        await self.question(conv, transition)

    async def start_confirmation(self, conv) -> None:
        intro, confirmation, positive_chip, negative_chip = await asyncio.gather(
            conv.helper.get_random_quiz_intro(),
            conv.helper.get_random_prompt(Prompt.INTRO_CONFIRMATION),
            conv.helper.get_random_prompt(Prompt.INTRO_CONFIRMATION_POSITIVE),
            conv.helper.get_random_prompt(Prompt.INTRO_CONFIRMATION_NEGATIVE),
        )
        intro_simple = ssml.to_simple(intro.text, intro.speech)
        speech = ssml.merge([intro_simple.speech, confirmation.speech])
        conv.immersive = self._intro_slide(
            conv,
            intro,
            speech,
            suggestions=[{"text": conv.data.quiz_settings.start_button_text, "speech": positive_chip.text}],
        )
        conv.helper.ask(TurnResponses(
            simple=speech,
            rich=[
                intro_simple,
                confirmation,
                *_suggestions(conv.helper.clean_rich_suggestion(positive_chip), conv.helper.clean_rich_suggestion(negative_chip)),
            ],
            immersive=[Simple(speech=speech), conv.immersive.build()],
        ))

    async def start_yes(self, conv) -> None:
        prompt = await conv.helper.get_random_prompt(Prompt.INTRO_POSITIVE_RESPONSE)
        await self.question(conv, self._restart_transition(conv, prompt, TemplateAction.ACTIVE_0))

    async def start_no(self, conv) -> None:
        await conv.helper.close_with_prompt(Prompt.INTRO_NEGATIVE_RESPONSE)

    async def _ask_with_intro_chips(self, conv, name: Prompt) -> None:
        suggestions = await conv.helper.build_prompt_rich_suggestions([
            Prompt.INTRO_CONFIRMATION_POSITIVE,
            Prompt.INTRO_CONFIRMATION_NEGATIVE,
        ])
        await conv.helper.ask_with_prompt(name, suggestions)

    async def start_help(self, conv) -> None:
        await self._ask_with_intro_chips(conv, Prompt.START_HELP)

    async def start_repeat(self, conv) -> None:
        await self._ask_with_intro_chips(conv, Prompt.START_REPEAT)

    async def start_no_match_1(self, conv) -> None:
        await self._ask_with_intro_chips(conv, Prompt.INTRO_NO_MATCH_1)

    async def start_no_match_2(self, conv) -> None:
        await self._ask_with_intro_chips(conv, Prompt.INTRO_NO_MATCH_2)

    async def start_no_input_1(self, conv) -> None:
        await conv.helper.ask_with_prompt(Prompt.INTRO_NO_INPUT_1)

    async def start_no_input_2(self, conv) -> None:
        await conv.helper.ask_with_prompt(Prompt.INTRO_NO_INPUT_2)

    # Questions and answers

    async def question(self, conv, transition: Optional[Transition] = None) -> None:
        """Asks the current question, preceded by ``transition`` when given."""
        data = conv.data
        transition_prompt = Simple()
        if data.count > 0:
            name = Prompt.TRANSITIONS_REGULAR if data.count < data.limit - 1 else Prompt.TRANSITIONS_FINAL
            transition_prompt = await conv.helper.get_random_prompt(name)

        conv.helper.setup_session_type_and_speech_biasing()
        question = conv.helper.get_current_question()
        question_simple = ssml.to_simple(question.question_text, question.question_speech)
        positive_text = question.positive_answers[0]
        negative_text = question.negative_answers[0]
        speeches = [transition_prompt.speech, question_simple.speech]
        canvas_speeches = [ssml.merge([transition_prompt.speech, question_simple.speech])]

        question_slide = canvas_builder.create(
            conv.has_interactive_canvas,
            template=Template.QUESTION,
            action=TemplateAction.RESET,
            speech=canvas_speeches[0],
            data={
                "body": question_simple.text,
                "progress": data.count,
                "background": {
                    "landscape": question.background_landscape,
                    "portrait": question.background_portrait,
                },
            },
            suggestions=[
                {"image": question.positive_answer_image, "text": positive_text, "speech": ssml.strip_emoji(positive_text)},
                {"image": question.negative_answer_image, "text": negative_text, "speech": ssml.strip_emoji(negative_text)},
            ],
        )
        conv.immersive = question_slide
        has_transition = conv.helper.is_valid_transition(transition)
        if has_transition:
            conv.immersive = transition.immersive.append_slide(question_slide)
            speeches.insert(0, transition.simple)
            canvas_speeches.insert(0, transition.simple)

        conv.helper.ask(TurnResponses(
            simple=ssml.merge(speeches),
            rich=[
                *(transition.rich if has_transition else []),
                ssml.merge_simple(transition_prompt, question_simple),
                *_suggestions(conv.helper.clean_rich_suggestion(positive_text), conv.helper.clean_rich_suggestion(negative_text)),
            ],
            immersive=[Simple(speech=ssml.merge_with_mark(canvas_speeches)), conv.immersive.build()],
        ))

    async def question_repeat(self, conv) -> None:
        repeat_prompt = await conv.helper.get_random_prompt(Prompt.QUESTION_REPEAT)
        conv.helper.setup_session_type_and_speech_biasing()
        question = conv.helper.get_current_question()
        question_simple = ssml.to_simple(question.question_text, question.question_speech)
        speech = ssml.merge([repeat_prompt.speech, question_simple.speech])
        conv.helper.ask(TurnResponses(
            simple=speech,
            rich=[repeat_prompt, question_simple, *_suggestions(*conv.helper.get_question_rich_suggestions())],
            immersive=[
                Simple(speech=speech),
                conv.immersive.set("template", Template.SAY).set("speech", speech).build(),
            ],
        ))

    async def answer(self, conv, answer: Optional[str] = None) -> None:
        answer = answer or conv.helper.get_and_clear_user_answer()
        question = conv.helper.get_current_question()
        trait, weight = quiz_engine.match_answer(question, answer or "")
        if trait is None:
            logger.debug({"event": "answer_not_matched", "session_id": conv.session_id, "answer": answer})
            await self.answer_no_match_1(conv)
            return
        data = conv.data
        data.trait_to_weight[trait] = data.trait_to_weight.get(trait, 0) + weight

        if weight > 0:
            followup = ssml.to_simple(question.positive_followup_text, question.positive_followup_speech)
        else:
            followup = ssml.to_simple(question.negative_followup_text, question.negative_followup_speech)
        transition = None
        if followup.speech:
            transition = Transition(
                simple=followup.speech,
                rich=[followup] if followup.text else [],
                immersive=canvas_builder.create(
                    conv.has_interactive_canvas,
                    template=Template.SAY,
                    action=TemplateAction.ACTIVE_0 if weight > 0 else TemplateAction.ACTIVE_1,
                    speech=followup.speech,
                ),
            )

        data.count += 1
        if data.count >= data.limit:
            await self.outcome(conv, transition)
        else:
            await self.question(conv, transition)

    async def answer_ordinal(self, conv) -> None:
        param = conv.intent_params.get(COUNT_PARAM)
        if param is None or not param.resolved:
            await self.answer_no_match_1(conv)
            return
        resolved = Answer.POSITIVE if param.resolved == Answer.FIRST.value else Answer.NEGATIVE
        await self.answer(conv, resolved.value)

    async def outcome(self, conv, transition: Optional[Transition] = None) -> None:
        """Scores the session and reveals the matching outcome."""
        outcomes, intro_prompt, end_prompt, yes_chip, no_chip = await asyncio.gather(
            conv.helper.get_all_quiz_outcomes(),
            conv.helper.get_random_prompt(Prompt.OUTCOME_INTRO),
            conv.helper.get_random_prompt(Prompt.END_OF_GAME),
            conv.helper.get_random_prompt(Prompt.END_OF_GAME_PLAY_AGAIN_YES),
            conv.helper.get_random_prompt(Prompt.END_OF_GAME_PLAY_AGAIN_NO),
        )
        data = conv.data
        outcome = quiz_engine.match_outcome(outcomes, data.trait_to_weight, self.rng)
        logger.debug({"event": "outcome_matched", "session_id": conv.session_id, "title": outcome.title, "weights": data.trait_to_weight})
        outcome_simple = ssml.to_simple(outcome.text, outcome.speech)

        # "Ok, you are a ... Do you want to play again?"
        outcome_slide = canvas_builder.create(
            conv.has_interactive_canvas,
            template=Template.OUTCOME,
            action=TemplateAction.RESET,
            speech=ssml.merge([outcome_simple.speech, end_prompt.speech]),
            data={
                "body": outcome.title,
                "small": outcome.text,
                # landscape screens place the tall image beside the text
                "image": {"landscape": outcome.image_portrait, "portrait": outcome.image_landscape},
                "background": {"landscape": outcome.background_landscape, "portrait": outcome.background_portrait},
            },
            suggestions=[{"text": data.quiz_settings.restart_button_text, "speech": yes_chip.text}],
        )
        # "Let me think about that..."
        intro_slide = canvas_builder.create(
            conv.has_interactive_canvas,
            template=Template.SAY,
            speech=intro_prompt.speech,
            next=outcome_slide,
        )
        start_slide = outcome_slide if ssml.is_empty(intro_prompt.speech) else intro_slide
        start_slide.add("data", {"progress": data.limit})
        conv.immersive = start_slide

        card = conv.helper.build_outcome_basic_card(outcome)
        # without a card the title goes into the chat bubble
        outcome_text = "" if card else outcome.title
        combined = Simple(
            speech=ssml.merge([intro_prompt.speech, outcome_simple.speech]),
            text="  \n\n".join([intro_prompt.text, outcome_text]).strip(),
        )
        speeches = [intro_prompt.speech, outcome_simple.speech, end_prompt.speech]
        canvas_speeches = [intro_prompt.speech, ssml.merge([outcome_simple.speech, end_prompt.speech])]

        if conv.helper.is_valid_transition(transition):
            conv.immersive = transition.immersive.append_slide(start_slide)
            speeches.insert(0, transition.simple)
            canvas_speeches.insert(0, transition.simple)
            if transition.rich and isinstance(transition.rich[0], Simple):
                combined = ssml.merge_simple(transition.rich[0], combined)

        conv.helper.ask(TurnResponses(
            simple=ssml.merge(speeches),
            rich=[
                combined,
                card,
                end_prompt,
                *_suggestions(conv.helper.clean_rich_suggestion(yes_chip), conv.helper.clean_rich_suggestion(no_chip)),
            ],
            immersive=[Simple(speech=ssml.merge_with_mark(canvas_speeches)), conv.immersive.build()],
        ))

    async def _ask_with_question_chips(self, conv, name: Prompt) -> None:
        conv.helper.setup_session_type_and_speech_biasing()
        await conv.helper.ask_with_prompt(name, conv.helper.get_question_rich_suggestions())

    async def answer_both_or_none(self, conv) -> None:
        await self._ask_with_question_chips(conv, Prompt.GENERIC_NO_MATCH_NONANSWER)

    async def answer_help(self, conv) -> None:
        await self._ask_with_question_chips(conv, Prompt.ANSWER_HELP)

    async def answer_skip(self, conv) -> None:
        await self._ask_with_question_chips(conv, Prompt.SKIP)

    async def answer_no_match_1(self, conv) -> None:
        await self._ask_with_question_chips(conv, Prompt.ANSWER_NO_MATCH_1)

    async def answer_no_match_2(self, conv) -> None:
        await self._ask_with_question_chips(conv, Prompt.ANSWER_NO_MATCH_2)

    async def answer_max_no_match(self, conv) -> None:
        await conv.helper.close_with_prompt(Prompt.ANSWER_MAX_NO_MATCH)

    async def answer_no_input_1(self, conv) -> None:
        conv.helper.setup_session_type_and_speech_biasing()
        await conv.helper.ask_with_prompt(Prompt.ANSWER_NO_INPUT_1)

    async def answer_no_input_2(self, conv) -> None:
        conv.helper.setup_session_type_and_speech_biasing()
        await conv.helper.ask_with_prompt(Prompt.ANSWER_NO_INPUT_2)

    async def answer_max_no_input(self, conv) -> None:
        await conv.helper.close_with_prompt(Prompt.ANSWER_MAX_NO_INPUT)

    # Restart, play again and quit

    def _restart_transition(self, conv, prompt: Simple, action: TemplateAction) -> Transition:
        return Transition(
            simple=prompt.speech,
            rich=[prompt],
            immersive=canvas_builder.create(
                conv.has_interactive_canvas,
                template=Template.SAY,
                action=action,
                speech=prompt.speech,
                data={"progress": -1},
                config={"questionsPerQuiz": conv.data.limit},
            ),
        )

    async def restart_confirmation(self, conv) -> None:
        suggestions = await conv.helper.build_prompt_rich_suggestions([
            Prompt.END_OF_GAME_PLAY_AGAIN_YES,
            Prompt.END_OF_GAME_PLAY_AGAIN_NO,
        ])
        await conv.helper.ask_with_prompt(Prompt.RESTART_CONFIRMATION, suggestions)

    async def _restart(self, conv, action: TemplateAction) -> None:
        prompt, _ = await asyncio.gather(
            conv.helper.get_random_prompt(Prompt.RESTART_YES_RESPONSE),
            self.setup_quiz(conv),
        )
        await self.question(conv, self._restart_transition(conv, prompt, action))

    async def restart_yes(self, conv) -> None:
        await self._restart(conv, TemplateAction.RESET)

    async def restart_no(self, conv) -> None:
        await self.quit_no(conv)

    async def restart_repeat(self, conv) -> None:
        await self.restart_confirmation(conv)

    async def play_again_yes(self, conv) -> None:
        await self._restart(conv, TemplateAction.ACTIVE_0)

    async def play_again_no(self, conv) -> None:
        await conv.helper.close_with_prompt(Prompt.RESTART_NO_RESPONSE)

    async def play_again_repeat(self, conv) -> None:
        await self.restart_confirmation(conv)

    async def quit_confirmation(self, conv) -> None:
        suggestions = await conv.helper.build_prompt_rich_suggestions([Prompt.GENERIC_YES, Prompt.GENERIC_NO])
        await conv.helper.ask_with_prompt(Prompt.QUIT_CONFIRMATION, suggestions)

    async def quit_yes(self, conv) -> None:
        await conv.helper.close_with_prompt(Prompt.ACKNOWLEDGE_QUIT)

    async def quit_no(self, conv) -> None:
        await self._ask_with_question_chips(conv, Prompt.CONTINUE_TO_PLAY)

    async def quit_repeat(self, conv) -> None:
        await self.quit_confirmation(conv)

    # Generic fallbacks

    async def generic_no_match(self, conv) -> None:
        await conv.helper.ask_with_prompt(Prompt.GENERIC_NO_MATCH)

    async def generic_max_no_match(self, conv) -> None:
        await conv.helper.close_with_prompt(Prompt.GENERIC_MAX_NO_MATCH)

    async def generic_no_input(self, conv) -> None:
        await conv.helper.ask_with_prompt(Prompt.GENERIC_NO_INPUT)

    async def generic_max_no_input(self, conv) -> None:
        await conv.helper.close_with_prompt(Prompt.GENERIC_MAX_NO_INPUT)


def _suggestions(*titles: str):
    return [Suggestion(title=t) for t in titles if t]
