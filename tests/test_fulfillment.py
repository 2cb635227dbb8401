import random

import pytest

from personality_quiz.constants import Action, Capability, END_CONVERSATION_SCENE, USER_ANSWER_PARAM
from personality_quiz.conversation import Conversation
from personality_quiz.errors import UnknownActionError
from personality_quiz.models import Card, Simple
from personality_quiz.services.canvas_builder import NullCanvasBuilder
from personality_quiz.services.content_store import ContentStore
from personality_quiz.services.fulfillment import Fulfillment
from personality_quiz.services.surface import Transition
from personality_quiz.webhook import handle_turn, middleware
from tests.conftest import make_request

SCREEN = [Capability.SPEECH.value, Capability.RICH_RESPONSE.value]
CANVAS = [Capability.SPEECH.value, Capability.RICH_RESPONSE.value, Capability.INTERACTIVE_CANVAS.value]
OUTCOME_TITLES = {"The Explorer", "The Organizer", "The Life of the Party", "The Scholar"}


@pytest.fixture
def turn(content):
	fulfillment = Fulfillment(rng=random.Random(42))

	async def _turn(handler, params=None, capabilities=None, store=None, **kwargs):
		request = make_request(handler, session_params=params, capabilities=capabilities or SCREEN, **kwargs)
		return await handle_turn(request, fulfillment=fulfillment, content=store or content)
	return _turn


async def _start(turn):
	params = (await turn(Action.LOAD_SETTINGS.value))["session"]["params"]
	return (await turn(Action.SETUP_QUIZ.value, params))["session"]["params"]


def _text(response, key="firstSimple"):
	return response["prompt"][key]["text"]


def test_every_action_has_a_handler():
	assert set(Fulfillment().handlers) == set(Action)


async def test_settings_and_setup_are_silent_turns(turn):
	response = await turn(Action.LOAD_SETTINGS.value)
	data = response["session"]["params"]["data"]
	assert data["quizSettings"]["questionsPerQuiz"] == 5
	assert data["quizSettings"]["introTitle"] == "Travel Personality Quiz"
	assert response["prompt"] == {"override": False}
	assert "scene" not in response

	response = await turn(Action.SETUP_QUIZ.value, response["session"]["params"])
	data = response["session"]["params"]["data"]
	assert data["count"] == 0
	assert data["limit"] == 5
	assert len(data["questions"]) == 5
	assert set(data["traitToWeight"]) == {"adventurous", "planner", "social", "cultural"}
	assert len({q["trait"] for q in data["questions"][:4]}) == 4
	assert response["prompt"] == {"override": False}


async def test_skip_confirmation_asks_first_question(turn):
	params = await _start(turn)
	response = await turn(Action.START_SKIP_CONFIRMATION.value, params)
	first_question = params["data"]["questions"][0]
	assert _text(response).startswith("Welcome") or _text(response).startswith("Let's find out")
	assert _text(response, "lastSimple") == first_question["questionText"]
	assert len(response["prompt"]["suggestions"]) == 2
	assert response["expected"]["speech"]
	assert response["session"]["typeOverrides"][0]["name"] == "answer"
	assert "scene" not in response


async def test_full_game_reaches_an_outcome(turn):
	params = await _start(turn)
	response = await turn(Action.START_SKIP_CONFIRMATION.value, params)
	for expected_count in range(1, 6):
		params = {**response["session"]["params"], USER_ANSWER_PARAM: "positive"}
		response = await turn(Action.ANSWER.value, params)
		data = response["session"]["params"]["data"]
		assert data["count"] == expected_count
		assert response["session"]["params"][USER_ANSWER_PARAM] is None
	card = response["prompt"]["content"]["card"]
	assert card["title"] in OUTCOME_TITLES
	assert card["image"]["url"].startswith("https://example.com/quiz/")
	assert _text(response, "lastSimple").endswith("Do you want to play again?")
	assert [s["title"] for s in response["prompt"]["suggestions"]] == ["Yes", "No"]
	assert sum(data["traitToWeight"].values()) == 5
	assert "scene" not in response


async def test_answer_that_matches_nothing_reprompts(turn):
	params = await _start(turn)
	response = await turn(Action.ANSWER.value, {**params, USER_ANSWER_PARAM: "banana"})
	assert _text(response) == "Sorry, which one was that?"
	assert response["session"]["params"]["data"]["count"] == 0
	assert set(response["session"]["params"]["data"]["traitToWeight"].values()) == {0}


async def test_ordinal_answer(turn):
	params = await _start(turn)
	trait = params["data"]["questions"][0]["trait"]
	response = await turn(Action.ANSWER_ORDINAL.value, params, intent_params={"count": {"original": "the second one", "resolved": "second"}})
	data = response["session"]["params"]["data"]
	assert data["count"] == 1
	assert data["traitToWeight"][trait] == -1


async def test_ordinal_without_value_reprompts(turn):
	params = await _start(turn)
	response = await turn(Action.ANSWER_ORDINAL.value, params)
	assert _text(response) == "Sorry, which one was that?"
	assert response["session"]["params"]["data"]["count"] == 0


async def test_no_match_ladder_ends_the_conversation(turn):
	params = await _start(turn)
	first = await turn(Action.ANSWER_NO_MATCH_1.value, params, capabilities=[Capability.SPEECH.value])
	second = await turn(Action.ANSWER_NO_MATCH_2.value, first["session"]["params"], capabilities=[Capability.SPEECH.value])
	final = await turn(Action.ANSWER_MAX_NO_MATCH.value, second["session"]["params"], capabilities=[Capability.SPEECH.value])
	assert "scene" not in first and "scene" not in second
	assert first["expected"]["speech"]
	assert final["scene"]["next"]["name"] == END_CONVERSATION_SCENE
	assert final["prompt"]["firstSimple"]["speech"].startswith("<speak>Sorry, I'm having trouble")


@pytest.mark.parametrize("action, text", [
	(Action.START_NO, "Okay, maybe next time. Goodbye!"),
	(Action.QUIT_YES, "Okay, goodbye!"),
	(Action.PLAY_AGAIN_NO, "Thanks for playing. Goodbye!"),
	(Action.GENERIC_MAX_NO_INPUT, "Looks like you've stepped away. Goodbye!"),
])
async def test_closing_actions(turn, action, text):
	response = await turn(action.value)
	assert _text(response) == text
	assert response["scene"]["next"]["name"] == END_CONVERSATION_SCENE


async def test_start_confirmation_offers_yes_and_no(turn):
	params = (await turn(Action.LOAD_SETTINGS.value))["session"]["params"]
	response = await turn(Action.START_CONFIRMATION.value, params)
	assert _text(response, "lastSimple") in {"Ready to start?", "Shall we begin?"}
	assert [s["title"] for s in response["prompt"]["suggestions"]] == ["Yes", "No"]


async def test_quit_no_keeps_playing(turn):
	params = await _start(turn)
	response = await turn(Action.QUIT_NO.value, params)
	assert _text(response) == "Okay, let's keep going."
	assert len(response["prompt"]["suggestions"]) == 2
	assert "scene" not in response


async def test_play_again_resets_progress(turn):
	params = await _start(turn)
	params = (await turn(Action.ANSWER.value, {**params, USER_ANSWER_PARAM: "positive"}))["session"]["params"]
	assert params["data"]["count"] == 1
	response = await turn(Action.PLAY_AGAIN_YES.value, params)
	data = response["session"]["params"]["data"]
	assert data["count"] == 0
	assert set(data["traitToWeight"].values()) == {0}
	assert _text(response) == "Okay, starting over."


async def test_canvas_turn_chains_intro_and_question_slides(turn):
	params = await _start(turn)
	response = await turn(Action.START_SKIP_CONFIRMATION.value, params, capabilities=CANVAS)
	canvas = response["prompt"]["canvas"]
	assert [slide["template"] for slide in canvas["data"]] == ["template.intro", "template.question"]
	assert canvas["data"][1]["data"]["progress"] == 0
	assert canvas["data"][0]["data"]["progress"] == -1
	assert '<mark name="FLIP"/>' in response["prompt"]["firstSimple"]["speech"]
	assert "suggestions" not in response["prompt"]


async def test_canvas_outcome_starts_with_thinking_slide(turn):
	params = await _start(turn)
	params["data"]["count"] = params["data"]["limit"] - 1
	params[USER_ANSWER_PARAM] = "negative"
	response = await turn(Action.ANSWER.value, params, capabilities=CANVAS)
	templates = [slide["template"] for slide in response["prompt"]["canvas"]["data"]]
	assert templates[-2:] == ["template.say", "template.outcome"]
	assert response["prompt"]["canvas"]["data"][-2]["data"]["progress"] == 5


async def test_failed_turn_rolls_back_and_says_goodbye(turn):
	response = await turn(Action.ANSWER.value, {USER_ANSWER_PARAM: "yes"})
	assert _text(response) == "Sorry, something went wrong. Let's try again later."
	assert response["scene"]["next"]["name"] == END_CONVERSATION_SCENE
	assert response["session"]["params"][USER_ANSWER_PARAM] == "yes"
	assert response["session"]["params"]["data"]["count"] == 0
	assert "expected" not in response


async def test_failed_fallback_still_answers(turn, tmp_path):
	empty = ContentStore(content_dir=str(tmp_path), base_url="", default_locale="en-US")
	response = await turn(Action.LOAD_SETTINGS.value, store=empty)
	assert response["prompt"]["firstSimple"]["text"] == "An unknown error occurred."
	assert response["scene"]["next"]["name"] == END_CONVERSATION_SCENE


async def test_unknown_action_is_rejected(turn):
	with pytest.raises(UnknownActionError) as e:
		await turn("NOT_AN_ACTION")
	assert e.value.name == "NOT_AN_ACTION"


def _conv(content, handler, params, capabilities):
	conv = Conversation(make_request(handler, session_params=params, capabilities=capabilities))
	middleware(conv, content)
	return conv


@pytest.mark.parametrize("transition", [
	None,
	Transition(simple=None, rich=[Simple(text="lost")], immersive=NullCanvasBuilder()),
	Transition(simple="<speak>lost</speak>", rich="lost", immersive=NullCanvasBuilder()),
	Transition(simple="<speak>lost</speak>", rich=[Simple(text="lost")], immersive=None),
	{"simple": "<speak>lost</speak>", "rich": [], "immersive": NullCanvasBuilder()},
])
async def test_question_ignores_malformed_transition(turn, content, transition):
	params = await _start(turn)
	conv = _conv(content, Action.QUESTION_REPEAT.value, params, CANVAS)
	await Fulfillment(rng=random.Random(1)).question(conv, transition)
	simple, canvas = conv.items
	assert "lost" not in simple.speech
	assert [slide["template"] for slide in canvas.data] == ["template.question"]
	assert conv.scene_next is None


async def test_outcome_ignores_malformed_transition(turn, content):
	params = await _start(turn)
	params["data"]["count"] = params["data"]["limit"]
	conv = _conv(content, Action.ANSWER.value, params, SCREEN)
	bad = Transition(simple="<speak>lost</speak>", rich=[Simple(text="lost")], immersive="not a composer")
	await Fulfillment(rng=random.Random(1)).outcome(conv, bad)
	texts = [item.text for item in conv.items if isinstance(item, Simple)]
	assert texts and not any("lost" in t for t in texts)
	assert isinstance(conv.items[1], Card)


async def test_emoji_answer_that_matches_nothing_keeps_weights(turn):
	params = await _start(turn)
	response = await turn(Action.ANSWER.value, {**params, USER_ANSWER_PARAM: "🤷"})
	data = response["session"]["params"]["data"]
	assert data["count"] == 0
	assert set(data["traitToWeight"].values()) == {0}
	assert _text(response) == "Sorry, which one was that?"
