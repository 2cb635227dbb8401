import os
import random
from typing import Any, Dict, List, Optional

import pytest

from personality_quiz.constants import Capability
from personality_quiz.conversation import Conversation
from personality_quiz.models import HandlerRequest, Outcome, Question
from personality_quiz.services.content_store import ContentStore
from personality_quiz.webhook import middleware

BUNDLED_CONTENT_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "personality_quiz", "content")


def make_question(trait: str, index: int = 0, **overrides: Any) -> Question:
	fields = {
		"trait": trait,
		"question_text": f"{trait} question {index}",
		"positive_answers": ["Yes", f"{trait} yes {index}"],
		"negative_answers": ["No", f"{trait} no {index}"],
	}
	fields.update(overrides)
	return Question(**fields)


def make_pool(counts: Dict[str, int]) -> List[Question]:
	return [make_question(trait, i) for trait, n in counts.items() for i in range(n)]


def make_outcome(title: str, positive: str = "", negative: str = "", **overrides: Any) -> Outcome:
	return Outcome(text=f"You are {title}.", title=title, positive_traits=positive, negative_traits=negative, **overrides)


def make_request(
	handler: str,
	intent: str = "",
	intent_params: Optional[Dict[str, Any]] = None,
	session_params: Optional[Dict[str, Any]] = None,
	capabilities: Optional[List[str]] = None,
	locale: str = "en-US",
) -> HandlerRequest:
	return HandlerRequest.model_validate({
		"handler": {"name": handler},
		"intent": {"name": intent, "params": intent_params or {}, "query": ""},
		"scene": {"name": "Quiz", "slotFillingStatus": "UNSPECIFIED", "slots": {}},
		"session": {"id": "session-1", "params": session_params or {}, "typeOverrides": [], "languageCode": ""},
		"user": {"locale": locale},
		"device": {"capabilities": capabilities if capabilities is not None else [Capability.SPEECH.value]},
	})


@pytest.fixture
def rng() -> random.Random:
	return random.Random(1234)


@pytest.fixture
def content(rng) -> ContentStore:
	return ContentStore(content_dir=BUNDLED_CONTENT_DIR, base_url="", default_locale="en-US", rng=rng)


@pytest.fixture
def conv_factory(content):
	"""Builds a Conversation wired the way a webhook turn wires it."""
	def _build(handler: str = "GENERIC_NO_MATCH", **kwargs: Any) -> Conversation:
		conv = Conversation(make_request(handler, **kwargs))
		middleware(conv, content)
		return conv
	return _build
