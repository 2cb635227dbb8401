import logging
from typing import Any, Dict, Optional
from .config import settings
from .constants import Prompt
from .conversation import Conversation
from .errors import UnknownActionError
from .models import HandlerRequest, Simple
from .services import canvas_builder
from .services.content_store import ContentStore
from .services.conv_helper import ConvHelper
from .services.fulfillment import Fulfillment

logger = logging.getLogger("personality_quiz")

_fulfillment: Optional[Fulfillment] = None
_content: Optional[ContentStore] = None


def get_fulfillment() -> Fulfillment:
	global _fulfillment
	if _fulfillment is None:
		_fulfillment = Fulfillment.create()
	return _fulfillment


def get_content_store() -> ContentStore:
	global _content
	if _content is None:
		_content = ContentStore(
			content_dir=settings.content_dir,
			base_url=settings.content_base_url,
			timeout=settings.content_timeout,
			default_locale=settings.default_locale,
		)
	return _content


def _fresh_composer(conv: Conversation) -> canvas_builder.Composer:
	return canvas_builder.create(
		conv.has_interactive_canvas,
		url=settings.immersive_url if conv.helper.is_new_conversation() else None,
	)


def middleware(conv: Conversation, content: ContentStore) -> None:
	conv.helper = ConvHelper.create(conv, content)
	conv.immersive = _fresh_composer(conv)


async def error_handler(conv: Conversation, error: Exception) -> None:
	"""Replaces a failed turn with the generic goodbye, or a bare one if that fails too."""
	logger.exception({
		"event": "handler_failed",
		"session_id": conv.session_id,
		"action": conv.handler_name,
		"error": repr(error),
	})
	conv.rollback()
	conv.immersive = _fresh_composer(conv)
	try:
		await conv.helper.close_with_prompt(Prompt.GENERIC_MAX_NO_MATCH)
	except Exception as e:
		logger.error({"event": "fallback_response_failed", "session_id": conv.session_id, "error": repr(e)})
		conv.items = []
		conv.end_conversation()
		conv.add(Simple(speech="An unknown error occurred.", text="An unknown error occurred."))


async def handle_turn(
	request: HandlerRequest,
	fulfillment: Optional[Fulfillment] = None,
	content: Optional[ContentStore] = None,
) -> Dict[str, Any]:
	fulfillment = fulfillment or get_fulfillment()
	conv = Conversation(request)
	# unknown handler names are a caller error, not a failed turn
	logger.debug({"event": "turn_start", "session_id": conv.session_id, "action": conv.action.value, "intent": conv.intent_name})
	middleware(conv, content or get_content_store())
	try:
		await fulfillment.handle(conv)
	except UnknownActionError:
		raise
	except Exception as e:
		await error_handler(conv, e)
	return conv.to_response()
