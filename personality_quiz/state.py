import logging
from typing import Any, Dict
from pydantic import ValidationError
from .models import SESSION_VERSION, QuizSession, SessionData

logger = logging.getLogger("personality_quiz")

DATA_PARAM = "data"

def init_session_data() -> SessionData:
	return SessionData()

def load_session_data(params: Dict[str, Any]) -> SessionData:
	"""Rehydrates quiz progress from the platform session bag."""
	raw = params.get(DATA_PARAM)
	if raw is None:
		return init_session_data()
	if not isinstance(raw, dict) or raw.get("version") != SESSION_VERSION:
		logger.warning({"event": "session_data_version_mismatch", "version": raw.get("version") if isinstance(raw, dict) else None})
		return init_session_data()
	try:
		return SessionData.model_validate(raw)
	except ValidationError as e:
		logger.warning({"event": "session_data_invalid", "errors": e.error_count()})
		return init_session_data()

def persist_session_data(params: Dict[str, Any], data: SessionData) -> Dict[str, Any]:
	params[DATA_PARAM] = data.model_dump(mode="json", by_alias=True)
	return params

def apply_quiz_session(data: SessionData, session: QuizSession) -> SessionData:
	data.count = session.count
	data.limit = session.limit
	data.questions = list(session.questions)
	data.trait_to_weight = dict(session.trait_to_weight)
	data.quiz_settings.questions_per_quiz = session.limit
	return data
