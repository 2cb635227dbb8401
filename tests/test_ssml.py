from personality_quiz.config import settings
from personality_quiz.models import Simple
from personality_quiz.services import ssml

BREAK = f'<break time="{settings.ssml_break_time}ms"/>'


def test_clean_collapses_whitespace_and_tags():
	assert ssml.clean("<speak >   a \n  b   </speak>") == "<speak>a b</speak>"
	assert ssml.clean('<break   time="1s"  />') == '<break time="1s"/>'


def test_merge_joins_with_breaks_and_skips_empty_parts():
	assert ssml.merge(["<speak>a</speak>", "", "<speak></speak>", "b"]) == f"<speak>a {BREAK} b</speak>"


def test_merge_escapes_plain_text():
	assert ssml.merge(["Fish & chips"]) == "<speak>Fish &amp; chips</speak>"


def test_merge_of_nothing_is_an_empty_document():
	assert ssml.merge([]) == "<speak></speak>"
	assert ssml.is_empty(ssml.merge([]))
	assert ssml.is_empty("")
	assert not ssml.is_empty("<speak>hi</speak>")


def test_merge_with_mark_separates_slides():
	assert ssml.merge_with_mark(["<speak>one</speak>", "<speak>two</speak>"]) == '<speak>one <mark name="FLIP"/> two</speak>'


def test_strip_emoji():
	assert ssml.strip_emoji("🏖 Beach 👍🏽").strip() == "Beach"
	assert ssml.strip_emoji(None) == ""


def test_to_simple_prefers_spoken_form():
	assert ssml.to_simple("Shown", "<speak>Said</speak>") == Simple(text="Shown", speech="<speak>Said</speak>")
	assert ssml.to_simple("Shown") == Simple(text="Shown", speech="<speak>Shown</speak>")
	assert ssml.to_simple("", "") == Simple()


def test_merge_simple_joins_text_as_paragraphs():
	merged = ssml.merge_simple(Simple(text="One", speech="<speak>One</speak>"), Simple(), Simple(text="Two", speech="<speak>Two</speak>"))
	assert merged.text == "One  \n\nTwo"
	assert merged.speech == f"<speak>One {BREAK} Two</speak>"
