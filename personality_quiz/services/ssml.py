"""SSML and display-text helpers shared by the composer and the handlers.

Speech strings travel as full ``<speak>`` documents. Content authors may write
either plain text or SSML, so every helper accepts both and always returns a
single normalised document.
"""
import re
from typing import Iterable
from xml.sax.saxutils import escape
from ..config import settings
from ..constants import TtsMark
from ..models import Simple

_WHITESPACE = re.compile(r"\s+")
_TAG = re.compile(r"<\s*(/?)\s*([\w:-]+)([^<>]*?)\s*(/?)\s*>")
_SPEAK = re.compile(r"^\s*<speak>(.*)</speak>\s*$", re.S)
_EMOJI = re.compile(
    "["
    "\U0001F000-\U0001FAFF"
    "\U00002600-\U000027BF"
    "\U00002B00-\U00002BFF"
    "\U0000FE00-\U0000FE0F"
    "\U0000200D"
    "\U000020E3"
    "\U000E0020-\U000E007F"
    "]+"
)

def strip_emoji(text: str) -> str:
    return _EMOJI.sub("", text or "")

def clean(ssml: str) -> str:
    """Collapses whitespace and canonicalises tag spelling."""
    text = _WHITESPACE.sub(" ", ssml or "")

    def _tag(match: re.Match) -> str:
        closing, name, attrs, self_closing = match.groups()
        attrs = attrs.strip()
        return "<" + closing + name + (" " + attrs if attrs else "") + self_closing + ">"

    text = _TAG.sub(_tag, text)
    text = re.sub(r"<speak>\s+", "<speak>", text)
    text = re.sub(r"\s+</speak>", "</speak>", text)
    return text.strip()

def _inner(speech: str) -> str:
    cleaned = clean(speech)
    match = _SPEAK.match(cleaned)
    if match:
        return match.group(1).strip()
    return escape(cleaned)

def is_empty(speech: str) -> bool:
    return not _inner(speech or "")

def _join(parts: Iterable[str], separator: str) -> str:
    inners = [_inner(p) for p in parts if p]
    inners = [i for i in inners if i]
    return clean("<speak>" + separator.join(inners) + "</speak>")

def merge(parts: Iterable[str]) -> str:
    return _join(parts, f' <break time="{settings.ssml_break_time}ms"/> ')

def merge_with_mark(parts: Iterable[str]) -> str:
    # the canvas advances one slide per FLIP mark
    return _join(parts, f' <mark name="{TtsMark.FLIP.value}"/> ')

def to_simple(text: str, speech: str = "") -> Simple:
    source = speech or text
    return Simple(text=text or "", speech=merge([source]) if source else "")

def merge_simple(*simples: Simple) -> Simple:
    texts = [s.text for s in simples if s.text]
    return Simple(text="  \n\n".join(texts), speech=merge(s.speech for s in simples))
