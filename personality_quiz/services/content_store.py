import os
import re
import random
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional
from time import perf_counter
import httpx
import orjson
from pydantic import ValidationError
from ..config import settings
from ..constants import Prompt
from ..errors import ContentFetchError, ContentValidationError
from ..models import ContentPack, Outcome, Question, QuizIntro, Simple
from . import ssml

logger = logging.getLogger("personality_quiz")

SETTING_VALUE_KEY = "value"
LOCALE_PATTERN = re.compile(r"^[A-Za-z]{2,3}(-[A-Za-z0-9]{2,8})*$")
# locales without a pack of their own, remembered so they are not refetched every turn
MAX_FALLBACK_LOCALES = 32

class ContentStore:
    """Locale-keyed quiz content, read from disk or from CONTENT_BASE_URL.

    Packs are immutable reference data, so each locale is loaded once per
    process.
    """

    def __init__(self, content_dir: Optional[str] = None, base_url: Optional[str] = None, timeout: Optional[float] = None, default_locale: Optional[str] = None, rng: Optional[random.Random] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.content_dir = content_dir or settings.content_dir
        self.base_url = base_url if base_url is not None else settings.content_base_url
        self.timeout = timeout or settings.content_timeout
        self.default_locale = default_locale or settings.default_locale
        self.rng = rng or random.Random()
        self.transport = transport
        self._packs: Dict[str, ContentPack] = {}
        self._fallbacks: "OrderedDict[str, None]" = OrderedDict()

    def resolve_locale(self, locale: Optional[str]) -> str:
        """Returns ``locale`` if it is a well-formed language tag, else the default."""
        if locale and LOCALE_PATTERN.match(locale):
            return locale
        if locale:
            logger.warning({"event": "content_locale_invalid", "locale": locale[:64], "fallback": self.default_locale})
        return self.default_locale

    async def load(self, locale: Optional[str]) -> ContentPack:
        locale = self.resolve_locale(locale)
        if locale in self._packs:
            return self._packs[locale]
        if locale in self._fallbacks:
            self._fallbacks.move_to_end(locale)
            return await self.load(self.default_locale)
        raw = await self._fetch(locale)
        if raw is None and locale != self.default_locale:
            logger.debug({"event": "content_locale_fallback", "locale": locale, "fallback": self.default_locale})
            pack = await self.load(self.default_locale)
            self._fallbacks[locale] = None
            if len(self._fallbacks) > MAX_FALLBACK_LOCALES:
                self._fallbacks.popitem(last=False)
            return pack
        if raw is None:
            raise ContentFetchError(f"no content pack for locale {locale}")
        pack = self._parse(raw, locale)
        self._packs[locale] = pack
        return pack

    async def _fetch(self, locale: str) -> Optional[bytes]:
        if self.base_url:
            url = f"{self.base_url.rstrip('/')}/{locale}.json"
            t0 = perf_counter()
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                    response = await client.get(url)
                if response.status_code == 404:
                    return None
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise ContentFetchError(f"failed to fetch {url}: {e}") from e
            logger.debug({"event": "content_fetched", "url": url, "bytes": len(response.content), "latency_ms": int((perf_counter() - t0) * 1000)})
            return response.content
        path = os.path.join(self.content_dir, f"{locale}.json")
        if not os.path.exists(path):
            return None
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise ContentFetchError(f"failed to read {path}: {e}") from e

    def _parse(self, raw: bytes, locale: str) -> ContentPack:
        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise ContentValidationError(f"content pack {locale} is not valid JSON: {e}") from e
        try:
            return ContentPack.model_validate(payload)
        except ValidationError as e:
            raise ContentValidationError(f"content pack {locale} failed validation: {e}") from e

    async def get_all_questions(self, locale: Optional[str]) -> List[Question]:
        return list((await self.load(locale)).quiz_questions)

    async def get_all_outcomes(self, locale: Optional[str]) -> List[Outcome]:
        return list((await self.load(locale)).quiz_outcomes)

    async def get_random_intro(self, locale: Optional[str]) -> QuizIntro:
        return self.rng.choice((await self.load(locale)).quiz_intro)

    async def get_prompt(self, name: Prompt, locale: Optional[str]) -> Simple:
        """Picks one displayable variant of a general prompt."""
        pack = await self.load(locale)
        variants = [p for p in pack.general_prompts.get(name.value, []) if p.text]
        if not variants:
            raise ContentValidationError(f"prompt {name.value} has no displayable variant")
        chosen = self.rng.choice(variants)
        return ssml.to_simple(chosen.text, chosen.speech)

    async def get_quiz_settings(self, locale: Optional[str]) -> Dict[str, Any]:
        pack = await self.load(locale)
        return {key: _setting_value(value) for key, value in pack.quiz_settings.items()}

def _setting_value(value: Any) -> Any:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        return value.get(SETTING_VALUE_KEY)
    return value
