from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional

SESSION_VERSION = 1

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# Content pack documents

class ContentModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

class PromptText(ContentModel):
    text: str = ""
    speech: str = ""

class QuizIntro(ContentModel):
    text: str
    speech: str = ""
    background_landscape: str = ""
    background_portrait: str = ""

class Question(ContentModel):
    trait: str = Field(min_length=1)
    question_text: str
    question_speech: str = ""
    positive_answers: List[str] = Field(min_length=1)
    negative_answers: List[str] = Field(min_length=1)
    positive_followup_speech: str = ""
    positive_followup_text: str = ""
    negative_followup_speech: str = ""
    negative_followup_text: str = ""
    background_landscape: str = ""
    background_portrait: str = ""
    positive_answer_image: str = ""
    negative_answer_image: str = ""

    @field_validator("positive_answers", "negative_answers", mode="before")
    @classmethod
    def _split_lines(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [line.strip() for line in value.splitlines() if line.strip()]
        return value

class Outcome(ContentModel):
    text: str
    speech: str = ""
    positive_traits: str = ""
    negative_traits: str = ""
    title: str = ""
    image_landscape: str = ""
    image_portrait: str = ""
    background_landscape: str = ""
    background_portrait: str = ""

class QuizSettings(CamelModel):
    play_intro_confirmation: bool = False
    questions_per_quiz: int = 3
    intro_title: str = ""
    intro_subtitle: str = ""
    intro_title_color: str = "#fff"
    intro_subtitle_color: str = "#fff"
    start_button_text: str = "Start"
    restart_button_text: str = "Play Again"
    text_color: str = "#fff"
    font: str = ""
    button_normal_text_color: str = "#202124"
    button_normal_background_color: str = "#fff"
    button_selected_text_color: str = "#fff"
    button_selected_background_color: str = "#4285f4"
    progress_bar_background_color: str = "#fff"
    progress_bar_fill_color: str = "#f24738"

class ContentPack(CamelModel):
    quiz_intro: List[QuizIntro] = Field(min_length=1)
    quiz_questions: List[Question] = Field(min_length=1)
    quiz_outcomes: List[Outcome] = Field(min_length=1)
    quiz_settings: Dict[str, Any] = {}
    general_prompts: Dict[str, List[PromptText]] = {}

# Session state

class QuizSession(CamelModel):
    count: int = 0
    limit: int = 0
    questions: List[Question] = []
    trait_to_weight: Dict[str, int] = {}

    @model_validator(mode="after")
    def _check_progress(self) -> "QuizSession":
        if not 0 <= self.count <= self.limit:
            raise ValueError(f"count {self.count} outside 0..{self.limit}")
        return self

class SessionData(QuizSession):
    version: int = SESSION_VERSION
    quiz_settings: QuizSettings = Field(default_factory=QuizSettings)

# Response items

class Simple(CamelModel):
    speech: str = ""
    text: str = ""

class Suggestion(CamelModel):
    title: str

class Image(CamelModel):
    url: str
    alt: str = ""

class Card(CamelModel):
    title: str = ""
    text: str = ""
    image: Optional[Image] = None
    image_fill: str = "WHITE"

class Canvas(CamelModel):
    url: str = ""
    suppress_mic: bool = False
    data: List[Dict[str, Any]] = []

# Webhook request

class HandlerInfo(CamelModel):
    name: str

class IntentParameter(CamelModel):
    original: Any = None
    resolved: Any = None

class IntentInfo(CamelModel):
    name: str = ""
    params: Dict[str, IntentParameter] = {}
    query: str = ""

class SessionInfo(CamelModel):
    id: str = ""
    params: Dict[str, Any] = {}
    type_overrides: List[Dict[str, Any]] = []
    language_code: str = ""

class UserInfo(CamelModel):
    locale: str = ""

class DeviceInfo(CamelModel):
    capabilities: List[str] = []

class HandlerRequest(CamelModel):
    handler: HandlerInfo
    intent: IntentInfo = Field(default_factory=IntentInfo)
    scene: Dict[str, Any] = {}
    session: SessionInfo = Field(default_factory=SessionInfo)
    user: UserInfo = Field(default_factory=UserInfo)
    device: DeviceInfo = Field(default_factory=DeviceInfo)
