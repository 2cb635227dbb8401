from enum import Enum


class Action(str, Enum):
    """Handler names configured on the conversational platform."""
    LOAD_SETTINGS = "LOAD_SETTINGS"
    SETUP_QUIZ = "SETUP_QUIZ"
    START_SKIP_CONFIRMATION = "START_SKIP_CONFIRMATION"
    START_CONFIRMATION = "START_CONFIRMATION"
    START_YES = "START_YES"
    START_NO = "START_NO"
    START_HELP = "START_HELP"
    START_REPEAT = "START_REPEAT"
    START_NO_MATCH_1 = "START_NO_MATCH_1"
    START_NO_MATCH_2 = "START_NO_MATCH_2"
    START_NO_INPUT_1 = "START_NO_INPUT_1"
    START_NO_INPUT_2 = "START_NO_INPUT_2"
    QUESTION_REPEAT = "QUESTION_REPEAT"
    ANSWER = "ANSWER"
    ANSWER_ORDINAL = "ANSWER_ORDINAL"
    ANSWER_BOTH_OR_NONE = "ANSWER_BOTH_OR_NONE"
    ANSWER_HELP = "ANSWER_HELP"
    ANSWER_SKIP = "ANSWER_SKIP"
    ANSWER_NO_MATCH_1 = "ANSWER_NO_MATCH_1"
    ANSWER_NO_MATCH_2 = "ANSWER_NO_MATCH_2"
    ANSWER_MAX_NO_MATCH = "ANSWER_MAX_NO_MATCH"
    ANSWER_NO_INPUT_1 = "ANSWER_NO_INPUT_1"
    ANSWER_NO_INPUT_2 = "ANSWER_NO_INPUT_2"
    ANSWER_MAX_NO_INPUT = "ANSWER_MAX_NO_INPUT"
    RESTART_CONFIRMATION = "RESTART_CONFIRMATION"
    RESTART_YES = "RESTART_YES"
    RESTART_NO = "RESTART_NO"
    RESTART_REPEAT = "RESTART_REPEAT"
    PLAY_AGAIN_YES = "PLAY_AGAIN_YES"
    PLAY_AGAIN_NO = "PLAY_AGAIN_NO"
    PLAY_AGAIN_REPEAT = "PLAY_AGAIN_REPEAT"
    QUIT_CONFIRMATION = "QUIT_CONFIRMATION"
    QUIT_YES = "QUIT_YES"
    QUIT_NO = "QUIT_NO"
    QUIT_REPEAT = "QUIT_REPEAT"
    GENERIC_NO_MATCH = "GENERIC_NO_MATCH"
    GENERIC_MAX_NO_MATCH = "GENERIC_MAX_NO_MATCH"
    GENERIC_NO_INPUT = "GENERIC_NO_INPUT"
    GENERIC_MAX_NO_INPUT = "GENERIC_MAX_NO_INPUT"


class Intent(str, Enum):
    MAIN = "actions.intent.MAIN"
    PLAY_GAME = "actions.intent.PLAY_GAME"
    NO_MATCH = "actions.intent.NO_MATCH"
    NO_INPUT = "actions.intent.NO_INPUT"
    CANCEL = "actions.intent.CANCEL"


class Capability(str, Enum):
    SPEECH = "SPEECH"
    RICH_RESPONSE = "RICH_RESPONSE"
    INTERACTIVE_CANVAS = "INTERACTIVE_CANVAS"


# Session type and intent parameter names
ANSWER_TYPE = "answer"
COUNT_PARAM = "count"
USER_ANSWER_PARAM = "UserAnswer"
END_CONVERSATION_SCENE = "actions.scene.END_CONVERSATION"
TYPE_REPLACE = "TYPE_REPLACE"


class Answer(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    FIRST = "first"
    SECOND = "second"


class Template(str, Enum):
    """Slide templates understood by the canvas web app."""
    QUESTION = "template.question"
    INTRO = "template.intro"
    OUTCOME = "template.outcome"
    # speak only, keep the current slide
    SAY = "template.say"
    # speak, then the session closes
    TELL = "template.tell"


class TemplateAction(str, Enum):
    RESET = "template.action.reset"
    FREEZE = "template.action.freeze"
    ACTIVE_0 = "template.action.positive"
    ACTIVE_1 = "template.action.negative"


class TtsMark(str, Enum):
    START = "START"
    END = "END"
    ERROR = "ERROR"
    FLIP = "FLIP"


class Prompt(str, Enum):
    """General prompt names; the value is the content pack key."""
    INTRO_CONFIRMATION = "intro_confirmation_question"
    INTRO_CONFIRMATION_POSITIVE = "intro_confirmation_positive"
    INTRO_CONFIRMATION_NEGATIVE = "intro_confirmation_negative"
    INTRO_POSITIVE_RESPONSE = "intro_positive_response"
    INTRO_NEGATIVE_RESPONSE = "intro_negative_response"
    INTRO_NO_MATCH_1 = "intro_no_match_first"
    INTRO_NO_MATCH_2 = "intro_no_match_second"
    INTRO_NO_INPUT_1 = "intro_no_input_first"
    INTRO_NO_INPUT_2 = "intro_no_input_second"
    START_REPEAT = "start_repeat"
    START_HELP = "start_help"
    TRANSITIONS_REGULAR = "transitions_regular"
    TRANSITIONS_FINAL = "transitions_final"
    QUESTION_REPEAT = "question_repeat"
    ANSWER_HELP = "answer_help"
    ANSWER_NO_MATCH_1 = "answer_no_match_first"
    ANSWER_NO_MATCH_2 = "answer_no_match_second"
    ANSWER_MAX_NO_MATCH = "answer_max_no_match"
    ANSWER_NO_INPUT_1 = "answer_no_input_first"
    ANSWER_NO_INPUT_2 = "answer_no_input_second"
    ANSWER_MAX_NO_INPUT = "answer_max_no_input"
    OUTCOME_INTRO = "outcome_intro"
    END_OF_GAME = "end_of_game"
    END_OF_GAME_PLAY_AGAIN_YES = "end_of_game_play_again_yes"
    END_OF_GAME_PLAY_AGAIN_NO = "end_of_game_play_again_no"
    RESTART_CONFIRMATION = "restart_confirmation"
    RESTART_YES_RESPONSE = "restart_yes_response"
    RESTART_NO_RESPONSE = "restart_no_response"
    SKIP = "skip"
    QUIT_CONFIRMATION = "quit_confirmation"
    CONTINUE_TO_PLAY = "continue_to_play"
    ACKNOWLEDGE_QUIT = "acknowledge_quit"
    GENERIC_NO_MATCH = "generic_no_match"
    GENERIC_MAX_NO_MATCH = "generic_max_no_match"
    GENERIC_NO_INPUT = "generic_no_input"
    GENERIC_MAX_NO_INPUT = "generic_max_no_input"
    QUESTION_OR = "question_or"
    GENERIC_YES = "generic_yes"
    GENERIC_NO = "generic_no"
    GENERIC_NO_MATCH_NONANSWER = "generic_no_match_nonanswer"
