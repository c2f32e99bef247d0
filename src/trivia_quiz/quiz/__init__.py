from ._main import build_arg_parser
from .config import (
    ConfigOverrides,
    ProviderSource,
    QuizConfig,
    QuizConfigError,
    load_config,
)
from .console import ConsoleQuizResult, run_console_quiz
from .errors import (
    AlreadySubmitted,
    InvalidQuestionSet,
    InvalidTransition,
    NoSelection,
    ProviderError,
    QuizError,
    SessionError,
    UnknownOption,
)
from .models import (
    Feedback,
    FinalSummary,
    Option,
    Phase,
    Question,
    RawQuestion,
    SessionView,
)
from .normalize import build_question_set, normalize_question
from .providers import (
    JsonlQuestionProvider,
    OpenTriviaProvider,
    QuestionProvider,
    StaticQuestionProvider,
)
from .runner import QuizRunner, build_provider
from .session import QuizSession
from .view.quiz import QuestionView, QuizApp

__all__ = [
    "build_arg_parser",
    "ConfigOverrides",
    "ProviderSource",
    "QuizConfig",
    "QuizConfigError",
    "load_config",
    "ConsoleQuizResult",
    "run_console_quiz",
    "QuizError",
    "ProviderError",
    "InvalidQuestionSet",
    "SessionError",
    "InvalidTransition",
    "UnknownOption",
    "NoSelection",
    "AlreadySubmitted",
    "Feedback",
    "FinalSummary",
    "Option",
    "Phase",
    "Question",
    "RawQuestion",
    "SessionView",
    "build_question_set",
    "normalize_question",
    "QuestionProvider",
    "OpenTriviaProvider",
    "StaticQuestionProvider",
    "JsonlQuestionProvider",
    "QuizRunner",
    "build_provider",
    "QuizSession",
    "QuizApp",
    "QuestionView",
]
