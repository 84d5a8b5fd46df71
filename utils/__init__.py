# Study Tracker Utilities
from .file_storage import (
    UserStorage,
    UploadStorage,
    QuizStorage,
    QuizResultStorage,
    StudySessionStorage,
    GoalStorage,
)

from .model_config import (
    ModelConfig,
    ModelProvider,
    MODEL_CONFIGS,
)

from .settings import Settings, get_settings

__all__ = [
    'UserStorage',
    'UploadStorage',
    'QuizStorage',
    'QuizResultStorage',
    'StudySessionStorage',
    'GoalStorage',
    'ModelConfig',
    'ModelProvider',
    'MODEL_CONFIGS',
    'Settings',
    'get_settings',
]
