from services.auth_service import AuthService
from services.upload_service import UploadService
from services.quiz_service import QuizService
from services.session_service import SessionService
from services.goal_service import GoalService
from services.recommendation_service import RecommendationService

__all__ = [
    'AuthService',
    'UploadService',
    'QuizService',
    'SessionService',
    'GoalService',
    'RecommendationService',
]
