from .base import BaseSchema, ResponseBase, CatalogueRef, Page, Pagination, MessageResponse
from .enums import Role, DocumentType, SubscriptionPlan, PaymentProvider, SubscriptionStatus, AccessTier, Capability, UploadKind, AssistAction
from .user import UserSummary, UserResponse, Entitlement, CurrentUserResponse, PremiumOverrideRequest, PremiumOverrideResponse
from .auth import RegisterRequest, RegisterResponse, Token
from .document import (
    CatalogueEntryCreate, CatalogueEntryUpdate, CatalogueEntryResponse,
    DocumentCreate, DocumentUpdate, DocumentResponse,
    FavoriteToggleRequest, FavoriteToggleResponse,
    PackRequest, PackDocument, PackManifest,
)
from .quiz import (
    QuestionPublic, QuizPublic, QuizSummary, QuestionCreate, QuizCreate, QuizCreatedResponse,
    QuizSubmitRequest, QuestionResult, QuizSubmitResponse,
)
from .subscription import (
    PAID_PLANS, SubscriptionResponse, ActivateRequest, ActivateResponse,
    CheckoutRequest, CheckoutResponse, WebhookAck,
)
from .ai import (
    GenerateQuizRequest, AdminGenerateQuizRequest, GeneratedQuestion, GeneratedQuiz, GenerateQuizResponse,
    ExplainRequest, ExplainResponse, CorrectRequest, CorrectResponse, AssistRequest, AssistResponse,
)
from .progress import (
    BadgeEarned, UserBadgeResponse, ProgressStats, SubjectProgress, RecentAttempt, ProgressResponse,
)
from .file import UploadResponse
