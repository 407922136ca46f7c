from enum import Enum


class Role(str, Enum):
    """Account roles."""
    USER = "USER"
    ADMIN = "ADMIN"


class DocumentType(str, Enum):
    """Exam paper or its correction."""
    SUBJECT = "SUBJECT"
    CORRECTION = "CORRECTION"


class SubscriptionPlan(str, Enum):
    """Premium plans. ADMIN_ACTIVATE is granted by an administrator and never expires."""
    MONTHLY = "PREMIUM_MONTHLY"
    ANNUAL = "PREMIUM_ANNUAL"
    ADMIN_ACTIVATE = "ADMIN_ACTIVATE"


class PaymentProvider(str, Enum):
    """Mobile money providers accepted as proof of payment."""
    WAVE = "WAVE"
    ORANGE_MONEY = "ORANGE_MONEY"


class SubscriptionStatus(str, Enum):
    """Lifecycle of a subscription: PENDING -> ACTIVE -> CANCELLED."""
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"


class AccessTier(str, Enum):
    """Tier a request path is classified into by the authorization gate."""
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    PREMIUM = "premium"
    ADMIN = "admin"


class Capability(str, Enum):
    """What a session must hold to pass an access check."""
    AUTHENTICATED = "authenticated"
    PREMIUM = "premium"
    ADMIN = "admin"


class UploadKind(str, Enum):
    """Upload categories accepted by the admin upload endpoint."""
    IMAGE = "image"
    DOCUMENT = "document"


class AssistAction(str, Enum):
    """What the AI assistant is asked to do with an exam paper."""
    TRANSCRIBE = "transcribe"
    EXPLAIN_EXERCISE = "explain_exercise"
    FORMULAS = "formulas"
    METHODOLOGY = "methodology"
    FULL_ASSIST = "full_assist"
