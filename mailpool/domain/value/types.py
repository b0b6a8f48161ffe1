"""Domain value objects for mailpool.

Value objects are immutable and defined by their values, not identity.
"""

from enum import Enum

from mailpool.domain.value.common import ValueObject


class ErrorKind(str, Enum):
    """Stable machine-readable error kinds reported to callers."""

    INVALID = "invalid"
    VALIDATION = "validation"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    INVALID_METHOD = "invalid_method"
    ALREADY_USED = "already_used"
    UNAVAILABLE = "unavailable"
    NOT_FOUND = "not_found"


class TokenContext(str, Enum):
    """Sealing context. Each context derives its own key.

    A token sealed under one context never unseals under another.
    """

    INVITE = "invite"
    CARD = "card"
    SESSION = "session"

    @property
    def prefix(self) -> str:
        """Human-recognisable prefix of the sealed string."""
        return "sk-" if self is TokenContext.CARD else ""


class RegistrationMethod(str, Enum):
    """Ways an invite may be used to register an account."""

    LINUXDO = "linuxdo"
    GOOGLE = "google"
    CARD_KEY = "card_key"
    OTHERS = "others"

    @classmethod
    def _missing_(cls, value):
        # Accept the camelCase spelling used by older clients
        if value == "cardKey":
            return cls.CARD_KEY
        return None


class InviteType(str, Enum):
    """Kind of invite issuance request."""

    CUSTOM = "custom"
    QUICK = "quick"


class PoolTier(str, Enum):
    """Quota bucket of pooled identities."""

    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"


class IdentityProtocol(str, Enum):
    """Mail protocol a pooled identity is reachable through."""

    IMAP = "imap"
    GRAPH = "graph"


class CardDuration(str, Enum):
    """Card-key duration.

    Accepts the display labels (短效/长效) and the compact codes (S/L)
    used by keys minted by the previous generator.
    """

    SHORT = "short"
    LONG = "long"

    @classmethod
    def _missing_(cls, value):
        aliases = {
            "短效": cls.SHORT,
            "S": cls.SHORT,
            "长效": cls.LONG,
            "L": cls.LONG,
        }
        return aliases.get(value)

    @property
    def label(self) -> str:
        return "短效" if self is CardDuration.SHORT else "长效"

    @property
    def tier(self) -> PoolTier:
        return PoolTier.SHORT_TERM if self is CardDuration.SHORT else PoolTier.LONG_TERM


class CardSource(str, Enum):
    """Sales channel a card key was minted for."""

    TAOBAO = "taobao"
    XIANYU = "xianyu"
    INTERNAL = "internal"
    CUSTOM = "custom"

    @classmethod
    def _missing_(cls, value):
        aliases = {
            "淘宝": cls.TAOBAO,
            "闲鱼": cls.XIANYU,
            "内部": cls.INTERNAL,
            "自定义": cls.CUSTOM,
        }
        return aliases.get(value)


class ErrorDetail(ValueObject):
    """Error reported inside a result instead of being raised."""

    kind: ErrorKind
    message: str

    @classmethod
    def from_error(cls, error) -> "ErrorDetail":
        """Build from a DomainError."""
        return cls(kind=error.kind, message=error.message)
