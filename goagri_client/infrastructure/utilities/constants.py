"""
Application constants for the GoAgri client engine

Centralizes storage keys, fee tables and limits so the use cases do not
carry magic numbers or hard-coded strings.
"""

from decimal import Decimal
from typing import Final, Mapping


class StorageKeys:
    """Keys used in the local key-value store"""

    GUEST_CART: Final[str] = "goat_cart_v1"
    SESSION_TOKEN: Final[str] = "pos-token"
    CACHED_USER: Final[str] = "pos-user"
    VIEW_MODE: Final[str] = "view-mode"

    # Namespaced per identity: <prefix><user key>
    ADDRESSES_PREFIX: Final[str] = "addresses_"
    DEFAULT_ADDRESS_PREFIX: Final[str] = "default_address_"


class BusinessSettings:
    """Business rules applied on the client"""

    DELIVERY_FEES: Final[Mapping[str, Decimal]] = {
        "pickup": Decimal("0"),
        "in-house": Decimal("50"),
        "third-party": Decimal("80"),
    }
    DEFAULT_DELIVERY_TYPE: Final[str] = "in-house"

    # Merged guest + server quantities are clamped into this range
    MERGE_MIN_QUANTITY: Final[int] = 1
    MERGE_MAX_QUANTITY: Final[int] = 99

    DEFAULT_VIEW_MODE: Final[str] = "grid"


class RewardTypes:
    """Reward catalogue types"""

    DISCOUNT: Final[str] = "discount"
    SHIPPING: Final[str] = "shipping"
    BONUS: Final[str] = "bonus"


class RealtimeEvents:
    """Event names published on the realtime channel"""

    INVENTORY_UPDATE: Final[str] = "inventory:update"
    INVENTORY_DELETED: Final[str] = "inventory:deleted"


class LoggingSettings:
    """Logging file sizes and rotation settings"""

    MAX_LOG_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10MB
    MAIN_LOG_BACKUP_COUNT: Final[int] = 10
    ERROR_LOG_BACKUP_COUNT: Final[int] = 10
    JSON_LOG_BACKUP_COUNT: Final[int] = 5

    MAIN_LOG_FILE: Final[str] = "goagri_client.log"
    ERROR_LOG_FILE: Final[str] = "errors.log"
    JSON_LOG_FILE: Final[str] = "goagri_client.json.log"


class PerformanceSettings:
    """Thresholds for performance logging"""

    SLOW_OPERATION_THRESHOLD_MS: Final[int] = 2000
