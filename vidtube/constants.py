"""Application constants - centralized configuration values."""

# =============================================================================
# Pagination
# =============================================================================
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10

# Per-endpoint page size ceilings
MAX_VIDEOS_PAGE_SIZE = 50
MAX_COMMENTS_PAGE_SIZE = 100
MAX_LIKED_VIDEOS_PAGE_SIZE = 50
MAX_PLAYLISTS_PAGE_SIZE = 50
MAX_SUBSCRIPTIONS_PAGE_SIZE = 50
MAX_TWEETS_PAGE_SIZE = 50

# =============================================================================
# Sort Options
# =============================================================================
DEFAULT_SORT_FIELD = "created_at"
DEFAULT_SORT_ORDER = "desc"

# =============================================================================
# Validation
# =============================================================================
USERNAME_PATTERN = r"^[a-zA-Z0-9_]{3,30}$"
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 50
TWEET_MAX_LENGTH = 280
COMMENT_MAX_LENGTH = 1000
TITLE_MAX_LENGTH = 200
PLAYLIST_NAME_MAX_LENGTH = 100

# =============================================================================
# Session & Security
# =============================================================================
ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

# =============================================================================
# Cache TTLs (in seconds)
# =============================================================================
CACHE_TTL_CHANNEL_STATS = 60

# =============================================================================
# Storage
# =============================================================================
CLOUDINARY_API_BASE_URL = "https://api.cloudinary.com/v1_1"
STORAGE_TIMEOUT = 120.0  # Video uploads can be slow
