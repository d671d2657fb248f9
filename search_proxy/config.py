import os


def _env_int(name: str, default: int) -> int:
    try:
        value = int(os.environ.get(name, "") or default)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_float(name: str, default: float) -> float:
    try:
        value = float(os.environ.get(name, "") or default)
    except ValueError:
        return default
    return value if value > 0 else default


TARGET_SEARCH_URL = os.environ.get(
    "TARGET_SEARCH_URL", "https://tueducaciondigital.site/ads/getads/"
)
FORWARD_TIMEOUT = _env_float("FORWARD_TIMEOUT", 10.0)  # seconds
FORWARD_MAX_REDIRECTS = _env_int("FORWARD_MAX_REDIRECTS", 5)

TARGET_LANG = os.environ.get("TRANSLATE_TARGET_LANG", "pt")
SOURCE_LANG = os.environ.get("TRANSLATE_SOURCE_LANG", "auto")
TRANSLATE_PROVIDER = os.environ.get("TRANSLATE_PROVIDER", "google-cloud")
GOOGLE_TRANSLATE_API_KEY = os.environ.get("GOOGLE_TRANSLATE_API_KEY") or None
GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"
TRANSLATE_TIMEOUT = _env_float("TRANSLATE_TIMEOUT", 8.0)  # seconds

CACHE_TTL = _env_int("TRANSLATION_CACHE_TTL_MS", 60 * 60 * 1000) / 1000  # seconds
CACHE_MAX_ENTRIES = _env_int("TRANSLATION_CACHE_MAX", 500)

CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
SERVICE_NAME = os.environ.get("SERVICE_NAME", "search-proxy")
PORT = _env_int("PORT", 3000)

KEYWORDS_PARAM = "keywords"
INTERNAL_ERROR_BODY = {"error": "An internal server error occurred."}
