"""Application configuration and constants."""
import os
import sys
from pathlib import Path


def _resource_path(relative: str) -> Path:
    """Get path to a bundled resource, works for PyInstaller bundles."""
    if getattr(sys, "frozen", False):
        base_dir = Path(sys._MEIPASS) / "exam_api"
    else:
        base_dir = Path(__file__).resolve().parent
    return base_dir / relative


def _parse_int_env(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Directories
DATA_DIR = Path(os.environ.get("DATA_DIR", Path.cwd() / "data"))
DATA_DIR.mkdir(parents=True, exist_ok=True)

BLOB_DIR = Path(os.environ.get("BLOB_DIR", DATA_DIR / "blobs"))
BLOB_DIR.mkdir(parents=True, exist_ok=True)
BLOB_BASE_URL = os.environ.get("BLOB_BASE_URL", "/api/blobs").rstrip("/")

KNOWLEDGE_BASE_PATH = Path(
    os.environ.get("KNOWLEDGE_BASE_PATH", _resource_path("data/curricula.json"))
)

# Database
DATABASE_URL = os.environ.get(
    "DATABASE_URL", f"sqlite:///{DATA_DIR / 'exam_builder.db'}"
)

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Test defaults
DEFAULT_TEST_TITLE = os.environ.get(
    "DEFAULT_TEST_TITLE", "Grade 4 - Mid-term English test"
)
DEFAULT_TIME_LIMIT_MINUTES = _parse_int_env("DEFAULT_TIME_LIMIT_MINUTES", 40)

# Generative AI
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
GEMINI_BASE_URL = os.environ.get(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
).rstrip("/")
GEMINI_TEXT_MODEL = os.environ.get("GEMINI_TEXT_MODEL", "gemini-2.5-flash")
GEMINI_IMAGE_MODEL = os.environ.get(
    "GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image-preview"
)
IMAGEN_MODEL = os.environ.get("IMAGEN_MODEL", "imagen-4.0-fast-generate-001")
GEMINI_TTS_MODEL = os.environ.get("GEMINI_TTS_MODEL", "gemini-2.5-flash-preview-tts")
AI_TIMEOUT_SECONDS = _parse_int_env("AI_TIMEOUT_SECONDS", 120)
STORYBOARD_MAX_WORKERS = _parse_int_env("STORYBOARD_MAX_WORKERS", 4)

# Text-to-speech output format
TTS_SAMPLE_RATE = 24000
TTS_CHANNELS = 1
TTS_SAMPLE_WIDTH = 2
DEFAULT_TTS_VOICE = "Algenib"
