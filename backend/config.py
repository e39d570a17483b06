# config.py
import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")

GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "").strip()
GEMINI_MODEL = (os.getenv("GEMINI_MODEL") or "gemini-2.0-flash").strip()

# Seconds. The generator call is attempted once; a deadline surfaces as GenerationTimeout.
GENERATION_TIMEOUT = float(os.getenv("GENERATION_TIMEOUT", "120"))
FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT", "20"))

# Limit size for LLM cost
MAX_PAGE_CHARS = int(os.getenv("MAX_PAGE_CHARS", "12000"))

SLUG_INSERT_ATTEMPTS = int(os.getenv("SLUG_INSERT_ATTEMPTS", "3"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
PORT = int(os.getenv("PORT", "3000"))
