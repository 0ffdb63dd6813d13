"""Application configuration via environment variables."""

import os
from dotenv import load_dotenv

load_dotenv()

# Runtime
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# OpenAI completion provider
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

# Plan generation
PLAN_TEMPERATURE = float(os.getenv("PLAN_TEMPERATURE", "0.3"))
PLAN_MAX_TOKENS = int(os.getenv("PLAN_MAX_TOKENS", "8192"))
PLAN_MAX_ATTEMPTS = int(os.getenv("PLAN_MAX_ATTEMPTS", "3"))
PLAN_RETRY_DELAY_SECONDS = float(os.getenv("PLAN_RETRY_DELAY_SECONDS", "1.0"))

# Result caches (in-process, per worker)
PLAN_CACHE_TTL_SECONDS = float(os.getenv("PLAN_CACHE_TTL_SECONDS", "300"))
PLAN_CACHE_MAX_ENTRIES = int(os.getenv("PLAN_CACHE_MAX_ENTRIES", "100"))
CAD_CACHE_TTL_SECONDS = float(os.getenv("CAD_CACHE_TTL_SECONDS", "300"))
CAD_CACHE_MAX_ENTRIES = int(os.getenv("CAD_CACHE_MAX_ENTRIES", "50"))

# DWG conversion - CloudConvert
CLOUDCONVERT_API_KEY = os.getenv("CLOUDCONVERT_API_KEY", "")
CLOUDCONVERT_API_URL = os.getenv("CLOUDCONVERT_API_URL", "https://api.cloudconvert.com/v2")
CLOUDCONVERT_POLL_INTERVAL_SECONDS = float(os.getenv("CLOUDCONVERT_POLL_INTERVAL_SECONDS", "2.0"))
CLOUDCONVERT_MAX_POLLS = int(os.getenv("CLOUDCONVERT_MAX_POLLS", "60"))

# DWG conversion - local tools
LIBREDWG_COMMAND = os.getenv("LIBREDWG_COMMAND", "dwgwrite")
ODA_CONVERTER_PATH = os.getenv("ODA_CONVERTER_PATH", "/usr/local/bin/ODAFileConverter")
LOCAL_CONVERTER_TIMEOUT_SECONDS = int(os.getenv("LOCAL_CONVERTER_TIMEOUT_SECONDS", "120"))

# CORS
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
