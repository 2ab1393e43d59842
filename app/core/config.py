"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    DEEPSEEK_TOKEN       — DeepSeek API key (first provider tried)
    GLM_API_KEY          — Zhipu GLM API key (GLM_TOKEN is accepted too)
    OPENAI_API_KEY       — OpenAI API key (last provider tried)
    ENABLE_AI_REPAIR     — Use the LLM for repairs when a key is present (default: true)
    FIX_MAX_RETRIES      — Max build → diagnose → repair rounds (default: 3)
    BUILD_COMMAND        — Shell command that builds the generated project (default: npm run build)
    BUILD_TIMEOUT        — Seconds a single build may run before it is killed (default: 300)
    TARGET_DIR           — Default generated project root (default: ./fixtures/target)
    REPORT_PATH          — Where the session report JSON is written

Retry Philosophy:
    FIX_MAX_RETRIES bounds the number of build invocations in one repair
    session. The loop may stop earlier when the build passes, when the
    build output carries no parseable diagnostics, or when two rounds in a
    row report the same diagnostics.

    LLM_MAX_RETRIES and LLM_RETRY_DELAY are local to the LLM client. The
    delay grows linearly (delay * attempt). Once exhausted the selector
    falls back to the rule table for that diagnostic.
"""
import os
from dotenv import load_dotenv

load_dotenv()

DEEPSEEK_TOKEN = os.getenv("DEEPSEEK_TOKEN")
GLM_API_KEY = os.getenv("GLM_API_KEY") or os.getenv("GLM_TOKEN")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")

ENABLE_AI_REPAIR = os.getenv("ENABLE_AI_REPAIR", "true").lower() == "true"

# Repair session
FIX_MAX_RETRIES = int(os.getenv("FIX_MAX_RETRIES", 3))
TARGET_DIR = os.getenv("TARGET_DIR", "./fixtures/target")
REPORT_PATH = os.getenv("REPORT_PATH", "compilation-fix-report.json")

# Build execution
BUILD_COMMAND = os.getenv("BUILD_COMMAND", "npm run build")
BUILD_TIMEOUT = int(os.getenv("BUILD_TIMEOUT", 300))
BUILD_SPAWN_RETRIES = int(os.getenv("BUILD_SPAWN_RETRIES", 2))

# LLM call policy
LLM_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", 3))
LLM_RETRY_DELAY = float(os.getenv("LLM_RETRY_DELAY", 1.0))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", 0.1))
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", 4000))
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", 60))
