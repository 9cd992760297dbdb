import asyncio
import os
from typing import Optional

from dotenv import load_dotenv
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel

load_dotenv()

DEFAULT_MODEL = "gemini-2.5-flash"

# Centralized Model Configuration
# Planner and reviewer must answer in JSON; the answer writer gets a little more freedom.
MODEL_CONFIG = {
    "planner": {
        "temperature": 0.1,
        "response_mime_type": "application/json",
    },
    "reviewer": {
        "temperature": 0.1,
        "response_mime_type": "application/json",
    },
    "answer": {
        "temperature": 0.3,
    },
}

# Transient-error retry (timeouts, dropped connections)
RETRY_DELAYS = [2, 5, 10]
TRANSIENT_ERROR_KEYWORDS = [
    "Timeout", "ReadTimeout", "ConnectTimeout", "ConnectionError",
    "RemoteDisconnected", "ConnectionReset",
]


class Settings(BaseModel):
    google_api_key: Optional[str] = None
    rawg_api_key: Optional[str] = None
    rawg_base_url: str = "https://api.rawg.io/api"
    model: str = DEFAULT_MODEL
    host: str = "127.0.0.1"
    port: int = 8000


def load_settings() -> Settings:
    """Reads settings from the environment (and .env, loaded at import)."""
    return Settings(
        google_api_key=os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY"),
        rawg_api_key=os.getenv("RAWG_API_KEY"),
        rawg_base_url=os.getenv("RAWG_BASE_URL", "https://api.rawg.io/api"),
        model=os.getenv("GAME_AGENT_MODEL", DEFAULT_MODEL),
        host=os.getenv("GAME_AGENT_HOST", "127.0.0.1"),
        port=int(os.getenv("GAME_AGENT_PORT", "8000")),
    )


def get_llm(component_name: str, api_key: Optional[str] = None) -> ChatGoogleGenerativeAI:
    """
    Returns an initialized LLM instance for the specified component.
    A per-request api_key takes precedence over the environment.
    """
    config = MODEL_CONFIG.get(component_name)
    if not config:
        raise ValueError(f"Unknown component: {component_name}")

    settings = load_settings()
    kwargs = {
        "model": settings.model,
        "temperature": config["temperature"],
        "max_retries": 2,
    }
    if config.get("response_mime_type"):
        kwargs["response_mime_type"] = config["response_mime_type"]
    key = api_key or settings.google_api_key
    if key:
        kwargs["google_api_key"] = key

    return ChatGoogleGenerativeAI(**kwargs)


def is_transient_error(error: Exception) -> bool:
    error_name = type(error).__name__
    return any(keyword in error_name for keyword in TRANSIENT_ERROR_KEYWORDS) \
        or "timed out" in str(error).lower()


async def ainvoke_with_retry(llm, messages: list, label: str):
    """Invoke the model, retrying transient network errors. Anything else propagates."""
    for attempt in range(len(RETRY_DELAYS) + 1):
        try:
            return await llm.ainvoke(messages)
        except Exception as e:
            if is_transient_error(e) and attempt < len(RETRY_DELAYS):
                delay = RETRY_DELAYS[attempt]
                print(f"⚠️  {label} transient error ({type(e).__name__}), retrying in {delay}s...", flush=True)
                await asyncio.sleep(delay)
                continue
            print(f"DEBUG: FATAL ERROR in {label}: {str(e)}", flush=True)
            raise
