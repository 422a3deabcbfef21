import os

from dotenv import load_dotenv

load_dotenv()


def get_config() -> dict:
    """Flask config values read from the environment (and .env)."""
    return {
        "SECRET_KEY": os.getenv("FLASK_SECRET_KEY", "dev-secret-change-me"),
        "OPENAI_API_KEY": os.getenv("OPENAI_API_KEY"),
        "OPENAI_MODEL": os.getenv("OPENAI_MODEL", "gpt-4o"),
        "CHAT_TEMPERATURE": float(os.getenv("CHAT_TEMPERATURE", "0.7")),
        "CHAT_MAX_TOKENS": int(os.getenv("CHAT_MAX_TOKENS", "512")),
        "CHAT_RATE_LIMIT": os.getenv("CHAT_RATE_LIMIT", "10 per minute"),
        "RATELIMIT_ENABLED": os.getenv("RATELIMIT_ENABLED", "true").lower() != "false",
        "HOST": os.getenv("HOST", "0.0.0.0"),
        "PORT": int(os.getenv("PORT", 5000)),
        "DEBUG": os.getenv("FLASK_ENV", "development").lower() != "production",
    }
