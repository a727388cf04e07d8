"""
Application configuration loader and it handles:
- Environment variables
- Model client configuration (provider, tags, capability levels)
- Planner defaults
- Database configuration

And, the main purpose:
Central place for system configuration.
"""


from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./planner.db"

    # LLM
    LLM_PROVIDER: str = "groq"  # groq | mock (for no-key dev)
    GROQ_API_KEY: str = ""
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    LLM_MODEL: str = "llama-3.3-70b-versatile"
    LLM_TAGS: str = "chat,reasoning"  # comma separated
    LLM_CAPABILITIES: str = "reasoning=3"  # name=level, comma separated
    LLM_TIMEOUT_SECONDS: float = 40.0

    # Planner
    PLANNER_MODEL_FILTER: str = ""  # e.g. "reasoning>=3"; empty means tags only

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
