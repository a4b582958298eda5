from typing import Annotated, Any, Literal

from pydantic import BeforeValidator
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_list(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Use top level .env file (one level above ./backend/)
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
    )
    PROJECT_NAME: str = "scriptbridge"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    # Script engine: seconds before a load or call is aborted (SIGALRM, Unix only)
    SCRIPT_EXEC_TIMEOUT: int | None = None
    # Comma-separated top-level module names exposed in script globals (e.g. "statistics")
    SCRIPT_EXTRA_MODULES: str | None = None

    # Bootstrap: load the bundled API script and every *.py under SCRIPT_DIRS
    LOAD_BUNDLED_API: bool = True
    SCRIPT_DIRS: Annotated[list[str] | str, BeforeValidator(parse_list)] = []


settings = Settings()  # type: ignore
