"""
Runtime settings for apigen.

Values come from environment variables (a .env file is loaded by the CLI via
python-dotenv) and can be overridden by command-line flags.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

DOCUMENTATION_URL = "https://www.alphavantage.co/documentation/"
DEFAULT_OUTPUT = "alphavantage_api.py"
DEFAULT_TIMEOUT = 30.0


class Settings(BaseModel):
    documentation_url: str = DOCUMENTATION_URL
    output_path: Path = Path(DEFAULT_OUTPUT)
    request_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """
        Build settings from APIGEN_* environment variables.

        Keyword overrides (e.g. command-line flags) win over the environment;
        None means "not given". Every value goes through model validation.

        Raises:
            pydantic.ValidationError: if a value is malformed
        """
        values = {
            "documentation_url": os.getenv("APIGEN_DOCS_URL", DOCUMENTATION_URL),
            "output_path": os.getenv("APIGEN_OUTPUT", DEFAULT_OUTPUT),
            "request_timeout": os.getenv("APIGEN_TIMEOUT", DEFAULT_TIMEOUT),
            "log_level": os.getenv("APIGEN_LOG_LEVEL", "INFO").upper(),
            "log_file": os.getenv("APIGEN_LOG_FILE") or None,
        }
        values.update({name: value for name, value in overrides.items() if value is not None})
        return cls(**values)
