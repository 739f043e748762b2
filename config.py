from dataclasses import dataclass
import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

STARTGG_API_URL = "https://api.start.gg/gql/alpha"

@dataclass(frozen=True)
class ApiCredentials:
    api_key: str
    url: str = STARTGG_API_URL

class EnvironmentConfig:
    """Loads and validates the start.gg credential."""
    @staticmethod
    def load(api_key: Optional[str] = None) -> ApiCredentials:
        key = api_key or os.getenv("STARTGG_API_KEY")
        if not key:
            raise ValueError("STARTGG_API_KEY must be set in the environment variables or passed with --api-key.")

        return ApiCredentials(api_key=key)
