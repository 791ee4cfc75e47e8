from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Optional
from urllib.parse import quote_plus

class Settings(BaseSettings):
    """
    Settings for the Tutor Booking API.

    Do not edit the defaults to point at a real cluster.
    Instead, create a .env file in the root directory of the project
    and specify the settings you would like to change there.
    For example, to use a hosted MongoDB cluster add:
    - DB_USER=...
    - DB_PASS=...
    - DB_CLUSTER=mycluster.abcde.mongodb.net

    or give the full connection string directly:
    - MONGO_URI=mongodb://localhost:27017

    SUMMARY:
    - Override settings (if needed) using a .env file
    - Never push the .env file to GitHub (it should be in .gitignore)
    - Without any database settings the API connects to a local mongod
    """

    # Application settings
    app_name: str = "Tutor Booking API"
    app_version: str = "0.1.0"
    app_host: str = "0.0.0.0"
    app_port: int = 3000

    # Logs settings
    logs_dir: str = "logs"

    # Database settings
    mongo_uri: Optional[str] = None
    db_user: Optional[str] = None
    db_pass: Optional[str] = None
    db_cluster: str = "localhost"
    db_name: str = "tutorsDB"

    # CORS settings
    cors_origins: List[str] = ["*"]

    # Load settings from .env file
    model_config = SettingsConfigDict(env_file=".env")

    def mongo_connection_uri(self) -> str:
        """Return the connection string the store client should use."""
        if self.mongo_uri:
            return self.mongo_uri
        if self.db_user and self.db_pass:
            return (
                f"mongodb+srv://{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}"
                f"@{self.db_cluster}/?retryWrites=true&w=majority"
            )
        return "mongodb://localhost:27017"

@lru_cache() # Cache settings to avoid reading .env file multiple times
def get_settings():
    """
    Use this function as a dependency to get the settings object.
    Tests can inject a different settings object through dependency overrides.
    """
    return Settings()
