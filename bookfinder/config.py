"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Open Library
    SEARCH_URL = os.getenv("OPENLIBRARY_SEARCH_URL", "https://openlibrary.org/search.json")
    COVERS_URL = os.getenv("OPENLIBRARY_COVERS_URL", "https://covers.openlibrary.org")
    USER_AGENT = os.getenv("USER_AGENT", "BookFinder/0.1.0")

    # Defaults
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))

    # Favorites storage
    FAVORITES_KEY = os.getenv("FAVORITES_KEY", "bf_favorites")
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "file")
    FAVORITES_FILE = os.path.expanduser(
        os.getenv("FAVORITES_FILE", "~/.bookfinder/storage.json")
    )

    # Database (STORAGE_BACKEND=postgres)
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "bookfinder")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")

    @property
    def DATABASE_URL(self):
        """Build PostgreSQL connection string."""
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
