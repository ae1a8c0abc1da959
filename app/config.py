"""
Configuration settings for the RE_CLAIM.D site API
Values come from the environment (and a local .env file)
"""
import os
import tempfile
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

DEBUG = os.getenv('DEBUG', 'False') == 'True'

# Get mode (development or production)
MODE = os.getenv("MODE", "development")


def get_env_var(key: str, default: str = None) -> str:
    """Fetch an environment variable and raise an error if it's missing (unless default is provided)."""
    value = os.getenv(key, default)
    if value is None and default is None:
        raise ValueError(f"Missing environment variable: {key}")
    return value


# Database URL (Supabase Postgres). Empty means the in-memory content store is used.
DATABASE_URL = get_env_var("DATABASE_URL", "")

# SSL certificate for the hosted database, written to a file at runtime when provided
DB_SSL_CERT_CONTENT = get_env_var("DB_SSL_CERT", "")
DB_SSL_CERT_PATH = os.path.join(tempfile.gettempdir(), "db-ca.crt") if DB_SSL_CERT_CONTENT else ""

if DB_SSL_CERT_CONTENT:
    with open(DB_SSL_CERT_PATH, "w") as f:
        f.write(DB_SSL_CERT_CONTENT)

# CORS Configuration
# Include both localhost and 127.0.0.1 as browsers treat them as different origins
CORS_ALLOWED_ORIGINS: List[str] = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
    "https://reclaimd.com",
    "https://www.reclaimd.com",
]

CORS_ALLOW_CREDENTIALS = True

# Paths used by the authorization gate
LOGIN_PATH = "/auth/login"
POSTS_ADMIN_PATH = "/admin/posts"

# Values shipped in .env templates; a client built from them can never work
SUPABASE_PLACEHOLDER_VALUES = {
    "your_supabase_project_url",
    "https://your-project.supabase.co",
    "https://placeholder.supabase.co",
    "your_supabase_anon_key",
    "your-anon-key-here",
    "placeholder-key",
}

SUPABASE_SETUP_STEPS: List[str] = [
    "Go to https://supabase.com/dashboard",
    "Select your project",
    "Go to Settings > API",
    "Copy your Project URL and anon/public key",
    "Update the .env file with these values and restart the server",
]


# Supabase Configuration
def get_supabase_url() -> str:
    """Get Supabase URL based on mode"""
    if MODE == "production":
        return os.getenv("PRODUCTION_SUPABASE_URL", "")
    return os.getenv("STAGING_SUPABASE_URL", "")


def get_supabase_anon_key() -> str:
    """Get Supabase public (anon) key based on mode"""
    if MODE == "production":
        return os.getenv("PRODUCTION_SUPABASE_ANON_KEY", "")
    return os.getenv("STAGING_SUPABASE_ANON_KEY", "")


def get_supabase_configuration_problem() -> Optional[str]:
    """Describe what is wrong with the Supabase settings, or None when they look usable."""
    url = get_supabase_url().strip()
    key = get_supabase_anon_key().strip()
    if not url or not key:
        return "Supabase URL or anon key is not set"
    if url in SUPABASE_PLACEHOLDER_VALUES or key in SUPABASE_PLACEHOLDER_VALUES:
        return "Supabase URL or anon key still has a placeholder value"
    return None


def get_cms_backend() -> str:
    """Content store to use: "database" when a database URL is configured, else "memory"."""
    backend = os.getenv("CMS_BACKEND", "").strip().lower()
    if backend:
        return backend
    return "database" if DATABASE_URL else "memory"


def get_default_profile_role() -> str:
    """Role given to profiles created on first sign-in or sign-up"""
    return os.getenv("DEFAULT_PROFILE_ROLE", "author").strip().lower()


def get_backend_timeout() -> float:
    """Seconds to wait for a Supabase call before giving up"""
    return float(os.getenv("BACKEND_TIMEOUT_SECONDS", "10"))


AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "False") == "True"

# Cookies standing in for the browser's local storage
NEWSLETTER_POPUP_COOKIE = "hasSeenNewsletterPopup"
SUBSCRIBED_EMAIL_COOKIE = "subscribedEmail"
# Ten years; the flags are meant to never expire
PERSISTENT_COOKIE_MAX_AGE = 10 * 365 * 24 * 60 * 60
