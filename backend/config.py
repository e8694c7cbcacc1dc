import os
from pathlib import Path
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# Logging
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

# GitHub REST API (the caller's own OAuth token is used per request)
GITHUB_API_URL = os.environ.get('GITHUB_API_URL', 'https://api.github.com')
GITHUB_REQUEST_TIMEOUT = float(os.environ.get('GITHUB_REQUEST_TIMEOUT', '15'))

# Files probed for dependency/manifest information, in this order
MANIFEST_FILENAMES = [
    'package.json',
    'requirements.txt',
    'pyproject.toml',
    'Cargo.toml',
    'pom.xml',
    'composer.json',
    'go.mod',
]

# AI provider credentials. Absence simply removes the provider from rotation.
GOOGLE_GEMINI_API_KEY = os.environ.get('GOOGLE_GEMINI_API_KEY', '')
MISTRAL_API_KEY = os.environ.get('MISTRAL_API_KEY', '')
BYTEZ_API_KEY = os.environ.get('BYTEZ_API_KEY', '')

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
MISTRAL_API_URL = "https://api.mistral.ai/v1"
BYTEZ_API_URL = "https://api.bytez.com/models/v2"

# Provider order is also the initial rotation order
AI_PROVIDERS = {
    "gemini": {
        "model": os.environ.get('GEMINI_MODEL', 'gemini-1.5-flash'),
        "name": "Google Gemini",
        "description": "Google Generative Language API",
        "credential": "GOOGLE_GEMINI_API_KEY",
    },
    "mistral": {
        "model": os.environ.get('MISTRAL_MODEL', 'mistral-large-latest'),
        "name": "Mistral",
        "description": "Mistral AI chat completions",
        "credential": "MISTRAL_API_KEY",
    },
    "bytez": {
        "model": os.environ.get('BYTEZ_MODEL', 'Qwen/Qwen2.5-Coder-7B-Instruct'),
        "name": "Qwen 2.5 Coder 7B (Bytez)",
        "description": "Qwen code-focused model hosted on Bytez",
        "credential": "BYTEZ_API_KEY",
    },
}

# Generation / retry policy
PROVIDER_REQUEST_TIMEOUT = float(os.environ.get('PROVIDER_REQUEST_TIMEOUT', '30'))
PROVIDER_MAX_RETRIES = int(os.environ.get('PROVIDER_MAX_RETRIES', '3'))
PROVIDER_RETRY_BASE_DELAY = float(os.environ.get('PROVIDER_RETRY_BASE_DELAY', '1.0'))
MAX_PROVIDER_ATTEMPTS = int(os.environ.get('MAX_PROVIDER_ATTEMPTS', '2'))
GENERATION_TIMEOUT = float(os.environ.get('GENERATION_TIMEOUT', '45'))
GENERATION_TEMPERATURE = 0.3
GENERATION_MAX_TOKENS = 4000

# Prompt size limits (characters)
MAX_README_CHARS = int(os.environ.get('MAX_README_CHARS', '8000'))
MAX_MANIFEST_CHARS = int(os.environ.get('MAX_MANIFEST_CHARS', '4000'))

# Cache (seconds)
DEFAULT_CACHE_TTL = 5 * 60
DOCS_CACHE_TTL = int(os.environ.get('DOCS_CACHE_TTL', str(30 * 60)))
REPO_CACHE_TTL = int(os.environ.get('REPO_CACHE_TTL', str(5 * 60)))
CACHE_CLEANUP_INTERVAL = int(os.environ.get('CACHE_CLEANUP_INTERVAL', str(10 * 60)))

# CORS
CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'http://localhost:3000').split(',')

# Rate limiting
RATE_LIMIT_PER_MIN = int(os.environ.get('RATE_LIMIT_PER_MIN', '60'))

# Request validation
MAX_REPO_PARAM_LENGTH = 100
