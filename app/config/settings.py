# app/config/settings.py
# Runtime configuration for the TaskFlow API

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Application settings read from the environment"""

    DATABASE = {
        'url': os.getenv('DATABASE_URL', 'sqlite:///./taskflow.db'),
        'echo': _flag('DB_ECHO', 'false'),
        'sslmode': os.getenv('DB_SSLMODE', 'require'),
    }

    # Session tokens and password policy of the identity provider
    IDENTITY = {
        'secret_key': os.getenv('SECRET_KEY', 'change-me-in-production'),
        'algorithm': os.getenv('ALGORITHM', 'HS256'),
        'access_token_expire_minutes': int(os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', 60 * 24)),
        'password_reset_expire_minutes': int(os.getenv('PASSWORD_RESET_EXPIRE_MINUTES', 60)),
        'min_password_length': int(os.getenv('MIN_PASSWORD_LENGTH', 6)),
    }

    # Directory store query capabilities
    STORE = {
        # False when the backing store cannot serve a filtered query with a sort on created_at
        'sorted_assignee_query': _flag('SORTED_ASSIGNEE_QUERY', 'true'),
    }

    NOTIFICATIONS = {
        'delay_ms': int(os.getenv('NOTIFICATION_DELAY_MS', 800)),
        'sender': os.getenv('NOTIFICATION_SENDER', 'noreply@taskflow.com'),
    }

    SCHEDULER = {
        'overdue_sweep_minutes': int(os.getenv('OVERDUE_SWEEP_MINUTES', 30)),
    }

    # uvicorn options used by start_server.py
    SERVER = {
        'host': os.getenv('HOST', '0.0.0.0'),
        'port': int(os.getenv('PORT', 8000)),
        'reload': _flag('RELOAD', 'false'),
    }

    LOGGING = {
        'level': os.getenv('LOG_LEVEL', 'INFO').upper(),
    }

    @classmethod
    def cors_origins(cls) -> List[str]:
        """Allowed CORS origins, comma separated in CORS_ORIGINS"""
        raw = os.getenv(
            'CORS_ORIGINS',
            'http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000',
        )
        return [origin.strip() for origin in raw.split(',') if origin.strip()]

    @classmethod
    def is_sqlite(cls) -> bool:
        return cls.DATABASE['url'].startswith('sqlite')
