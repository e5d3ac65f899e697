# finance/utils/supabase_jwt.py
import datetime
from typing import Any, Dict

import jwt
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


def generate_supabase_jwt(subject: str, role: str = "authenticated",
                          expires_minutes: int = 60) -> str:
    secret = getattr(settings, "SUPABASE_JWT_SECRET", None)
    if not secret:
        raise ImproperlyConfigured("SUPABASE_JWT_SECRET is not configured.")

    now = datetime.datetime.now(datetime.timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(subject),
        "role": role,             # PostgREST switches to this database role
        "iat": now,
        "exp": now + datetime.timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, secret, algorithm="HS256")
