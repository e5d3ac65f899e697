"""Ledger store backed by Supabase's PostgREST endpoint.

Only the generic table operations the closing engine needs are exposed:
read everything, insert one row, upsert many rows by ``id`` and delete by
an equality filter. Every transport or HTTP error is re-raised as
``PersistenceFailure``.
"""

import json
import logging

import requests
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.serializers.json import DjangoJSONEncoder

from ..config import FinanceConfig
from ..exceptions import PersistenceFailure
from .supabase_jwt import generate_supabase_jwt

logger = logging.getLogger(__name__)


def get_setting_or_fail(key: str) -> str:
    value = getattr(settings, key, None)
    if not value:
        raise ImproperlyConfigured(f"A configuração '{key}' está em falta.")
    return value


class SupabaseLedgerStore:
    def __init__(self, subject="droneflow", role="authenticated", config=None, timeout=None):
        self.config = config or FinanceConfig.from_settings()
        self.subject = subject
        self.role = role
        self.timeout = timeout or getattr(settings, "SUPABASE_TIMEOUT", 15)

    def _headers(self, prefer=None) -> dict:
        api_key = get_setting_or_fail("SUPABASE_API_KEY")
        token = generate_supabase_jwt(subject=self.subject, role=self.role)
        headers = {
            "Authorization": f"Bearer {token}",
            "apikey": api_key,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(self, method, collection, *, params=None, payload=None, prefer=None):
        rest_url = get_setting_or_fail("SUPABASE_REST_URL").rstrip("/")
        url = f"{rest_url}/{self.config.table(collection)}"
        body = json.dumps(payload, cls=DjangoJSONEncoder) if payload is not None else None

        logger.info("🔗 %s %s", method, url)
        logger.debug("📦 Params: %s Payload: %s", params, body)

        try:
            resp = requests.request(
                method,
                url,
                headers=self._headers(prefer),
                params=params,
                data=body,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            text = e.response.text if e.response is not None else ""
            logger.error("❌ Erro HTTP %s em %s %s: %s", status, method, collection, text)
            raise PersistenceFailure(
                f"{method} {collection} failed with HTTP {status}: {text}",
                collection=collection,
                operation=method,
                status_code=status,
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error("❌ Erro de rede em %s %s: %s", method, collection, e)
            raise PersistenceFailure(
                f"{method} {collection} failed: {e}",
                collection=collection,
                operation=method,
            ) from e

        logger.info("✅ Resposta Supabase: %s", resp.status_code)
        if not resp.content:
            return []
        return resp.json()

    def list_all(self, collection: str) -> list[dict]:
        return self._request("GET", collection, params={"select": "*"})

    def insert(self, collection: str, record: dict) -> dict:
        rows = self._request("POST", collection, payload=[record], prefer="return=representation")
        return rows[0] if rows else record

    def upsert_many(self, collection: str, records: list[dict]) -> None:
        if not records:
            return
        self._request(
            "POST",
            collection,
            params={"on_conflict": "id"},
            payload=list(records),
            prefer="resolution=merge-duplicates,return=minimal",
        )

    def delete_by_key(self, collection: str, key: str, value) -> list[dict]:
        """Delete every row where ``key = value``; returns the deleted rows."""
        return self._request(
            "DELETE",
            collection,
            params={key: f"eq.{value}"},
            prefer="return=representation",
        )


def get_ledger_store(user=None) -> SupabaseLedgerStore:
    """Store for a web request (or the CLI when ``user`` is None)."""
    if user is None or not getattr(user, "is_authenticated", False):
        return SupabaseLedgerStore(subject="droneflow-cli", role="service_role")
    return SupabaseLedgerStore(subject=user.pk)
