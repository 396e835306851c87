import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import requests

from .cache import TTLCache
from .constants import (
    BATCH_GET_ID_PATH,
    FEISHU_LOOKUP_TIMEOUT_SECONDS,
    FEISHU_OPEN_API_BASE,
    FEISHU_TOKEN_TIMEOUT_SECONDS,
    TENANT_ACCESS_TOKEN_PATH,
    TENANT_TOKEN_CACHE_ENABLED,
    TENANT_TOKEN_EXPIRY_MARGIN_SECONDS,
)
from .exceptions import DecodeError, TransportError

logger = logging.getLogger(__name__)


class Token(str):
    """tenant_access_token da Open API. A string vazia é o token inválido."""

    @property
    def valid(self) -> bool:
        return bool(self)


EMPTY_TOKEN = Token("")


def _require(data: Dict[str, Any], key: str, kind, where: str):
    if key not in data:
        raise DecodeError(f"{where}: campo '{key}' ausente")
    value = data[key]
    # bool é subclasse de int e não serve como código
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DecodeError(f"{where}: campo '{key}' com tipo {type(value).__name__}")
    return value


@dataclass
class TenantTokenResponse:
    tenant_access_token: str
    expire: Optional[int] = None
    code: int = 0
    msg: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "TenantTokenResponse":
        where = "tenant_access_token"
        if not isinstance(data, dict):
            raise DecodeError(f"{where}: corpo não é um objeto JSON")
        code = data.get("code", 0)
        msg = data.get("msg", "")
        if "tenant_access_token" not in data:
            raise DecodeError(f"{where}: campo 'tenant_access_token' ausente (code={code}, msg={msg})")
        token = _require(data, "tenant_access_token", str, where)
        expire = data.get("expire")
        if expire is not None and (not isinstance(expire, int) or isinstance(expire, bool)):
            raise DecodeError(f"{where}: campo 'expire' com tipo {type(expire).__name__}")
        return cls(tenant_access_token=token, expire=expire, code=code, msg=msg)


@dataclass
class BatchUser:
    user_id: str = ""
    mobile: str = ""
    email: str = ""


@dataclass
class BatchGetIdResponse:
    code: int
    msg: str
    user_list: List[BatchUser]

    @property
    def ok(self) -> bool:
        return self.code == 0 and self.msg == "success"

    @classmethod
    def from_dict(cls, data: Any) -> "BatchGetIdResponse":
        where = "batch_get_id"
        if not isinstance(data, dict):
            raise DecodeError(f"{where}: corpo não é um objeto JSON")
        code = _require(data, "code", int, where)
        msg = _require(data, "msg", str, where)
        users: List[BatchUser] = []
        payload = data.get("data") or {}
        if not isinstance(payload, dict):
            raise DecodeError(f"{where}: campo 'data' não é um objeto")
        user_list = payload.get("user_list") or []
        if not isinstance(user_list, list):
            raise DecodeError(f"{where}: campo 'data.user_list' não é uma lista")
        for item in user_list:
            if not isinstance(item, dict):
                raise DecodeError(f"{where}: item de user_list inválido: {item!r}")
            user_id = item.get("user_id") or ""
            if not isinstance(user_id, str):
                raise DecodeError(f"{where}: user_id com tipo {type(user_id).__name__}")
            users.append(BatchUser(
                user_id=user_id,
                mobile=str(item.get("mobile") or ""),
                email=str(item.get("email") or ""),
            ))
        return cls(code=code, msg=msg, user_list=users)


class FeishuClient:
    """Cliente da Open API do Feishu usado para resolver menções.

    As duas operações públicas nunca levantam exceção: qualquer falha é
    registrada no log e vira um resultado vazio, para que a entrega do alerta
    siga sem as menções.
    """

    def __init__(
        self,
        base_url: str = FEISHU_OPEN_API_BASE,
        token_timeout: float = FEISHU_TOKEN_TIMEOUT_SECONDS,
        lookup_timeout: float = FEISHU_LOOKUP_TIMEOUT_SECONDS,
        cache_tokens: bool = TENANT_TOKEN_CACHE_ENABLED,
        expiry_margin: int = TENANT_TOKEN_EXPIRY_MARGIN_SECONDS,
    ):
        self.base_url = base_url.rstrip('/')
        self.token_timeout = token_timeout
        self.lookup_timeout = lookup_timeout
        self.expiry_margin = expiry_margin
        self.token_cache: Optional[TTLCache[Token]] = TTLCache() if cache_tokens else None

    # ---------- HTTP helpers ----------

    def _post_json(self, path: str, body: Dict[str, Any], timeout: float, headers: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = requests.post(url, json=body, headers=headers, timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(f"POST {path}: {exc}") from exc
        try:
            return resp.json()
        except ValueError as exc:
            raise DecodeError(f"POST {path}: corpo não é JSON: {exc}") from exc

    # ---------- Public API ----------

    def fetch_tenant_access_token(self, app_id: str, app_secret: str) -> TenantTokenResponse:
        """Versão estrita: levanta TransportError/DecodeError."""
        data = self._post_json(
            TENANT_ACCESS_TOKEN_PATH,
            {"app_id": app_id, "app_secret": app_secret},
            timeout=self.token_timeout,
        )
        return TenantTokenResponse.from_dict(data)

    def get_tenant_access_token(self, app_id: str, app_secret: str) -> Token:
        # chave (app_id, app_secret): segredo rotacionado não reaproveita token antigo
        cache_key = (app_id, app_secret)
        if self.token_cache is not None:
            cached = self.token_cache.get(cache_key)
            if cached:
                return cached
        try:
            info = self.fetch_tenant_access_token(app_id, app_secret)
        except (TransportError, DecodeError) as exc:
            logger.error(f"failed to get tenant_access_token, {exc}")
            return EMPTY_TOKEN

        token = Token(info.tenant_access_token)
        if self.token_cache is not None and token and info.expire:
            self.token_cache.set(cache_key, token, info.expire - self.expiry_margin)
        return token

    def get_user_ids(self, token: Token, mobiles: Iterable[str], emails: Iterable[str]) -> List[str]:
        """Resolve telefones e e-mails em user_ids, na ordem devolvida pela API."""
        mobiles = list(mobiles or [])
        emails = list(emails or [])
        if not mobiles and not emails:
            return []
        if not token:
            logger.warning("batch_get_id ignorado: tenant_access_token vazio")
            return []

        try:
            data = self._post_json(
                BATCH_GET_ID_PATH,
                {"mobiles": mobiles, "emails": emails},
                timeout=self.lookup_timeout,
                headers={"Authorization": f"Bearer {token}"},
            )
            info = BatchGetIdResponse.from_dict(data)
        except TransportError as exc:
            logger.error(f"failed to request batch_get_id, {exc}")
            return []
        except DecodeError as exc:
            logger.error(f"failed to decode batch_get_id body, {exc}")
            return []

        if not info.ok:
            logger.error(f"batch_get_id rejeitado: code={info.code}, msg={info.msg}")
            return []

        resolved = [user.user_id for user in info.user_list if user.user_id]
        logger.debug(f"batch_get_id resolveu {len(resolved)} de {len(mobiles) + len(emails)} identificadores")
        return resolved
