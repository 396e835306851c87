import logging

import requests

from .constants import FEISHU_WEBHOOK_TIMEOUT_SECONDS
from .exceptions import SendError, TransportError
from .formatters import build_card_payload
from .models import WebhookMessage

logger = logging.getLogger(__name__)


def _bot_error(body):
    # Bots novos respondem {code, msg}; os antigos {StatusCode, StatusMessage}
    if not isinstance(body, dict):
        return None
    code = body.get("code", body.get("StatusCode", 0))
    if code in (0, None):
        return None
    msg = body.get("msg") or body.get("StatusMessage") or "sem mensagem"
    return f"code={code}, msg={msg}"


def send_feishu_payload(webhook_url, payload, timeout=FEISHU_WEBHOOK_TIMEOUT_SECONDS):
    """Envia o payload ao bot e valida o código de aplicação da resposta.

    As mensagens de erro nunca incluem a URL: o id do hook é a credencial do bot.
    """
    if not webhook_url:
        raise SendError("receiver sem fsurl configurada")
    try:
        resp = requests.post(webhook_url, json=payload, timeout=timeout)
    except requests.RequestException as exc:
        raise TransportError(f"falha ao contatar o bot ({type(exc).__name__})") from exc

    logger.debug(f"Feishu response: {resp.status_code} {resp.text[:500]}")
    try:
        body = resp.json()
    except ValueError:
        # alguns proxies respondem 200 sem corpo JSON
        body = None

    error = _bot_error(body)
    if not resp.ok:
        if error:
            raise SendError(f"feishu http {resp.status_code}, {error}")
        raise TransportError(f"HTTP {resp.status_code} {resp.reason or ''}".strip())
    if error:
        raise SendError(f"feishu {error}")
    return resp


class FeishuWebhook:
    def __init__(self, url, timeout=FEISHU_WEBHOOK_TIMEOUT_SECONDS):
        self.url = url
        self.timeout = timeout

    def send(self, message: WebhookMessage):
        return send_feishu_payload(self.url, build_card_payload(message), timeout=self.timeout)
