import logging

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from .config import SafeConfig
from .exceptions import AuthError, ConfigError, ParseError, ProxyError, ReceiverNotFoundError
from .feishu import EMPTY_TOKEN, FeishuClient
from .formatters import prepare_message
from .models import AlertMessage, WebhookMessage
from .services import FeishuWebhook

logger = logging.getLogger(__name__)


def result(ret, msg):
    # Sempre HTTP 200; o resultado vai no campo 'ret'
    return {'ret': ret, 'msg': msg}, 200


def authenticate(snapshot, receiver_name, access_token):
    receiver = snapshot.get_receiver(receiver_name)
    # comparação simples de strings, não é tempo constante
    if access_token != receiver.access_token:
        raise AuthError(f"invalid access_token({access_token})")
    return receiver


def create_app(safe_config=None, feishu_client=None, webhook_factory=FeishuWebhook):
    app = Flask(__name__)
    safe_config = safe_config or SafeConfig()
    feishu_client = feishu_client or FeishuClient()
    app.config['SAFE_CONFIG'] = safe_config

    @app.errorhandler(Exception)
    def unexpected_error(exc):
        if isinstance(exc, HTTPException):
            return exc
        logger.exception(f"erro inesperado em {request.path}: {exc}")
        return result('-1', f"unknown error {exc}")

    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok', 'service': 'alertmanager-feishu-proxy'}, 200

    @app.route('/-/reload', methods=['POST'])
    def reload():
        try:
            config = safe_config.reload_config()
        except ConfigError as exc:
            logger.error(f"failed to reload config, {exc}")
            return result('-1', f"reload failed: {exc}")
        return result('0', f"ok ({len(config.receivers)} receivers)")

    @app.route('/webhook', methods=['POST'])
    def webhook():
        try:
            alert_msg = AlertMessage.from_json(request.get_data(as_text=True))
        except ParseError as exc:
            logger.error(f"failed to parse WebHookMessage, {exc}")
            return result('-1', 'invalid data')

        access_token = request.args.get('access_token', '')
        receiver_name = request.args.get('receiver', '')

        # Um único snapshot por request: credenciais do app e receiver consistentes
        snapshot = safe_config.snapshot()
        try:
            receiver = authenticate(snapshot, receiver_name, access_token)
        except ReceiverNotFoundError:
            logger.error(f"receiver({receiver_name}) does not exists")
            return result('-1', 'receiver not exists')
        except AuthError as exc:
            logger.error(f"{exc} for receiver({receiver_name})")
            return result('-1', str(exc))

        webhook_message = WebhookMessage(alert_message=alert_msg)
        webhook_message.alert_hosts = {}

        mentions = receiver.mentions
        if mentions.is_empty():
            webhook_message.open_ids = []
        else:
            token = feishu_client.get_tenant_access_token(snapshot.app_id, snapshot.app_secret)
            if token == EMPTY_TOKEN:
                logger.warning(f"receiver({receiver_name}): enviando sem menções, tenant_access_token indisponível")
            webhook_message.open_ids = feishu_client.get_user_ids(token, mentions.mobiles, mentions.emails)

        prepare_message(webhook_message)
        try:
            webhook_factory(receiver.fsurl).send(webhook_message)
        except ProxyError as exc:
            logger.error(f"unknown error, receiver({receiver_name}): {exc}")
            return result('-1', f"unknown error {exc}")

        logger.info(
            f"receiver({receiver_name}): {len(alert_msg.alerts)} alertas enviados, "
            f"{len(webhook_message.open_ids)} menções"
        )
        return result('0', 'ok')

    return app
