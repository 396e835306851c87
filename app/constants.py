import os

# Configurações globais de ambiente
CONFIG_FILE = os.getenv("CONFIG_FILE", "config.yml")
LISTEN_ADDRESS = os.getenv("LISTEN_ADDRESS", ":8086")
DEBUG_MODE = os.getenv("DEBUG_MODE", "False").lower() == "true"

# Feishu Open API (para Lark use https://open.larksuite.com/open-apis)
FEISHU_OPEN_API_BASE = os.getenv("FEISHU_OPEN_API_BASE", "https://open.feishu.cn/open-apis")
TENANT_ACCESS_TOKEN_PATH = "/auth/v3/tenant_access_token/internal"
BATCH_GET_ID_PATH = "/contact/v3/users/batch_get_id"

# Timeouts das chamadas externas (segundos)
FEISHU_TOKEN_TIMEOUT_SECONDS = float(os.getenv("FEISHU_TOKEN_TIMEOUT_SECONDS", "5"))
FEISHU_LOOKUP_TIMEOUT_SECONDS = float(os.getenv("FEISHU_LOOKUP_TIMEOUT_SECONDS", "5"))
FEISHU_WEBHOOK_TIMEOUT_SECONDS = float(os.getenv("FEISHU_WEBHOOK_TIMEOUT_SECONDS", "5"))

# Cache do tenant_access_token (desligado: busca um token novo a cada request)
TENANT_TOKEN_CACHE_ENABLED = os.getenv("TENANT_TOKEN_CACHE_ENABLED", "false").lower() == "true"
# Margem antes do 'expire' informado pela API para renovar o token
TENANT_TOKEN_EXPIRY_MARGIN_SECONDS = int(os.getenv("TENANT_TOKEN_EXPIRY_MARGIN_SECONDS", "300"))

# Aparência do card enviado ao bot
CARD_TITLE_PREFIX_FIRING = os.getenv("CARD_TITLE_PREFIX_FIRING", "[FIRING]")
CARD_TITLE_PREFIX_RESOLVED = os.getenv("CARD_TITLE_PREFIX_RESOLVED", "[RESOLVED]")
CARD_MAX_ALERTS = int(os.getenv("CARD_MAX_ALERTS", "20"))

SEVERITY_TEMPLATES = {
    "critical": {"emoji": "🔥", "template": "red"},
    "error": {"emoji": "🚨", "template": "red"},
    "warning": {"emoji": "⚠️", "template": "orange"},
    "info": {"emoji": "ℹ️", "template": "blue"},
    "default": {"emoji": "🚧", "template": "orange"},
    "resolved": {"emoji": "🟢", "template": "green"},
}
