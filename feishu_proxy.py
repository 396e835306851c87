"""Entrada WSGI (gunicorn feishu_proxy:app). Lê o arquivo apontado por CONFIG_FILE."""
from app.config import SafeConfig
from app.constants import CONFIG_FILE
from app.controller import create_app

safe_config = SafeConfig(config_file=CONFIG_FILE)
safe_config.reload_config()

app = create_app(safe_config)
