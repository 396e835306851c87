import logging
import signal
import sys

import click

from app.config import SafeConfig
from app.constants import CONFIG_FILE, DEBUG_MODE, LISTEN_ADDRESS
from app.controller import create_app
from app.exceptions import ConfigError

logger = logging.getLogger("alertmanager-feishu")


def parse_listen_address(address):
    """':8086' -> ('0.0.0.0', 8086); 'host:port' -> ('host', port)."""
    host, sep, port = address.rpartition(':')
    if not sep or not port.isdigit():
        raise click.BadParameter(f"endereço inválido: {address!r}", param_hint="--web.listen-address")
    return (host.strip('[]') or '0.0.0.0'), int(port)


def install_reload_handler(safe_config):
    def _on_sighup(signum, frame):
        try:
            safe_config.reload_config()
        except ConfigError as exc:
            logger.error(f"failed to reload config file, {exc}")

    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, _on_sighup)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--config.file", "-c", "config_file", default=CONFIG_FILE, show_default=True,
              help="configuration file path.")
@click.option("--web.listen-address", "-p", "listen_address", default=LISTEN_ADDRESS, show_default=True,
              help="Address to listen on")
@click.option("--debug", is_flag=True, default=DEBUG_MODE, help="Logs em nível DEBUG.")
def main(config_file, listen_address, debug):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    host, port = parse_listen_address(listen_address)

    safe_config = SafeConfig(config_file=config_file)
    # load config first time
    try:
        safe_config.reload_config()
    except ConfigError as exc:
        logger.critical(f"failed to load config file, {exc}")
        sys.exit(1)

    install_reload_handler(safe_config)
    app = create_app(safe_config)
    app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)


if __name__ == '__main__':
    main()
