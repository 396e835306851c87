import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

import yaml

from .exceptions import ConfigError, ReceiverNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Mentions:
    mobiles: Tuple[str, ...] = ()
    emails: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not self.mobiles and not self.emails


@dataclass(frozen=True)
class ReceiverConfig:
    access_token: str = ""
    fsurl: str = ""
    mentions: Mentions = field(default_factory=Mentions)


@dataclass(frozen=True)
class Config:
    app_id: str = ""
    app_secret: str = ""
    receivers: Mapping[str, ReceiverConfig] = field(default_factory=dict)

    def get_receiver(self, name: str) -> ReceiverConfig:
        receiver = self.receivers.get(name)
        if receiver is None:
            raise ReceiverNotFoundError(name)
        return receiver


def _expect_str(value, where: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"{where}: esperado texto, recebido {type(value).__name__}")
    return value


def _expect_str_list(value, where: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigError(f"{where}: esperado lista, recebido {type(value).__name__}")
    items = []
    for i, item in enumerate(value):
        # telefones escritos sem aspas chegam como int no YAML
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            raise ConfigError(f"{where}[{i}]: valor inválido {item!r}")
        items.append(str(item))
    return tuple(items)


def _parse_receiver(name: str, raw) -> ReceiverConfig:
    where = f"receivers.{name}"
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: esperado mapeamento")
    mentions_raw = raw.get("mentions")
    if mentions_raw is None:
        mentions = Mentions()
    elif isinstance(mentions_raw, dict):
        mentions = Mentions(
            mobiles=_expect_str_list(mentions_raw.get("mobiles"), f"{where}.mentions.mobiles"),
            emails=_expect_str_list(mentions_raw.get("emails"), f"{where}.mentions.emails"),
        )
    else:
        raise ConfigError(f"{where}.mentions: esperado mapeamento")
    return ReceiverConfig(
        access_token=_expect_str(raw.get("access_token"), f"{where}.access_token"),
        fsurl=_expect_str(raw.get("fsurl"), f"{where}.fsurl"),
        mentions=mentions,
    )


def parse_config(text: str) -> Config:
    """Monta um Config completo a partir do YAML; qualquer erro vira ConfigError."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML inválido: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("a raiz da configuração deve ser um mapeamento")

    receivers_raw = data.get("receivers")
    if receivers_raw is None:
        receivers_raw = {}
    if not isinstance(receivers_raw, dict):
        raise ConfigError("receivers: esperado mapeamento")

    receivers = {str(name): _parse_receiver(str(name), raw) for name, raw in receivers_raw.items()}
    return Config(
        app_id=_expect_str(data.get("app_id"), "app_id"),
        app_secret=_expect_str(data.get("app_secret"), "app_secret"),
        receivers=MappingProxyType(receivers),
    )


def load_config(config_file: str) -> Config:
    try:
        with open(config_file, 'r', encoding='utf-8') as fp:
            raw = fp.read()
    except OSError as exc:
        raise ConfigError(f"falha ao ler {config_file}: {exc}") from exc
    return parse_config(raw)


class SafeConfig:
    """Registro de receivers com recarga atômica.

    O snapshot ativo é um Config imutável. Leitores pegam a referência atual
    sem lock; a recarga monta um Config novo por inteiro e só então troca a
    referência, sob um lock que serializa apenas os escritores.
    """

    def __init__(self, config: Optional[Config] = None, config_file: Optional[str] = None):
        self._config = config or Config()
        self._write_lock = threading.Lock()
        self.config_file = config_file

    def snapshot(self) -> Config:
        return self._config

    def reload_config(self, config_file: Optional[str] = None) -> Config:
        """Carrega o arquivo e troca o snapshot. Em caso de erro o anterior permanece."""
        path = config_file or self.config_file
        if not path:
            raise ConfigError("nenhum arquivo de configuração informado")
        config = load_config(path)
        with self._write_lock:
            self._config = config
            self.config_file = path
        logger.info(f"Configuração carregada de {path}: {len(config.receivers)} receivers")
        return config

    def get_config_by_name(self, name: str) -> ReceiverConfig:
        return self._config.get_receiver(name)
