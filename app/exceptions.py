"""Exceções do proxy Alertmanager -> Feishu."""


class ProxyError(Exception):
    """Base de todas as exceções do proxy."""


class ConfigError(ProxyError):
    """Arquivo de configuração ilegível ou com estrutura inválida."""


class ReceiverNotFoundError(ProxyError):
    """Receiver não declarado na configuração ativa."""

    def __init__(self, name):
        super().__init__(f"no credentials found for receiver {name}")
        self.name = name


class AuthError(ProxyError):
    """access_token apresentado não confere com o do receiver."""


class TransportError(ProxyError):
    """Falha de rede ou status HTTP não-2xx ao chamar a API externa."""


class DecodeError(ProxyError):
    """Resposta da API externa sem os campos esperados ou com tipos errados."""


class SendError(ProxyError):
    """O webhook do bot respondeu com código de erro de aplicação."""


class ParseError(ProxyError):
    """Corpo do webhook recebido não é um payload válido do Alertmanager."""
