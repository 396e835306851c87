"""Modelos do webhook do Alertmanager e da mensagem enviada ao Feishu.

Referência do formato de entrada:
https://prometheus.io/docs/alerting/latest/notifications/
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .exceptions import ParseError


def _str_map(value: Any, where: str) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"{where}: esperado objeto")
    result = {}
    for k, v in value.items():
        if v is None:
            v = ""
        elif isinstance(v, (dict, list)):
            raise ParseError(f"{where}.{k}: esperado valor escalar")
        elif isinstance(v, bool):
            v = "true" if v else "false"
        result[str(k)] = str(v)
    return result


def _str_field(data: Dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ParseError(f"{where}.{key}: esperado texto")
    return value


@dataclass
class Alert:
    status: str = ""
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    starts_at: str = ""
    ends_at: str = ""
    generator_url: str = ""
    fingerprint: str = ""

    @classmethod
    def from_dict(cls, data: Any, where: str = "alert") -> "Alert":
        if not isinstance(data, dict):
            raise ParseError(f"{where}: esperado objeto")
        return cls(
            status=_str_field(data, "status", where),
            labels=_str_map(data.get("labels"), f"{where}.labels"),
            annotations=_str_map(data.get("annotations"), f"{where}.annotations"),
            starts_at=_str_field(data, "startsAt", where),
            ends_at=_str_field(data, "endsAt", where),
            generator_url=_str_field(data, "generatorURL", where),
            fingerprint=_str_field(data, "fingerprint", where),
        )

    @property
    def is_firing(self) -> bool:
        return self.status == "firing"


@dataclass
class AlertMessage:
    version: str = ""
    group_key: str = ""
    truncated_alerts: int = 0
    status: str = ""
    receiver: str = ""
    group_labels: Dict[str, str] = field(default_factory=dict)
    common_labels: Dict[str, str] = field(default_factory=dict)
    common_annotations: Dict[str, str] = field(default_factory=dict)
    external_url: str = ""
    alerts: List[Alert] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "AlertMessage":
        where = "message"
        if not isinstance(data, dict):
            raise ParseError("o corpo deve ser um objeto JSON")
        alerts_raw = data.get("alerts")
        if alerts_raw is None:
            alerts_raw = []
        if not isinstance(alerts_raw, list):
            raise ParseError("alerts: esperado lista")
        truncated = data.get("truncatedAlerts", 0)
        if truncated is None:
            truncated = 0
        if not isinstance(truncated, int) or isinstance(truncated, bool):
            raise ParseError("truncatedAlerts: esperado inteiro")
        return cls(
            version=_str_field(data, "version", where),
            group_key=_str_field(data, "groupKey", where),
            truncated_alerts=truncated,
            status=_str_field(data, "status", where),
            receiver=_str_field(data, "receiver", where),
            group_labels=_str_map(data.get("groupLabels"), "groupLabels"),
            common_labels=_str_map(data.get("commonLabels"), "commonLabels"),
            common_annotations=_str_map(data.get("commonAnnotations"), "commonAnnotations"),
            external_url=_str_field(data, "externalURL", where),
            alerts=[Alert.from_dict(a, f"alerts[{i}]") for i, a in enumerate(alerts_raw)],
        )

    @classmethod
    def from_json(cls, raw) -> "AlertMessage":
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise ParseError(f"JSON inválido: {exc}") from exc
        return cls.from_dict(data)


@dataclass
class WebhookMessage:
    alert_message: AlertMessage
    open_ids: List[str] = field(default_factory=list)
    alert_hosts: Dict[str, str] = field(default_factory=dict)
    firing_alerts: List[Alert] = field(default_factory=list)
    resolved_alerts: List[Alert] = field(default_factory=list)
    title_prefix: str = ""
    firing_num: int = 0
    severity: str = ""

    def split_alerts(self) -> "WebhookMessage":
        self.firing_alerts = [a for a in self.alert_message.alerts if a.is_firing]
        self.resolved_alerts = [a for a in self.alert_message.alerts if not a.is_firing]
        self.firing_num = len(self.firing_alerts)
        return self
