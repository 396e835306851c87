from typing import Dict, List

from .constants import (
    CARD_MAX_ALERTS,
    CARD_TITLE_PREFIX_FIRING,
    CARD_TITLE_PREFIX_RESOLVED,
    SEVERITY_TEMPLATES,
)
from .models import Alert, WebhookMessage
from .utils import alert_host, format_timestamp, pick_first_nonempty


def detect_severity(message: WebhookMessage) -> str:
    am = message.alert_message
    if am.status == "resolved" or not message.firing_alerts:
        return "resolved"
    candidates = [am.common_labels.get('severity')]
    candidates.extend(a.labels.get('severity') for a in message.firing_alerts)
    severity = pick_first_nonempty(*candidates)
    return severity.lower() if severity else "default"


def prepare_message(message: WebhookMessage) -> WebhookMessage:
    """Preenche os campos derivados (firing/resolved, severidade, prefixo do título)."""
    message.split_alerts()
    message.severity = detect_severity(message)
    if message.firing_num > 0:
        message.title_prefix = CARD_TITLE_PREFIX_FIRING
    else:
        message.title_prefix = CARD_TITLE_PREFIX_RESOLVED
    return message


def build_title(message: WebhookMessage) -> str:
    am = message.alert_message
    alertname = pick_first_nonempty(
        am.group_labels.get('alertname'),
        am.common_labels.get('alertname'),
        *(a.labels.get('alertname') for a in am.alerts),
    ) or "Alerta"
    parts = [message.title_prefix, alertname]
    if message.firing_num:
        parts.append(f"({message.firing_num} firing)")
    return " ".join(p for p in parts if p)


def format_alert(alert: Alert, alert_hosts: Dict[str, str]) -> str:
    labels = alert.labels
    annotations = alert.annotations
    lines = [f"**{labels.get('alertname', 'Alerta')}** `{alert.status.upper() or 'UNKNOWN'}`"]

    host = alert_host(labels)
    if host:
        extra = alert_hosts.get(host)
        lines.append(f"**Host:** `{host}`" + (f" ({extra})" if extra else ""))

    description = pick_first_nonempty(
        annotations.get('description', '').replace('"', ''),
        annotations.get('summary'),
        annotations.get('message'),
    )
    if description:
        lines.append(f"**Descrição:** {description}")

    lines.append(f"**Início:** {format_timestamp(alert.starts_at)}")
    if not alert.is_firing:
        lines.append(f"**Fim:** {format_timestamp(alert.ends_at)}")

    # Labels relevantes além dos já exibidos
    shown = {'alertname', 'instance', 'host_ip', 'real_host', 'hostname', 'host', 'node_name'}
    extra_labels = [f"{k}={v}" for k, v in sorted(labels.items()) if k not in shown]
    if extra_labels:
        lines.append(f"**Labels:** {', '.join(extra_labels[:8])}")
    return "\n".join(lines)


def _div(content: str) -> Dict:
    return {"tag": "div", "text": {"tag": "lark_md", "content": content}}


def build_mentions(open_ids: List[str]) -> str:
    return " ".join(f"<at id={open_id}></at>" for open_id in open_ids)


def build_card_payload(message: WebhookMessage) -> Dict:
    """Monta o payload 'interactive' do bot customizado do Feishu."""
    style = SEVERITY_TEMPLATES.get(message.severity, SEVERITY_TEMPLATES['default'])
    elements: List[Dict] = []

    sections = [("🔥 Firing", message.firing_alerts), ("🟢 Resolved", message.resolved_alerts)]
    shown = 0
    for title, alerts in sections:
        if not alerts or shown >= CARD_MAX_ALERTS:
            continue
        elements.append(_div(f"**{title} ({len(alerts)})**"))
        for alert in alerts:
            if shown >= CARD_MAX_ALERTS:
                break
            elements.append(_div(format_alert(alert, message.alert_hosts)))
            elements.append({"tag": "hr"})
            shown += 1

    hidden = len(message.alert_message.alerts) - shown + message.alert_message.truncated_alerts
    if hidden > 0:
        elements.append(_div(f"... e mais {hidden} alertas omitidos"))

    if message.open_ids:
        elements.append(_div(build_mentions(message.open_ids)))

    if message.alert_message.external_url:
        elements.append({
            "tag": "action",
            "actions": [{
                "tag": "button",
                "text": {"tag": "plain_text", "content": "Abrir no Alertmanager"},
                "url": message.alert_message.external_url,
                "type": "default",
            }],
        })

    return {
        "msg_type": "interactive",
        "card": {
            "config": {"wide_screen_mode": True},
            "header": {
                "title": {"tag": "plain_text", "content": f"{style['emoji']} {build_title(message)}"},
                "template": style['template'],
            },
            "elements": elements,
        },
    }
