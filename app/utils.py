def _is_meaningful(value):
    if value is None:
        return False
    v = str(value).strip()
    if v == "":
        return False
    lowered = v.lower()
    return lowered not in {"n/a", "none", "null", "unknown", "-", "localhost", "0.0.0.0"}


def pick_first_nonempty(*candidates):
    for c in candidates:
        if _is_meaningful(c):
            return str(c).strip()
    return None


def _strip_port(host_or_ip: str) -> str:
    if not host_or_ip:
        return host_or_ip
    # IPv6 entre colchetes: [::1]:9100
    if host_or_ip.startswith("[") and "]" in host_or_ip:
        return host_or_ip[1:host_or_ip.index("]")]
    if host_or_ip.count(":") == 1:
        return host_or_ip.split(":")[0]
    return host_or_ip


def format_timestamp(timestamp_str):
    if not timestamp_str or timestamp_str == 'N/A':
        return 'N/A'
    # Alertmanager usa 0001-01-01T00:00:00Z para "sem fim"
    if timestamp_str.startswith('0001-01-01'):
        return 'N/A'
    clean_timestamp = timestamp_str.replace('T', ' ').replace('Z', '')
    # corta frações de segundo: 2025-10-08 16:29:55.933582749
    if '.' in clean_timestamp:
        clean_timestamp = clean_timestamp.split('.')[0]
    return clean_timestamp


def alert_host(labels):
    """Host de origem do alerta a partir dos labels, sem a porta."""
    host = pick_first_nonempty(
        labels.get('host_ip'),
        labels.get('real_host'),
        labels.get('instance'),
        labels.get('hostname'),
        labels.get('host'),
        labels.get('node_name'),
    )
    return _strip_port(host) if host else None
