#!/usr/bin/env python3
import json
import os
import sys
import unittest
from unittest.mock import patch

import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.dirname(__file__))

from app.exceptions import ParseError, SendError, TransportError
from app.formatters import build_card_payload, build_mentions, build_title, prepare_message
from app.models import AlertMessage, WebhookMessage
from app.services import FeishuWebhook, send_feishu_payload
from app.utils import _strip_port, alert_host, format_timestamp
from helpers import json_response, real_response, text_response


def make_alert(name, status='firing', severity='warning', instance='10.0.0.1:9100'):
    return {
        "status": status,
        "labels": {"alertname": name, "instance": instance, "severity": severity},
        "annotations": {"description": f"\"{name}\" disparou"},
        "startsAt": "2025-10-08T14:33:30Z",
        "endsAt": "2025-10-08T16:29:55.933582749Z" if status == 'resolved' else "0001-01-01T00:00:00Z",
    }


class TestAlertMessageParsing(unittest.TestCase):
    def test_parses_alertmanager_payload(self):
        msg = AlertMessage.from_json(json.dumps({
            "version": "4",
            "status": "firing",
            "truncatedAlerts": 2,
            "groupLabels": {"alertname": "DiskFull"},
            "alerts": [make_alert("DiskFull")],
        }))
        self.assertEqual(msg.version, "4")
        self.assertEqual(msg.truncated_alerts, 2)
        self.assertEqual(msg.alerts[0].labels['instance'], '10.0.0.1:9100')
        self.assertTrue(msg.alerts[0].is_firing)

    def test_empty_object_is_valid(self):
        msg = AlertMessage.from_json("{}")
        self.assertEqual(msg.alerts, [])

    def test_label_values_are_normalized(self):
        msg = AlertMessage.from_dict({
            "commonLabels": {"team": None, "page": True, "replicas": 3},
            "alerts": [{"labels": {"alertname": "X", "cluster": None}}],
        })
        self.assertEqual(msg.common_labels, {"team": "", "page": "true", "replicas": "3"})
        self.assertEqual(msg.alerts[0].labels["cluster"], "")

    def test_nested_label_values_are_rejected(self):
        for body in ({"commonLabels": {"team": {"name": "ops"}}},
                     {"alerts": [{"annotations": {"runbook": ["a", "b"]}}]}):
            with self.subTest(body=body):
                with self.assertRaises(ParseError):
                    AlertMessage.from_dict(body)

    def test_rejects_wrong_types(self):
        for raw in ('', 'null', '"texto"', '{"alerts": {}}', '{"alerts": [1]}',
                    '{"status": 1}', '{"commonLabels": []}', '{"truncatedAlerts": "2"}'):
            with self.subTest(raw=raw):
                with self.assertRaises(ParseError):
                    AlertMessage.from_json(raw)


class TestCardPayload(unittest.TestCase):
    def build(self, body, open_ids=None):
        message = WebhookMessage(alert_message=AlertMessage.from_dict(body), open_ids=open_ids or [])
        return prepare_message(message)

    def test_firing_card(self):
        message = self.build({
            "status": "firing",
            "groupLabels": {"alertname": "DiskFull"},
            "commonLabels": {"severity": "critical"},
            "externalURL": "http://alertmanager:9093",
            "alerts": [make_alert("DiskFull"), make_alert("DiskFull", status='resolved')],
        }, open_ids=['ou_1'])

        self.assertEqual(message.firing_num, 1)
        self.assertEqual(len(message.resolved_alerts), 1)
        self.assertEqual(message.severity, 'critical')
        self.assertEqual(build_title(message), '[FIRING] DiskFull (1 firing)')

        card = build_card_payload(message)['card']
        self.assertEqual(card['header']['template'], 'red')
        text = json.dumps(card, ensure_ascii=False)
        self.assertIn('`10.0.0.1`', text)
        self.assertIn('2025-10-08 16:29:55', text)
        self.assertIn('<at id=ou_1></at>', text)
        self.assertEqual(card['elements'][-1]['actions'][0]['url'], 'http://alertmanager:9093')

    def test_resolved_card(self):
        message = self.build({"status": "resolved", "alerts": [make_alert("HighLoad", status='resolved')]})
        self.assertEqual(message.severity, 'resolved')
        self.assertEqual(build_title(message), '[RESOLVED] HighLoad')
        self.assertEqual(build_card_payload(message)['card']['header']['template'], 'green')

    def test_truncated_alerts_are_reported(self):
        message = self.build({"status": "firing", "truncatedAlerts": 3, "alerts": [make_alert("A")]})
        text = json.dumps(build_card_payload(message), ensure_ascii=False)
        self.assertIn('mais 3 alertas omitidos', text)

    def test_mentions(self):
        self.assertEqual(build_mentions(['ou_1', 'ou_2']), '<at id=ou_1></at> <at id=ou_2></at>')
        self.assertEqual(build_mentions([]), '')


class TestUtils(unittest.TestCase):
    def test_strip_port(self):
        self.assertEqual(_strip_port('10.0.0.1:9100'), '10.0.0.1')
        self.assertEqual(_strip_port('[::1]:9100'), '::1')
        self.assertEqual(_strip_port('2001:db8::1'), '2001:db8::1')
        self.assertEqual(alert_host({'instance': 'localhost:9100', 'hostname': 'db-01'}), 'localhost')
        self.assertIsNone(alert_host({'instance': 'N/A'}))

    def test_format_timestamp(self):
        self.assertEqual(format_timestamp('2025-10-08T14:33:30Z'), '2025-10-08 14:33:30')
        self.assertEqual(format_timestamp('0001-01-01T00:00:00Z'), 'N/A')
        self.assertEqual(format_timestamp(''), 'N/A')


class TestSendFeishuPayload(unittest.TestCase):
    def setUp(self):
        patcher = patch('app.services.requests.post')
        self.post = patcher.start()
        self.addCleanup(patcher.stop)

    def test_success_codes(self):
        for body in ({"code": 0, "msg": "success"}, {"StatusCode": 0, "StatusMessage": "success"}):
            with self.subTest(body=body):
                self.post.return_value = json_response(body)
                send_feishu_payload('https://hook', {"msg_type": "text"}, timeout=4)
        self.post.assert_called_with('https://hook', json={"msg_type": "text"}, timeout=4)

    def test_non_json_success_body_is_accepted(self):
        self.post.return_value = text_response('ok')
        send_feishu_payload('https://hook', {})

    def test_application_error(self):
        self.post.return_value = json_response({"code": 19024, "msg": "Key Words Not Found"})
        with self.assertRaises(SendError) as ctx:
            send_feishu_payload('https://hook', {})
        self.assertIn('Key Words Not Found', str(ctx.exception))

    def test_http_error(self):
        self.post.return_value = json_response({}, status_code=502)
        with self.assertRaises(TransportError):
            send_feishu_payload('https://hook', {})

    def test_http_error_reports_bot_body_without_hook_id(self):
        hook = 'https://open.feishu.cn/open-apis/bot/v2/hook/SEGREDO-DO-HOOK'
        self.post.return_value = real_response(
            400, {"code": 9499, "msg": "Bad Request", "data": {}}, url=hook, reason='Bad Request',
        )
        with self.assertRaises(SendError) as ctx:
            send_feishu_payload(hook, {})
        message = str(ctx.exception)
        self.assertNotIn('SEGREDO-DO-HOOK', message)
        self.assertIn('400', message)
        self.assertIn('code=9499', message)
        self.assertIn('msg=Bad Request', message)

    def test_http_error_without_json_body_hides_hook_id(self):
        hook = 'https://open.feishu.cn/open-apis/bot/v2/hook/SEGREDO-DO-HOOK'
        resp = real_response(503, None, url=hook, reason='Service Unavailable')
        resp._content = b'<html>upstream down</html>'
        self.post.return_value = resp
        with self.assertRaises(TransportError) as ctx:
            send_feishu_payload(hook, {})
        self.assertEqual(str(ctx.exception), 'HTTP 503 Service Unavailable')

    def test_network_error_hides_hook_id(self):
        self.post.side_effect = requests.ConnectionError(
            "HTTPSConnectionPool(host='open.feishu.cn', port=443): Max retries exceeded "
            "with url: /open-apis/bot/v2/hook/SEGREDO-DO-HOOK"
        )
        with self.assertRaises(TransportError) as ctx:
            send_feishu_payload('https://open.feishu.cn/open-apis/bot/v2/hook/SEGREDO-DO-HOOK', {})
        self.assertNotIn('SEGREDO-DO-HOOK', str(ctx.exception))
        self.assertIn('ConnectionError', str(ctx.exception))

    def test_missing_url(self):
        with self.assertRaises(SendError):
            FeishuWebhook('').send(WebhookMessage(alert_message=AlertMessage()))
        self.post.assert_not_called()


if __name__ == '__main__':
    unittest.main()
