import json
from unittest.mock import Mock

import requests


def json_response(body, status_code=200):
    resp = Mock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.reason = "OK" if status_code < 400 else "Server Error"
    resp.text = str(body)
    resp.json.return_value = body
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Server Error")
    else:
        resp.raise_for_status.return_value = None
    return resp


def text_response(text, status_code=200):
    resp = json_response(None, status_code)
    resp.text = text
    resp.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    return resp


def real_response(status_code, body, url='https://open.feishu.cn/open-apis/bot/v2/hook/x', reason=None):
    resp = requests.Response()
    resp.status_code = status_code
    resp.reason = reason
    resp.url = url
    resp.encoding = 'utf-8'
    resp._content = json.dumps(body).encode('utf-8') if body is not None else b''
    return resp
