import gzip
import io
import json
import threading
import unittest
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import patch

import requests

from httpcall import HTTPCallConfig, HTTPClient, HTTPClientCall
from httpcall.exceptions import MethodNotAllowedError


@dataclass
class Person:
    Name: str = ""


class RecordingHandler(BaseHTTPRequestHandler):
    """Answers every request with the status, body and content type configured on the server."""

    def _handle(self):
        length = int(self.headers.get("Content-Length") or 0)
        self.server.received.append(
            {
                "method": self.command,
                "path": self.path,
                "headers": dict(self.headers),
                "body": self.rfile.read(length) if length else b"",
            }
        )
        body = self.server.response_body
        self.send_response(self.server.response_status)
        self.send_header("Content-Type", self.server.response_content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    do_GET = _handle
    do_POST = _handle
    do_PUT = _handle
    do_DELETE = _handle
    do_PATCH = _handle

    def log_message(self, format, *args):
        pass


class TestEndToEnd(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.server = ThreadingHTTPServer(("127.0.0.1", 0), RecordingHandler)
        cls.server.received = []
        cls.thread = threading.Thread(target=cls.server.serve_forever, daemon=True)
        cls.thread.start()
        cls.host = f"http://127.0.0.1:{cls.server.server_address[1]}"
        session = requests.Session()
        session.trust_env = False
        cls.client = HTTPClient(config=HTTPCallConfig(timeout=5, max_retries=0), session=session)

    @classmethod
    def tearDownClass(cls):
        cls.client.close()
        cls.server.shutdown()
        cls.server.server_close()

    def setUp(self):
        self.server.received.clear()
        self.respond(200, b"{}", "application/json")

    def respond(self, status, body, content_type):
        self.server.response_status = status
        self.server.response_body = body
        self.server.response_content_type = content_type

    def test_decode_json_into_dataclass(self):
        self.respond(201, b'{"name":"Pablo"}', "application/json")

        person = Person()
        response = HTTPClientCall(self.host, self.client).method("POST").path("/people").do_with_unmarshal(person)

        self.assertEqual(response.status_code, 201)
        self.assertEqual(person.Name, "Pablo")

    def test_decode_plain_text(self):
        self.respond(200, b"Hello, world!", "text/plain; charset=utf-8")

        result = io.StringIO()
        response = HTTPClientCall(self.host, self.client).method("GET").do_with_unmarshal(result)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(result.getvalue(), "Hello, world!")

    def test_request_on_the_wire(self):
        (
            HTTPClientCall(self.host, self.client)
            .method("PUT")
            .path("/items/1")
            .params({"b": ["2"], "a": ["1 2"]})
            .headers({"X-Request-Id": ["abc"]})
            .body({"key": "value"})
            .use_gzip_compress(True)
            .do_with_unmarshal({})
        )

        received = self.server.received[0]
        self.assertEqual(received["method"], "PUT")
        self.assertEqual(received["path"], "/items/1?a=1+2&b=2")
        self.assertEqual(received["headers"]["Content-Encoding"], "gzip")
        self.assertEqual(received["headers"]["Content-Type"], "application/json")
        self.assertEqual(received["headers"]["Accept"], "application/json")
        self.assertEqual(received["headers"]["X-Request-Id"], "abc")
        self.assertEqual(json.loads(gzip.decompress(received["body"])), {"key": "value"})

    def test_raw_response_is_left_open(self):
        self.respond(200, b'{"key":"value"}', "application/json")

        response = HTTPClientCall(self.host, self.client).method("GET").do()
        try:
            self.assertEqual(response.status_code, 200)
            self.assertFalse(response._content_consumed)
            self.assertEqual(response.json(), {"key": "value"})
        finally:
            response.close()

    def test_invalid_method_makes_no_network_call(self):
        with patch.object(self.client, "send", wraps=self.client.send) as send:
            with self.assertRaises(MethodNotAllowedError):
                HTTPClientCall(self.host, self.client).method("INVALID").do()

            send.assert_not_called()
        self.assertEqual(self.server.received, [])

    def test_reused_call_does_not_leak_body_or_params(self):
        call = HTTPClientCall(self.host, self.client).method("POST").path("/items")

        call.params({"page": ["1"]}).body("first").do_with_unmarshal({})
        call.do_with_unmarshal({})

        first, second = self.server.received
        self.assertEqual(first["path"], "/items?page=1")
        self.assertEqual(first["body"], b"first")
        self.assertEqual(second["path"], "/items")
        self.assertEqual(second["body"], b"")


if __name__ == "__main__":
    unittest.main()
