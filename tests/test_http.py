import unittest
from unittest.mock import ANY, Mock, patch

from httpcall import __version__
from httpcall._body import encode_body
from httpcall._config import HTTPCallConfig
from httpcall._context import CallContext
from httpcall._http_client import HTTPClient, HTTPRequest, new_http_request
from httpcall.exceptions import CallCancelledError


class TestHTTPRequest(unittest.TestCase):
    def test_new_request_has_default_headers(self):
        request = new_http_request("GET", "http://example.com")

        self.assertEqual(request.get_header("Accept"), "application/json")
        self.assertEqual(request.get_header("Content-Type"), "application/json")
        self.assertIsNone(request.body)

    def test_add_header_appends_values(self):
        request = HTTPRequest("GET", "http://example.com")
        request.add_header("Accept-Encoding", "gzip")
        request.add_header("accept-encoding", "deflate")

        self.assertEqual(request.header_values("Accept-Encoding"), ["gzip", "deflate"])
        self.assertEqual(request.flat_headers()["Accept-Encoding"], "gzip, deflate")

    def test_set_header_replaces_values(self):
        request = new_http_request("GET", "http://example.com")
        request.set_header("content-type", "text/plain")

        self.assertEqual(request.header_values("Content-Type"), ["text/plain"])

    def test_apply_body_without_payload_sets_zero_length(self):
        request = new_http_request("GET", "http://example.com")
        request.apply_body(encode_body(None))

        self.assertIsNone(request.body)
        self.assertEqual(request.get_header("Content-Length"), "0")

    def test_apply_body_gzip(self):
        request = new_http_request("POST", "http://example.com")
        request.apply_body(encode_body({"key": "value"}, gzip_compress_body=True))

        self.assertEqual(request.get_header("Content-Encoding"), "gzip")
        self.assertEqual(request.get_header("Vary"), "Accept-Encoding")
        self.assertEqual(request.get_header("Content-Length"), str(len(request.body)))
        self.assertEqual(request.header_values("Content-Type"), ["application/json"])

    def test_default_context(self):
        request = HTTPRequest("GET", "http://example.com")

        self.assertIsNone(request.context.deadline)
        self.assertFalse(request.context.cancelled)


class TestHTTPClient(unittest.TestCase):
    def setUp(self):
        self.config = HTTPCallConfig(timeout=10, max_retries=0, log_level="WARNING")
        self.client = HTTPClient(config=self.config)

    @patch("httpcall._http_client.requests.Session.send")
    def test_send_success(self, mock_send):
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.headers = {"Content-Type": "application/json"}
        mock_send.return_value = mock_response

        request = new_http_request("GET", "https://api.test.com/endpoint")
        request.add_header("Authorization", "Bearer test_token")

        response = self.client.send(request)

        self.assertIs(response, mock_response)
        mock_send.assert_called_once()
        prepared = mock_send.call_args[0][0]
        self.assertEqual(prepared.method, "GET")
        self.assertEqual(prepared.url, "https://api.test.com/endpoint")
        self.assertEqual(prepared.headers["Authorization"], "Bearer test_token")
        self.assertEqual(prepared.headers["Accept"], "application/json")
        self.assertTrue(prepared.headers["User-Agent"].startswith(f"httpcall/{__version__} (Python/"))
        self.assertEqual(mock_send.call_args[1]["timeout"], 10)
        self.assertFalse(mock_send.call_args[1]["stream"])

    @patch("httpcall._http_client.requests.Session.send")
    def test_send_body_and_stream(self, mock_send):
        mock_send.return_value = Mock(status_code=201)

        request = new_http_request("POST", "https://api.test.com/items")
        request.apply_body(encode_body({"key": "value"}))

        self.client.send(request, stream=True)

        prepared = mock_send.call_args[0][0]
        self.assertEqual(prepared.body, b'{"key":"value"}')
        self.assertEqual(prepared.headers["Content-Length"], str(len(b'{"key":"value"}')))
        self.assertTrue(mock_send.call_args[1]["stream"])

    @patch("httpcall._http_client.requests.Session.send")
    def test_send_failure_status_is_returned(self, mock_send):
        mock_send.return_value = Mock(status_code=404)

        response = self.client.send(new_http_request("GET", "https://api.test.com/notfound"))

        self.assertEqual(response.status_code, 404)
        mock_send.assert_called_once()

    @patch("httpcall._http_client.requests.Session.send")
    def test_deadline_bounds_timeout(self, mock_send):
        mock_send.return_value = Mock(status_code=200)

        request = new_http_request("GET", "https://api.test.com", CallContext.with_timeout(2))
        self.client.send(request)

        timeout = mock_send.call_args[1]["timeout"]
        self.assertLessEqual(timeout, 2)
        self.assertGreater(timeout, 0)

    @patch("httpcall._http_client.requests.Session.send")
    def test_cancelled_context_is_not_sent(self, mock_send):
        context = CallContext.background()
        context.cancel()

        with self.assertRaises(CallCancelledError):
            self.client.send(new_http_request("GET", "https://api.test.com", context))

        mock_send.assert_not_called()

    def test_http_client_retry_config(self):
        client = HTTPClient(config=HTTPCallConfig(max_retries=5, retry_backoff_factor=2.0))

        self.assertEqual(client.max_retries, 5)
        self.assertEqual(client.retry_backoff_factor, 2.0)

    def test_http_client_session_reuse(self):
        session1 = self.client._get_session()
        session2 = self.client._get_session()

        self.assertIs(session1, session2)

    def test_custom_session_is_used(self):
        session = Mock()
        client = HTTPClient(config=self.config, session=session)

        self.assertIs(client._get_session(), session)

    @patch("httpcall._http_client.requests.Session")
    @patch("httpcall._http_client.HTTPAdapter")
    @patch("httpcall._http_client.Retry")
    def test_retry_strategy_configuration(self, mock_retry, mock_adapter, mock_session_class):
        mock_session = Mock()
        mock_session_class.return_value = mock_session

        client = HTTPClient(config=HTTPCallConfig(max_retries=3, retry_backoff_factor=1.5))
        client._get_session()

        mock_retry.assert_called_once_with(
            total=3,
            status_forcelist=[429, 500, 502, 503, 504],
            backoff_factor=1.5,
            raise_on_status=False,
        )
        mock_adapter.assert_called_once_with(max_retries=mock_retry.return_value)
        mock_session.mount.assert_any_call("https://", mock_adapter.return_value)
        mock_session.mount.assert_any_call("http://", mock_adapter.return_value)

    @patch("httpcall._http_client.requests.Session")
    @patch("httpcall._http_client.Retry")
    def test_no_retry_strategy_by_default(self, mock_retry, mock_session_class):
        mock_session_class.return_value = Mock()

        self.client._get_session()

        mock_retry.assert_not_called()
        mock_session_class.return_value.mount.assert_any_call("http://", ANY)

    @patch("httpcall._http_client.requests.Session")
    def test_close_releases_session(self, mock_session_class):
        mock_session = Mock()
        mock_session_class.return_value = mock_session

        with HTTPClient(config=self.config) as client:
            client._get_session()

        mock_session.close.assert_called_once()
        self.assertIsNone(client._session)


if __name__ == "__main__":
    unittest.main()
