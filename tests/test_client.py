import unittest
from unittest import mock

from requests.auth import HTTPBasicAuth

from testrail_runs.core.client import APIError, TestRailAPIClient


def fake_response(status_code=200, json_body=None, text=""):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = json_body
    response.content = b"x" if json_body is not None else b""
    response.text = text
    return response


class TestTestRailAPIClient(unittest.TestCase):
    def setUp(self):
        self.client = TestRailAPIClient("https://example.testrail.net/", timeout=5)

    def test_base_url(self):
        self.assertEqual(self.client.base_url, "https://example.testrail.net/index.php?/api/v2/")

    def test_set_credentials_uses_basic_auth(self):
        self.client.set_credentials("jane@example.com", "secret")
        self.assertIsInstance(self.client.session.auth, HTTPBasicAuth)
        self.assertEqual(self.client.session.auth.username, "jane@example.com")
        self.assertEqual(self.client.session.auth.password, "secret")

    def test_send_get(self):
        with mock.patch.object(self.client.session, "request", return_value=fake_response(json_body=[{"id": 7}])) as request:
            result = self.client.send_get("get_runs/42&created_after=1760745600")
        self.assertEqual(result, [{"id": 7}])
        request.assert_called_once_with(
            "GET",
            "https://example.testrail.net/index.php?/api/v2/get_runs/42&created_after=1760745600",
            json=None,
            timeout=5,
            verify=True,
        )

    def test_send_post_sends_json_body(self):
        body = {"status_id": 1, "comment": "Automated test - ok"}
        with mock.patch.object(self.client.session, "request", return_value=fake_response(json_body={"id": 1})) as request:
            self.client.send_post("add_result/1", body)
        self.assertEqual(request.call_args.kwargs["json"], body)
        self.assertEqual(request.call_args.args[0], "POST")

    def test_error_status_raises_api_error(self):
        response = fake_response(400, {"error": "Field :run_id is not a valid test run."})
        with mock.patch.object(self.client.session, "request", return_value=response):
            with self.assertRaises(APIError) as ctx:
                self.client.send_get("get_tests/1")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.message, "Field :run_id is not a valid test run.")

    def test_error_without_json_body(self):
        response = fake_response(502, text="Bad Gateway")
        response.json.side_effect = ValueError("no json")
        with mock.patch.object(self.client.session, "request", return_value=response):
            with self.assertRaises(APIError) as ctx:
                self.client.send_get("get_tests/1")
        self.assertEqual(ctx.exception.message, "Bad Gateway")

    def test_empty_body_returns_empty_dict(self):
        with mock.patch.object(self.client.session, "request", return_value=fake_response()):
            self.assertEqual(self.client.send_post("add_result/1", {}), {})

    def test_insecure_disables_verification(self):
        client = TestRailAPIClient("https://example.testrail.net", insecure=True)
        with mock.patch.object(client.session, "request", return_value=fake_response(json_body={})) as request:
            client.send_get("get_case/1")
        self.assertFalse(request.call_args.kwargs["verify"])


if __name__ == '__main__':
    unittest.main()
