import unittest

from payload_router.config import FilterConfig
from payload_router.dto import DetectionRecord
from payload_router.pipeline.path_filter import (
    is_http_request,
    passes_path_filter,
    path_allowed,
    request_method,
    request_path,
)


def _http(first_line, http_type="request"):
    rec = DetectionRecord(protocol="http", created_at=0.0)
    rec.set("request_line", first_line)
    rec.set("http_type", http_type)
    return rec


class PathFilterTests(unittest.TestCase):
    def test_substring_case_insensitive(self):
        cfg = FilterConfig(http_path_filters=("/API",))
        self.assertTrue(passes_path_filter(cfg, _http("GET /api/users HTTP/1.1")))
        self.assertTrue(passes_path_filter(cfg, _http("GET /v1/Api/x HTTP/1.1")))
        self.assertFalse(passes_path_filter(cfg, _http("GET /index.html HTTP/1.1")))

    def test_any_filter_matches(self):
        cfg = FilterConfig(http_path_filters=("/login", "/admin"))
        self.assertTrue(passes_path_filter(cfg, _http("POST /admin/x HTTP/1.1")))
        self.assertFalse(passes_path_filter(cfg, _http("POST /home HTTP/1.1")))

    def test_no_filters(self):
        self.assertTrue(passes_path_filter(FilterConfig(), _http("GET /x HTTP/1.1")))
        self.assertTrue(path_allowed([], "/x"))

    def test_blank_filters_never_match(self):
        self.assertFalse(path_allowed(["", "/api"], "/home"))
        self.assertTrue(path_allowed(["  ", "/api"], "/api/x"))

    def test_only_blank_filters_reject_every_request(self):
        self.assertFalse(path_allowed(["", "  "], "/anything"))
        cfg = FilterConfig(http_path_filters=("  ",))
        self.assertFalse(passes_path_filter(cfg, _http("GET /  HTTP/1.1")))
        self.assertTrue(passes_path_filter(cfg, _http("HTTP/1.1 200 OK", "response")))

    def test_responses_are_not_filtered(self):
        cfg = FilterConfig(http_path_filters=("/api",))
        self.assertTrue(passes_path_filter(cfg, _http("HTTP/1.1 200 OK", "response")))

    def test_non_http_records_are_not_filtered(self):
        cfg = FilterConfig(http_path_filters=("/api",))
        rec = DetectionRecord(protocol="json", created_at=0.0)
        rec.set("request_line", "GET /home HTTP/1.1")
        rec.set("http_type", "request")
        self.assertFalse(is_http_request(rec))
        self.assertTrue(passes_path_filter(cfg, rec))

    def test_request_line_without_path(self):
        cfg = FilterConfig(http_path_filters=("/api",))
        rec = _http("GET")
        self.assertEqual(request_path(rec), "")
        self.assertFalse(passes_path_filter(cfg, rec))

    def test_tokens(self):
        rec = _http("DELETE   /items/3   HTTP/1.1")
        self.assertEqual(request_method(rec), "DELETE")
        self.assertEqual(request_path(rec), "/items/3")


if __name__ == "__main__":
    unittest.main()
