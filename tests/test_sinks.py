import io
import unittest

from payload_router.config import SnifferSettings
from payload_router.dto import DetectionRecord, RawFrame
from snifferapp.sinks.console import ConsolePresenter, hexdump, render_frame, render_record
from snifferapp.sinks.rabbit import RabbitPublisher
from snifferapp.sinks.recent import RecentDetections


def _request(path="/api/x"):
    rec = DetectionRecord(protocol="http", created_at=0.0, detected_at=0.0)
    rec.set("request_line", f"GET {path} HTTP/1.1")
    rec.set("http_type", "request")
    rec.set("http_path", path)
    rec.set("source_port", "51000")
    rec.set("destination_port", "80")
    return rec


class ConsolePresenterTests(unittest.TestCase):
    def test_record_dump(self):
        rec = DetectionRecord(protocol="json", created_at=0.0)
        rec.set("a", "1")
        text = render_record(rec)
        self.assertIn("Protocol=json", text)
        self.assertIn("  a: 1", text)

    def test_long_values_are_capped(self):
        rec = DetectionRecord(protocol="binary", created_at=0.0)
        rec.set("hex", "A" * 50)
        self.assertIn("A" * 10 + " ... (len=50, truncated)", render_record(rec, max_field_chars=10))

    def test_http_request_summary(self):
        out = io.StringIO()
        ConsolePresenter(out).present(_request())
        text = out.getvalue()
        self.assertIn("GET /api/x  (src:51000 -> dst:80)", text)
        self.assertNotIn("request_line:", text)

    def test_verbose_adds_fields(self):
        out = io.StringIO()
        ConsolePresenter(out, verbose=True).present(_request())
        self.assertIn("  request_line: GET /api/x HTTP/1.1", out.getvalue())

    def test_frame_dump(self):
        frame = RawFrame(ts=0.0, length=64, link_type="ethernet", payload=b"GET /",
                         network="IPv4", src_ip="10.0.0.1", dst_ip="10.0.0.2",
                         transport="TCP", src_port=1, dst_port=80, tcp_flags="SYN",
                         tcp_seq=1, tcp_ack=0)
        text = render_frame(frame)
        self.assertIn("Source IP: 10.0.0.1", text)
        self.assertIn("TCP flags: SYN", text)
        self.assertIn("Payload (hex):", text)
        self.assertIn("GET /", text)

    def test_frame_without_payload(self):
        text = render_frame(RawFrame(ts=0.0, length=14, link_type="ethernet"))
        self.assertIn("Payload: none", text)

    def test_hexdump(self):
        lines = hexdump(b"GET /\x00", width=16)
        self.assertEqual(len(lines), 1)
        self.assertTrue(lines[0].startswith("0000: 47 45 54 20 2F 00"))
        self.assertTrue(lines[0].endswith("| GET /."))


class RecentDetectionsTests(unittest.TestCase):
    def test_newest_first_and_bounded(self):
        recent = RecentDetections(capacity=2)
        for path in ("/a", "/b", "/c"):
            recent.present(_request(path))
        items = recent.snapshot()
        self.assertEqual([i["fields"]["http_path"] for i in items], ["/c", "/b"])
        self.assertEqual(recent.total, 3)
        self.assertEqual(len(recent), 2)

    def test_filter_and_limit(self):
        recent = RecentDetections()
        recent.present(_request("/a"))
        recent.present(DetectionRecord(protocol="binary", created_at=0.0))
        recent.present(_request("/b"))
        self.assertEqual(len(recent.snapshot(protocol="http")), 2)
        self.assertEqual(len(recent.snapshot(limit=1)), 1)
        self.assertEqual(recent.snapshot(limit=-5), [])

    def test_clear(self):
        recent = RecentDetections()
        recent.present(_request())
        self.assertEqual(recent.clear(), 1)
        self.assertEqual(recent.snapshot(), [])


class _FakeChannel:
    def __init__(self):
        self.is_open = True
        self.declared = []
        self.published = []

    def queue_declare(self, **kwargs):
        self.declared.append(kwargs)

    def basic_publish(self, **kwargs):
        self.published.append(kwargs)


class _FakeConnection:
    def __init__(self, params):
        self.params = params
        self.is_open = True
        self.chan = _FakeChannel()

    def channel(self):
        return self.chan

    def close(self):
        self.is_open = False


class RabbitPublisherTests(unittest.TestCase):
    def setUp(self):
        self.connections = []

        def connect(params):
            conn = _FakeConnection(params)
            self.connections.append(conn)
            return conn

        self.connect = connect

    def test_lazy_connect_and_durable_queue(self):
        pub = RabbitPublisher(queue="sniffer", connect=self.connect)
        self.assertEqual(self.connections, [])
        pub.publish("GET\t/api")
        pub.publish("POST\t/login")
        self.assertEqual(len(self.connections), 1)
        chan = self.connections[0].chan
        self.assertEqual(chan.declared, [
            {"queue": "sniffer", "durable": True, "exclusive": False, "auto_delete": False},
        ])
        self.assertEqual(chan.published[0], {"exchange": "", "routing_key": "sniffer", "body": b"GET\t/api"})
        self.assertEqual(len(chan.published), 2)

    def test_reconnects_after_channel_closed(self):
        pub = RabbitPublisher(connect=self.connect)
        pub.publish("a")
        self.connections[0].chan.is_open = False
        pub.publish("b")
        self.assertEqual(len(self.connections), 2)
        self.assertFalse(self.connections[0].is_open)

    def test_from_settings(self):
        settings = SnifferSettings(rabbit_host="mq", rabbit_port=5673, rabbit_queue="q1")
        pub = RabbitPublisher.from_settings(settings, connect=self.connect)
        pub.publish("x")
        params = self.connections[0].params
        self.assertEqual((params.host, params.port), ("mq", 5673))
        self.assertEqual(pub.queue, "q1")

    def test_close(self):
        pub = RabbitPublisher(connect=self.connect)
        pub.close()
        pub.publish("x")
        pub.close()
        self.assertFalse(self.connections[0].is_open)


if __name__ == "__main__":
    unittest.main()
