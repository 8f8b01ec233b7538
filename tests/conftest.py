import json
import socketserver
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest

from diskwatch.config import Settings


DF_OUTPUT = """Filesystem      Size  Used Avail Use% Mounted on
udev            7.8G     0  7.8G   0% /dev
tmpfs           1.6G  2.1M  1.6G   1% /run
/dev/sda1       916G  778G   92G  85% /
tmpfs           7.8G  109M  7.7G   2% /dev/shm
/dev/sdb1       1.8T  900G  900G  50% /data
"""


@pytest.fixture
def make_settings(tmp_path, monkeypatch):
    # 避免读取工作目录中的 .env
    monkeypatch.chdir(tmp_path)

    def _make(**overrides):
        values = {
            "FILE_SYSTEMS": "/dev/sda1",
            "THRESHOLD": 80.0,
            "API_ENDPOINT": "",
            "TRIGGER_INTERVAL": 60,
            "WARNING_INTERVAL": 3600,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


class WebhookServer:
    def __init__(self, status=200):
        self.status = status
        self.requests = []
        server = self

        class Handler(BaseHTTPRequestHandler):
            def do_POST(self):
                length = int(self.headers.get("Content-Length", 0))
                server.requests.append({
                    "path": self.path,
                    "content_type": self.headers.get("Content-Type"),
                    "body": json.loads(self.rfile.read(length)),
                })
                self.send_response(server.status)
                self.send_header("Content-Type", "application/json")
                self.end_headers()
                self.wfile.write(b'{"status":"ok"}')

            def log_message(self, format, *args):
                pass

        self.httpd = HTTPServer(("127.0.0.1", 0), Handler)
        self.url = f"http://127.0.0.1:{self.httpd.server_port}/"
        self.thread = threading.Thread(target=self.httpd.serve_forever, daemon=True)

    def __enter__(self):
        self.thread.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.httpd.shutdown()
        self.httpd.server_close()
        return False


@pytest.fixture
def webhook():
    with WebhookServer() as server:
        yield server


@pytest.fixture
def failing_webhook():
    with WebhookServer(status=500) as server:
        yield server


class GarbageResponseServer:
    """回复非法 HTTP 状态行的 TCP 服务"""

    def __init__(self):
        server = self
        self.connections = 0

        class Handler(socketserver.StreamRequestHandler):
            def handle(self):
                server.connections += 1
                # 读完整个请求，避免关闭连接时触发 RST
                length = 0
                for line in iter(self.rfile.readline, b""):
                    if line in (b"\r\n", b"\n"):
                        break
                    name, _, value = line.decode("latin-1").partition(":")
                    if name.strip().lower() == "content-length":
                        length = int(value.strip())
                self.rfile.read(length)
                self.wfile.write(b"garbage\r\n\r\n")

        self.tcpd = socketserver.ThreadingTCPServer(("127.0.0.1", 0), Handler)
        self.tcpd.daemon_threads = True
        self.url = f"http://127.0.0.1:{self.tcpd.server_address[1]}/"
        self.thread = threading.Thread(target=self.tcpd.serve_forever, daemon=True)

    def __enter__(self):
        self.thread.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.tcpd.shutdown()
        self.tcpd.server_close()
        return False


@pytest.fixture
def garbage_webhook():
    with GarbageResponseServer() as server:
        yield server
