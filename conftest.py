"""
Shared fixtures: a fake database client and an exporter wired to it.

The fake client echoes its --execute argument to stdout, so a test
controls the "result set" through the query text itself. A few reserved
queries (FAIL, SLEEP, EMPTY, ENV, ROWS) trigger canned behaviour instead.
"""
import sys
import textwrap

import pytest

from src.export import DatabaseConfig, Exporter, ExportSettings


FAKE_CLIENT_SOURCE = textwrap.dedent(
    """
    import os
    import sys
    import time

    query = ""
    for arg in sys.argv[1:]:
        if arg.startswith("--execute="):
            query = arg[len("--execute="):]
        if arg.startswith("--password"):
            sys.stderr.write(
                "mysql: [Warning] Using a password on the command line interface can be insecure.\\n"
            )

    if query.startswith("FAIL"):
        sys.stderr.write("ERROR 1064 (42000): You have an error in your SQL syntax\\n")
        sys.exit(1)
    if query.startswith("SLEEP"):
        time.sleep(30)
    if query == "EMPTY":
        sys.exit(0)
    if query == "ENV":
        sys.stdout.write(os.environ.get("MYSQL_PWD", "") + "\\n")
        sys.exit(0)
    if query == "ROWS":
        for i in range(2000):
            sys.stdout.write(f"{i}\\t{'x' * 100}\\n")
        sys.exit(0)

    sys.stdout.write(query + "\\n")
    """
)


class RecordingSink:
    """In-memory response sink that records call order."""

    def __init__(self):
        self.headers = None
        self.chunks = []
        self.events = []

    def send_headers(self, headers):
        self.events.append("headers")
        self.headers = dict(headers)

    def write(self, chunk):
        self.events.append("write")
        self.chunks.append(chunk)

    @property
    def body(self):
        return b"".join(self.chunks)


class BrokenSink(RecordingSink):
    """Sink whose client hangs up on the first body write."""

    def write(self, chunk):
        raise BrokenPipeError("client went away")


@pytest.fixture
def fake_client(tmp_path):
    script = tmp_path / "fake_mysql"
    script.write_text(f"#!{sys.executable}\n{FAKE_CLIENT_SOURCE}")
    script.chmod(0o755)
    return str(script)


@pytest.fixture
def db_config():
    return DatabaseConfig(host="db.internal", user="report", password="s3cret", database="shop")


@pytest.fixture
def export_dir(tmp_path):
    path = tmp_path / "exports"
    path.mkdir()
    return path


@pytest.fixture
def settings(fake_client, export_dir):
    return ExportSettings(
        client_binary=fake_client,
        temp_dir=str(export_dir),
        chunk_size=16,
        timeout=10,
    )


@pytest.fixture
def exporter(db_config, settings):
    return Exporter(db_config, settings)


@pytest.fixture
def sink():
    return RecordingSink()
