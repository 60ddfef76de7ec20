from structlog.testing import capture_logs

from services.unix_peer.ports import PeerIOError
from services.unix_peer.telemetry.logger import error_fields, get_logger


def test_get_logger_binds_context() -> None:
    with capture_logs() as logs:
        logger = get_logger("unix_peer.example", component="peer")
        logger.info("Example.run(self) :: start", path="/tmp/a.sock")

    record = logs[-1]
    assert record["event"] == "Example.run(self) :: start"
    assert record["component"] == "peer"
    assert record["path"] == "/tmp/a.sock"
    assert record["log_level"] == "info"


def test_get_logger_formats_positional_arguments() -> None:
    with capture_logs() as logs:
        get_logger("unix_peer.example").info("%s :: start", "unix_peer.session")

    assert logs[-1]["event"] == "unix_peer.session :: start"


def test_error_fields_describe_peer_and_os_errors() -> None:
    peer_error = error_fields(PeerIOError("Write failed", path="/tmp/a.sock"))
    os_error = error_fields(BrokenPipeError(32, "Broken pipe"))
    plain = error_fields(PeerIOError("Write failed"))

    assert peer_error == {
        "error": "Write failed",
        "error_type": "PeerIOError",
        "code": "io_failed",
        "path": "/tmp/a.sock",
    }
    assert os_error["errno"] == 32
    assert os_error["error_type"] == "BrokenPipeError"
    assert "path" not in plain
