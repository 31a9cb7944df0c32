import logging
import pathlib
import sys

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient
from starlette.routing import WebSocketRoute
from starlette.websockets import WebSocketDisconnect

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from fakes import make_settings
from main import build_servers, create_app
from relay import get_logger

OUTSIDER = {"origin": "https://elsewhere.example"}


@pytest.fixture
def client():
    app = create_app(make_settings())
    with TestClient(app) as test_client:
        yield test_client


def test_root_and_health(client):
    assert client.get("/").text == "Hello World!"

    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["connections"]["total_clients"] == 0
    assert health["connections"]["keepalive_running"] is False


def test_allowed_origin_is_authenticated_on_connect(client):
    with client.websocket_connect("/", headers={"origin": "https://www.JoshuaIngle.art"}) as ws:
        message = ws.receive_json()
        assert message["type"] == "auth"
        assert message["status"] == "success"
        assert message["method"] == "origin"

        stats = client.get("/stats").json()["connections"]
        assert stats["total_clients"] == 1
        assert stats["keepalive_running"] is True

    assert client.get("/stats").json()["connections"]["keepalive_running"] is False


def test_relay_scenario(client):
    with client.websocket_connect("/ws", headers=OUTSIDER) as ws_a:
        ws_a.send_text("asdf")
        assert ws_a.receive_json()["method"] == "password"

        with client.websocket_connect("/ws", headers=OUTSIDER) as ws_b:
            ws_b.send_text("wrong")
            failure = ws_b.receive_json()
            assert failure["status"] == "failure"
            with pytest.raises(WebSocketDisconnect) as closed:
                ws_b.receive_text()
            assert closed.value.code == 1008

        ws_a.send_text("hello")

        with client.websocket_connect("/ws", headers=OUTSIDER) as ws_c:
            ws_c.send_text("asdf")
            assert ws_c.receive_json()["method"] == "password"

            ws_a.send_text("hello")
            broadcast = ws_c.receive_json()
            assert broadcast == {
                "type": "broadcast",
                "message": "hello",
                "timestamp": broadcast["timestamp"],
            }

            ws_c.send_text("reply")
            assert ws_a.receive_json()["message"] == "reply"


def test_pong_is_not_relayed(client):
    with client.websocket_connect("/ws", headers={"origin": "https://joshuaingle.art"}) as ws_a:
        ws_a.receive_json()
        with client.websocket_connect("/ws", headers={"origin": "https://joshuaingle.art"}) as ws_b:
            ws_b.receive_json()

            ws_b.send_text("pong")
            ws_b.send_text("after pong")

            assert ws_a.receive_json()["message"] == "after pong"


def test_invalid_utf8_frame_returns_error(client):
    with client.websocket_connect("/ws", headers=OUTSIDER) as ws:
        ws.send_bytes(b"\xff\xfe")
        error = ws.receive_json()
        assert error["type"] == "error"

        ws.send_text("asdf")
        assert ws.receive_json()["status"] == "success"


def test_log_level_setting_is_applied():
    logger = get_logger()
    previous = logger.level
    try:
        create_app(make_settings(LOG_LEVEL="debug"))
        assert logger.level == logging.DEBUG
    finally:
        logger.setLevel(previous)


def test_no_wildcard_cors_headers(client):
    response = client.get("/stats", headers={"origin": "https://elsewhere.example"})
    assert "access-control-allow-origin" not in response.headers


def test_static_directory_is_served_at_root(tmp_path):
    (tmp_path / "index.html").write_text("<h1>relay</h1>")
    app = create_app(make_settings(STATIC_DIR=str(tmp_path)))

    with TestClient(app) as client:
        assert client.get("/").text == "<h1>relay</h1>"
        with client.websocket_connect("/ws", headers={"origin": "https://joshuaingle.art"}) as ws:
            assert ws.receive_json()["method"] == "origin"


def _paths(app, route_type):
    return {route.path for route in app.routes if isinstance(route, route_type)}


def test_production_attaches_websocket_to_http_server():
    servers = build_servers(make_settings(
        APP_ENV="production",
        PORT=8443,
        SSL_KEYFILE="/etc/relay/key.pem",
        SSL_CERTFILE="/etc/relay/cert.pem",
    ))

    assert len(servers) == 1
    config = servers[0].config
    assert config.port == 8443
    assert config.ssl_keyfile == "/etc/relay/key.pem"
    assert config.ssl_certfile == "/etc/relay/cert.pem"
    assert {"/", "/ws"} <= _paths(config.app, WebSocketRoute)
    assert "/health" in _paths(config.app, APIRoute)


def test_development_splits_http_and_websocket_ports():
    servers = build_servers(make_settings(APP_ENV="development", PORT=3000, DEV_WS_PORT=5001))

    assert [server.config.port for server in servers] == [3000, 5001]
    http_app, ws_app = (server.config.app for server in servers)

    assert _paths(http_app, WebSocketRoute) == set()
    assert {"/", "/health", "/stats"} <= _paths(http_app, APIRoute)
    assert _paths(ws_app, WebSocketRoute) == {"/", "/ws"}
    assert _paths(ws_app, APIRoute) == set()
    assert http_app.state.relay is ws_app.state.relay
    assert servers[0].config.ssl_keyfile is None
