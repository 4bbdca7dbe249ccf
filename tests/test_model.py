import json
import logging

import pytest

from nebula_sync.model import (
    AuthRequest,
    AuthSession,
    ConfigResponse,
    PatchConfig,
    PatchConfigRequest,
    PiHole,
    PostGravityRequest,
    PostTeleporterRequest,
    new_pihole,
)


def test_pihole_parse_splits_on_first_separator():
    ph = PiHole.parse("http://localhost:1337|password|password")
    assert ph.url == "http://localhost:1337"
    assert ph.password.split("|") == ["password", "password"]


def test_pihole_parse_without_separator_raises():
    with pytest.raises(ValueError, match="invalid pihole format"):
        PiHole.parse("http://localhost:1337")


def test_pihole_parse_invalid_url_raises():
    with pytest.raises(ValueError, match="parse url"):
        PiHole.parse("http://[::1|password")


def test_pihole_str_hides_password():
    ph = PiHole.parse("http://localhost:1337|secret")
    assert str(ph) == "{Url:http://localhost:1337}"
    assert "secret" not in repr(ph)


def test_new_pihole():
    password = "password"
    ph = new_pihole("http://localhost:1234", password)
    assert ph.url == "http://localhost:1234"
    assert ph.password == password


def test_new_pihole_invalid_host_leaves_url_unset(caplog):
    password = "password"
    with caplog.at_level(logging.ERROR, logger="nebula_sync"):
        ph = new_pihole("http://[::1", password)
    assert ph.url is None
    assert "Error parsing host" in caplog.text


def test_auth_request_to_dict():
    password = "password"
    assert AuthRequest(password=password).to_dict() == {"password": "password"}


def test_auth_session_from_dict():
    session = AuthSession.from_dict(
        {"valid": True, "totp": False, "sid": "token", "csrf": "token", "validity": 300, "message": "success"}
    )
    assert session.valid is True
    assert session.sid == "token"
    assert session.validity == 300
    assert session.message == "success"


def test_auth_session_from_empty():
    assert AuthSession.from_dict(None) == AuthSession()


def test_post_teleporter_request_to_dict():
    request = PostTeleporterRequest(
        config=False, dhcp_leases=True, gravity=PostGravityRequest(group=True, client_by_group=True)
    )
    assert request.to_dict() == {
        "config": False,
        "dhcp_leases": True,
        "gravity": {
            "group": True,
            "adlist": False,
            "adlist_by_group": False,
            "domainlist": False,
            "domainlist_by_group": False,
            "client": False,
            "client_by_group": True,
        },
    }


def test_patch_config_request_serialises_missing_sections_as_null():
    request = PatchConfigRequest(config=PatchConfig(dns={"port": 53}))
    encoded = json.loads(json.dumps(request.to_dict()))
    assert encoded["config"]["dns"] == {"port": 53}
    assert encoded["config"]["debug"] is None
    assert set(encoded["config"]) == {"dns", "dhcp", "ntp", "resolver", "database", "misc", "debug"}


def test_config_response_get():
    response = ConfigResponse(config={"dns": {"port": 53}})
    assert response.get("dns") == {"port": 53}


def test_config_response_get_missing_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="nebula_sync"):
        assert ConfigResponse(config={}).get("dns") is None
    assert "Missing key (dns) in config response" in caplog.text


def test_config_response_get_non_object_raises():
    with pytest.raises(TypeError):
        ConfigResponse(config={"dns": 1}).get("dns")