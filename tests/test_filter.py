import copy

import pytest

from nebula_sync.filter import FilterType, by_type, exclude_keys, include_keys

_DNS_DATA = {
    "upstreams": ["127.0.0.1#5335"],
    "CNAMEdeepInspect": True,
    "blockESNI": True,
    "EDNS0ECS": True,
    "ignoreLocalhost": False,
    "showDNSSEC": True,
    "analyzeOnlyAandAAAA": False,
    "piholePTR": "PI.HOLE",
    "replyWhenBusy": "ALLOW",
    "blockTTL": 2,
    "hosts": [],
    "domainNeeded": False,
    "expandHosts": False,
    "domain": "lan",
    "bogusPriv": True,
    "dnssec": False,
    "interface": "",
    "hostRecord": "",
    "listeningMode": "LOCAL",
    "queryLogging": True,
    "cnameRecords": [],
    "port": 53,
    "cache": {"size": 10000, "optimizer": 3600, "upstreamBlockedTTL": 86400},
    "blocking": {"active": True, "mode": "NULL"},
    "reply": {
        "host": {"force4": False, "IPv4": "", "force6": False, "IPv6": ""},
        "blocking": {"force4": False, "IPv4": "", "force6": False, "IPv6": ""},
    },
}


@pytest.fixture
def dns_data():
    return copy.deepcopy(_DNS_DATA)


def test_by_type_include(dns_data):
    filter_keys = ["cache", "upstreams", "interface"]
    result = by_type(FilterType.INCLUDE, filter_keys, dns_data)
    assert len(result) == len(filter_keys)
    for key, value in dns_data.items():
        if key in filter_keys:
            assert result[key] == value
        else:
            assert key not in result


def test_by_type_exclude(dns_data):
    filter_keys = ["cache", "upstreams", "interface"]
    result = by_type(FilterType.EXCLUDE, filter_keys, dns_data)
    assert len(result) == len(dns_data) - len(filter_keys)
    for key, value in dns_data.items():
        if key in filter_keys:
            assert key not in result
        else:
            assert result[key] == value


def test_by_type_multiple_nested(dns_data):
    filter_keys = ["reply.host.force4", "reply.host.IPv4", "reply.blocking.force4"]
    result = by_type(FilterType.INCLUDE, filter_keys, dns_data)
    assert len(result) == 1
    reply = result["reply"]
    assert len(reply) == 2
    assert len(reply["host"]) == 2
    assert len(reply["blocking"]) == 1
    assert reply != dns_data["reply"]


def test_by_type_unknown_type_raises():
    with pytest.raises(ValueError, match="unknown filter type"):
        by_type("other", ["a"], {"a": 1})


def test_include_keys():
    data = {"a": 1, "b": {"c": 2, "d": 3}, "e": 4}
    result = include_keys(data, ["a", "b.c", "e"])
    assert result["a"] == 1
    assert result["b"]["c"] == 2
    assert "d" not in result["b"]
    assert result["e"] == 4
    assert len(result) == 3


def test_include_keys_missing_key():
    assert include_keys({"a": 1}, ["b"]) == {}


def test_exclude_keys():
    data = {"a": 1, "b": {"c": 2, "d": 3}, "e": 4}
    result = exclude_keys(data, ["a", "b.c"])
    assert "a" not in result
    assert "c" not in result["b"]
    assert "d" in result["b"]
    assert "e" in result


def test_exclude_keys_non_existent_key():
    data = {"a": 1}
    assert exclude_keys(data, ["b"]) == data


def test_exclude_keys_leaves_original_untouched():
    data = {"a": 1, "b": {"c": 2, "d": 3}}
    exclude_keys(data, ["b.c"])
    assert data == {"a": 1, "b": {"c": 2, "d": 3}}


def test_exclude_last_nested_key_drops_parent():
    assert exclude_keys({"b": {"c": 1}, "e": 2}, ["b.c"]) == {"e": 2}


@pytest.mark.parametrize(
    "filter_type, name, expected",
    [
        (FilterType.INCLUDE, "Include", {"a": 1}),
        (FilterType.EXCLUDE, "Exclude", {"b": 2}),
    ],
)
def test_filter_type_names(filter_type, name, expected):
    assert str(filter_type) == name
    assert by_type(filter_type, ["a"], {"a": 1, "b": 2}) == expected