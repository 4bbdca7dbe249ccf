from nebula_sync.version import VERSION, user_agent


def test_user_agent_contains_version():
    assert user_agent() == f"nebula-sync/{VERSION}"


def test_user_agent_default_value():
    assert user_agent() == "nebula-sync/dev"