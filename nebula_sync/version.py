"""Version string."""

VERSION = "dev"


def user_agent() -> str:
    """Return the User-Agent header value."""
    return f"nebula-sync/{VERSION}"