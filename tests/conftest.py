from urllib.parse import SplitResult

import pytest

IDENTITY_ENV = ("NODE_NAME", "POD_NAME", "POD_NAMESPACE", "POD_IP", "DYNAMIC_SOURCES")


@pytest.fixture(autouse=True)
def clean_identity_env(monkeypatch):
    """Keep downward-API variables of the test host out of config loading."""
    for name in IDENTITY_ENV:
        monkeypatch.delenv(name, raising=False)


def make_url(netloc: str = "", query: str = "", path: str = "") -> SplitResult:
    """Build an endpoint URL from its parts."""
    return SplitResult("", netloc, path, query, "")
