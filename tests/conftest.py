from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


def contact_payload(**overrides) -> dict:
    payload = {
        "domain": "location",
        "aor": "test@192.168.20.21",
        "uri": "sip:40936782@192.168.10.179:57028",
        "received": "sip:192.168.10.179:57028",
        "path": None,
        "qval": -1,
        "user_agent": "Blink 8.9.4 (MacOSX)",
        "socket": "udp:192.168.20.21:5060",
        "bflags": 0,
        "expires": 1695054721,
        "callid": "4VWWnqsOg9TIRYSyFN.08yXb-EvVtTP8",
        "cseq": 1,
        "attr": "",
        "latency": 0,
        "shtag": "",
    }
    payload.update(overrides)
    return payload


def message(method: str, params) -> bytes:
    return json.dumps({"jsonrpc": "2.0", "method": method, "params": params}).encode()


@pytest.fixture()
def contact() -> dict:
    return contact_payload()


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    from config.settings import get_settings

    monkeypatch.chdir(REPO_ROOT)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
