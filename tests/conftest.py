from __future__ import annotations

import pytest

from kb_ke_util import AuthToken, KbKeUtilClient

from .stubs import SERVICE_URL, TOKEN


@pytest.fixture
def client() -> KbKeUtilClient:
    # Token handed in directly: construction never touches the network.
    ke = KbKeUtilClient(SERVICE_URL, token=AuthToken(token=TOKEN, user_name="alice"))
    yield ke
    ke.close()


@pytest.fixture
def anon_client() -> KbKeUtilClient:
    ke = KbKeUtilClient(SERVICE_URL)
    yield ke
    ke.close()
