"""Pytest configuration and fixtures."""

import pytest

from appchain.runtime import AppChain
from tests.helpers import create_lbp_pool, make_chain


@pytest.fixture
def chain() -> AppChain:
    """A fresh chain at height 0."""
    return make_chain()


@pytest.fixture
def chain_with_pool(chain: AppChain) -> AppChain:
    """Chain with the default A/B pool created at height 0 by ALICE.

    ALICE holds 1_000_000 of each token after the deposit; BOB collects fees.
    """
    create_lbp_pool(chain)
    return chain
