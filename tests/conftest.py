import os
import sys

import pytest


# Ensure the repository root is on sys.path for `from chessrules...` imports
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from chessrules.config import Settings  # noqa: E402
from chessrules.engine.validator import MoveValidator  # noqa: E402


@pytest.fixture(scope="session")
def validator() -> MoveValidator:
    return MoveValidator()


@pytest.fixture
def settings() -> Settings:
    return Settings(log_level="WARNING")
