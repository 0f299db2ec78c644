import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from classbuilder import ClassBuilder


@pytest.fixture
def builder():
    return ClassBuilder()
