# tests/conftest.py
import logging
import os
import sys

import pytest

# Ensure project root is on sys.path so 'import layercfg' works without an install
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from layercfg.filesystem import MemoryFileSystem  # noqa: E402

FIRST_YAML = """yaml:
  key: "value"
  bool: true
  int: 1
  float: 2.4
  time: "2021-09-11 12:34:56"
  duration: 5s
"""

SECOND_YAML = """yaml:
  key: "value2"
  more:
    key2: "secondfile"
"""


@pytest.fixture
def log():
    """Logger handed to containers; records reach caplog through propagation."""
    return logging.getLogger("tests.layercfg")


@pytest.fixture
def mem_fs():
    return MemoryFileSystem()


@pytest.fixture
def first_yaml():
    return FIRST_YAML


@pytest.fixture
def second_yaml():
    return SECOND_YAML
