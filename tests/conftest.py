# Shared fixtures: a compiled neutral-ramp spec and its registry.

import pytest

from contrast_tokens.design.processor import compile_spec
from contrast_tokens.design.registry import build_registry

from factories import make_spec


@pytest.fixture
def neutral_raw():
    return make_spec()


@pytest.fixture
def processed(neutral_raw):
    return compile_spec(neutral_raw)


@pytest.fixture
def registry(processed):
    return build_registry(processed)
