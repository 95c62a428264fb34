"""Shared pytest fixtures."""

import pytest

from first_follow import FirstFollowComputer
from grammar_model import build_shift_expression_grammar


@pytest.fixture
def shift_grammar():
    return build_shift_expression_grammar()


@pytest.fixture
def solver(shift_grammar):
    return FirstFollowComputer(shift_grammar, record_history=True)


@pytest.fixture
def client():
    from server import app
    app.config['TESTING'] = True
    with app.test_client() as test_client:
        yield test_client
