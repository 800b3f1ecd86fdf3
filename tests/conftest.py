import pytest

from he_linreg.circuits import compile_program
from he_linreg.client import Client
from he_linreg.encoding import EncodingKind
from he_linreg.server import Server


@pytest.fixture(scope="session")
def rational_program():
    return compile_program(EncodingKind.RATIONAL)


@pytest.fixture(scope="session")
def fixed_point_program():
    return compile_program(EncodingKind.FIXED_POINT)


@pytest.fixture(scope="session")
def rational_client(rational_program):
    return Client(EncodingKind.RATIONAL, program=rational_program)


@pytest.fixture(scope="session")
def fixed_point_client(fixed_point_program):
    return Client(EncodingKind.FIXED_POINT, program=fixed_point_program)


@pytest.fixture(scope="session")
def rational_server(rational_client):
    return Server(rational_client.public_key)


@pytest.fixture(scope="session")
def fixed_point_server(fixed_point_client):
    return Server(fixed_point_client.public_key)
