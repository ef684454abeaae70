import pytest

from ink_diffuser.brush.backend import initialize_backend


@pytest.fixture(scope="session", autouse=True)
def taichi_cpu():
    """all tests share one CPU taichi runtime"""
    initialize_backend("cpu")
