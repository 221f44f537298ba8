import pytest
from fastapi.testclient import TestClient

import service1
import service2


@pytest.fixture(params=[service1, service2], ids=lambda module: module.SERVICE_NAME)
def service(request):
    return request.param


@pytest.fixture
def client(service):
    return TestClient(service.app)
