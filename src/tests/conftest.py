import pytest

from contract_guard.services.contract_validator import ContractValidator
from contract_guard.services.fixtures import TestDataGenerators


@pytest.fixture
def validator():
    return ContractValidator()


@pytest.fixture
def gen():
    return TestDataGenerators()
