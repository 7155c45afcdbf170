"""Unit tests for customer use cases"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.customers import (
    CreateCustomer,
    GetCustomer,
    UpdateCustomer,
    ListCustomers,
    CreateCustomerCommandDTO,
    UpdateCustomerCommandDTO,
)
from src.domain.customer import Customer
from src.domain.rate_card import MilkType


@pytest.fixture
def mock_customer_repo():
    repo = MagicMock()

    async def persist(customer):
        customer.id = 7
        return customer

    repo.create = AsyncMock(side_effect=persist)
    repo.get_by_external_id = AsyncMock(return_value=None)
    repo.get_by_id = AsyncMock(
        return_value=Customer(id=7, external_id="1042", name="Ramesh Patil", phone="9876543210")
    )
    repo.update = AsyncMock(side_effect=lambda customer: customer)
    return repo


@pytest.mark.asyncio
class TestCreateCustomer:

    async def test_registers_customer(self, mock_uow, mock_customer_repo):
        use_case = CreateCustomer(mock_uow, mock_customer_repo)

        result = await use_case.execute(
            CreateCustomerCommandDTO(external_id="1042", name="Ramesh Patil", default_milk_type=MilkType.BUFFALO)
        )

        assert result.is_ok()
        assert result.value.id == 7
        assert result.value.default_milk_type == MilkType.BUFFALO
        mock_uow.commit.assert_awaited_once()

    async def test_duplicate_external_id(self, mock_uow, mock_customer_repo):
        mock_customer_repo.get_by_external_id = AsyncMock(
            return_value=Customer(id=1, external_id="1042", name="Someone Else")
        )
        use_case = CreateCustomer(mock_uow, mock_customer_repo)

        result = await use_case.execute(CreateCustomerCommandDTO(external_id="1042", name="Ramesh Patil"))

        assert result.error.code == "CUSTOMER_EXISTS"
        mock_customer_repo.create.assert_not_called()

    async def test_missing_milk_type_uses_configured_default(self, mock_uow, mock_customer_repo):
        use_case = CreateCustomer(mock_uow, mock_customer_repo, default_milk_type=MilkType.BUFFALO)

        result = await use_case.execute(CreateCustomerCommandDTO(external_id="1050", name="Vijay Kale"))

        assert result.value.default_milk_type == MilkType.BUFFALO

    async def test_explicit_milk_type_beats_default(self, mock_uow, mock_customer_repo):
        use_case = CreateCustomer(mock_uow, mock_customer_repo, default_milk_type=MilkType.BUFFALO)

        result = await use_case.execute(
            CreateCustomerCommandDTO(external_id="1050", name="Vijay Kale", default_milk_type=MilkType.COW)
        )

        assert result.value.default_milk_type == MilkType.COW


@pytest.mark.asyncio
class TestGetCustomer:

    async def test_unknown_customer(self, mock_customer_repo):
        mock_customer_repo.get_by_id = AsyncMock(return_value=None)

        result = await GetCustomer(mock_customer_repo).execute(99)

        assert result.error.code == "CUSTOMER_NOT_FOUND"


@pytest.mark.asyncio
class TestUpdateCustomer:

    async def test_only_sent_fields_change(self, mock_uow, mock_customer_repo):
        """
        Given: A farmer with a phone number
        When: Only the address is sent
        Then: The address changes and the phone is kept
        """
        # Arrange
        use_case = UpdateCustomer(mock_uow, mock_customer_repo)

        # Act
        result = await use_case.execute(UpdateCustomerCommandDTO(customer_id=7, address="Ward 4, Baramati"))

        # Assert
        assert result.is_ok()
        assert result.value.address == "Ward 4, Baramati"
        assert result.value.phone == "9876543210"
        mock_uow.commit.assert_awaited_once()

    async def test_explicit_null_clears_phone(self, mock_uow, mock_customer_repo):
        result = await UpdateCustomer(mock_uow, mock_customer_repo).execute(
            UpdateCustomerCommandDTO(customer_id=7, phone=None)
        )

        assert result.value.phone is None

    async def test_deactivate(self, mock_uow, mock_customer_repo):
        result = await UpdateCustomer(mock_uow, mock_customer_repo).execute(
            UpdateCustomerCommandDTO(customer_id=7, is_active=False)
        )

        assert result.value.is_active is False
        mock_customer_repo.update.assert_awaited_once()

    async def test_required_field_cannot_be_cleared(self, mock_uow, mock_customer_repo):
        result = await UpdateCustomer(mock_uow, mock_customer_repo).execute(
            UpdateCustomerCommandDTO(customer_id=7, name=None, is_active=None)
        )

        assert result.error.code == "INVALID_CUSTOMER"
        assert result.error.message == "is_active, name cannot be cleared"
        mock_customer_repo.get_by_id.assert_not_called()

    async def test_taken_external_id(self, mock_uow, mock_customer_repo):
        mock_customer_repo.get_by_external_id = AsyncMock(
            return_value=Customer(id=8, external_id="2001", name="Sunita Jadhav")
        )

        result = await UpdateCustomer(mock_uow, mock_customer_repo).execute(
            UpdateCustomerCommandDTO(customer_id=7, external_id="2001")
        )

        assert result.error.code == "CUSTOMER_EXISTS"
        mock_customer_repo.update.assert_not_called()

    async def test_unknown_customer(self, mock_uow, mock_customer_repo):
        mock_customer_repo.get_by_id = AsyncMock(return_value=None)

        result = await UpdateCustomer(mock_uow, mock_customer_repo).execute(
            UpdateCustomerCommandDTO(customer_id=99, name="Nobody")
        )

        assert result.error.code == "CUSTOMER_NOT_FOUND"

    async def test_repository_failure_rolls_back(self, mock_uow, mock_customer_repo):
        mock_customer_repo.update = AsyncMock(side_effect=Exception("disk full"))

        result = await UpdateCustomer(mock_uow, mock_customer_repo).execute(
            UpdateCustomerCommandDTO(customer_id=7, name="Ramesh B. Patil")
        )

        assert result.error.code == "UPDATE_CUSTOMER_FAILED"
        assert result.error.reason == "disk full"
        mock_uow.rollback.assert_awaited_once()


@pytest.mark.asyncio
class TestListCustomers:

    async def test_passes_include_inactive(self, mock_customer_repo):
        mock_customer_repo.list_all = AsyncMock(
            return_value=[Customer(id=7, external_id="1042", name="Ramesh Patil", is_active=False)]
        )

        result = await ListCustomers(mock_customer_repo).execute(include_inactive=True)

        assert result.value.total == 1
        assert result.value.customers[0].is_active is False
        mock_customer_repo.list_all.assert_awaited_once_with(include_inactive=True)
