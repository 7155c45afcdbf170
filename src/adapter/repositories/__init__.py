from .customer_repository import SqlAlchemyCustomerRepository
from .rate_card_repository import SqlAlchemyRateCardRepository
from .setting_repository import SqlAlchemySettingRepository
from .milk_entry_repository import SqlAlchemyMilkEntryRepository
from .payment_repository import SqlAlchemyPaymentRepository
from .advance_repository import SqlAlchemyAdvanceRepository
from .advance_utilization_repository import SqlAlchemyAdvanceUtilizationRepository
from .amcu_log_repository import SqlAlchemyAmcuLogRepository

__all__ = [
    "SqlAlchemyCustomerRepository",
    "SqlAlchemyRateCardRepository",
    "SqlAlchemySettingRepository",
    "SqlAlchemyMilkEntryRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyAdvanceRepository",
    "SqlAlchemyAdvanceUtilizationRepository",
    "SqlAlchemyAmcuLogRepository",
]
