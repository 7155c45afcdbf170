from .customer_repository import CustomerRepository
from .rate_card_repository import RateCardRepository
from .setting_repository import SettingRepository
from .milk_entry_repository import MilkEntryRepository
from .payment_repository import PaymentRepository
from .advance_repository import AdvanceRepository, AllocationConflictError
from .advance_utilization_repository import AdvanceUtilizationRepository
from .amcu_log_repository import AmcuLogRepository

__all__ = [
    "CustomerRepository",
    "RateCardRepository",
    "SettingRepository",
    "MilkEntryRepository",
    "PaymentRepository",
    "AdvanceRepository",
    "AllocationConflictError",
    "AdvanceUtilizationRepository",
    "AmcuLogRepository",
]
