from .base import BaseModel, generate_uuid
from .customer import Customer
from .rate_card import RateCard, MilkType
from .setting import Setting
from .milk_entry import MilkEntry, Shift, EntrySource
from .payment import Payment, PaymentMode
from .advance import Advance, AdvanceStatus
from .advance_utilization import AdvanceUtilization
from .amcu_log import AmcuLog
from .events import DomainEvent, EntryCreated, DecoderError, DecoderErrorType, PaymentRecorded

__all__ = [
    "BaseModel",
    "generate_uuid",
    "Customer",
    "RateCard",
    "MilkType",
    "Setting",
    "MilkEntry",
    "Shift",
    "EntrySource",
    "Payment",
    "PaymentMode",
    "Advance",
    "AdvanceStatus",
    "AdvanceUtilization",
    "AmcuLog",
    "DomainEvent",
    "EntryCreated",
    "DecoderError",
    "DecoderErrorType",
    "PaymentRecorded",
]
