"""Ledger use cases"""
from .get_statement import GetStatement
from .apply_payment import ApplyPayment
from .create_advance import CreateAdvance
from .get_advance_balance import GetAdvanceBalance
from .manage_payments import ListPayments, CorrectPayment
from .manage_advances import ListAdvances, UpdateAdvance
from .dtos import (
    LedgerLineKind,
    LedgerLineDTO,
    StatementSummaryDTO,
    StatementResponseDTO,
    ApplyPaymentCommandDTO,
    ApplyPaymentResponseDTO,
    PaymentDTO,
    AdvanceAllocationDTO,
    CreateAdvanceCommandDTO,
    AdvanceDTO,
    AdvanceBalanceResponseDTO,
    ListPaymentsResponseDTO,
    CorrectPaymentCommandDTO,
    ListAdvancesResponseDTO,
    UpdateAdvanceCommandDTO,
)

__all__ = [
    "GetStatement",
    "ApplyPayment",
    "CreateAdvance",
    "GetAdvanceBalance",
    "ListPayments",
    "CorrectPayment",
    "ListAdvances",
    "UpdateAdvance",
    "LedgerLineKind",
    "LedgerLineDTO",
    "StatementSummaryDTO",
    "StatementResponseDTO",
    "ApplyPaymentCommandDTO",
    "ApplyPaymentResponseDTO",
    "PaymentDTO",
    "AdvanceAllocationDTO",
    "CreateAdvanceCommandDTO",
    "AdvanceDTO",
    "AdvanceBalanceResponseDTO",
    "ListPaymentsResponseDTO",
    "CorrectPaymentCommandDTO",
    "ListAdvancesResponseDTO",
    "UpdateAdvanceCommandDTO",
]
