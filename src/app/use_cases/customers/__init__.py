"""Customer use cases"""
from .manage_customers import CreateCustomer, GetCustomer, UpdateCustomer, ListCustomers
from .dtos import CreateCustomerCommandDTO, UpdateCustomerCommandDTO, CustomerDTO, ListCustomersResponseDTO

__all__ = [
    "CreateCustomer",
    "GetCustomer",
    "UpdateCustomer",
    "ListCustomers",
    "CreateCustomerCommandDTO",
    "UpdateCustomerCommandDTO",
    "CustomerDTO",
    "ListCustomersResponseDTO",
]
