from .ledger import (
    ACCOUNT_TYPES,
    RECURRENCES,
    Account,
    Category,
    CategoryGroup,
    CategoryMonth,
    Payee,
    Transaction,
)
