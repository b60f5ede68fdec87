"""
Contract Validation Module

Модуль для валидации JSON контрактов persisted state.
"""

from .validators import (
    ActiveStockHoldingValidator,
    ContractValidator,
    PassiveInvestmentStateValidator,
    SchemaLoader,
    validate_active_stock_holding,
    validate_passive_investment_state,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "PassiveInvestmentStateValidator",
    "ActiveStockHoldingValidator",
    # Functions
    "validate_passive_investment_state",
    "validate_active_stock_holding",
]
