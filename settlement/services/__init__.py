"""
Services.

Business logic layer.
"""

from settlement.services.base_service import BaseService, ServiceResult, log_operation
from settlement.services.settlement_service import SettlementService


__all__ = [
    "BaseService",
    "ServiceResult",
    "SettlementService",
    "log_operation",
]
