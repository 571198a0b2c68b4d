"""핵심 비즈니스 로직"""

from .models import (
    InvalidTransactionError,
    BuyerType,
    ValidationStatus,
    TransactionType,
    InvoiceLine,
    TransactionContext,
    ValidationResultEntry,
)
from .rule_config import TaxRuleConfig, RuleConfigError, get_default_config, reset_default_config
from .classifier import Classification, JurisdictionClassifier
from .rules import RuleOutcome, DEFAULT_RULES
from .validation_report import (
    ValidationReport,
    ValidationSummary,
    generate_summary,
    is_valid,
    reverse_charge_required,
    tax_exemption_applicable,
)
from .rule_engine import RuleEngine
from .context_builder import build_context, context_from_dict
from .report_cache import ReportCache, fingerprint

__all__ = [
    'InvalidTransactionError',
    'BuyerType',
    'ValidationStatus',
    'TransactionType',
    'InvoiceLine',
    'TransactionContext',
    'ValidationResultEntry',
    'TaxRuleConfig',
    'RuleConfigError',
    'get_default_config',
    'reset_default_config',
    'Classification',
    'JurisdictionClassifier',
    'RuleOutcome',
    'DEFAULT_RULES',
    'ValidationReport',
    'ValidationSummary',
    'generate_summary',
    'is_valid',
    'reverse_charge_required',
    'tax_exemption_applicable',
    'RuleEngine',
    'build_context',
    'context_from_dict',
    'ReportCache',
    'fingerprint',
]
