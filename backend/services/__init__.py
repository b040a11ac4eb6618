"""Backend services (rule storage, monitoring)."""

from backend.services.rules_service import (
    InvalidRuleNameError,
    get_rule_source,
    get_rules_dir,
    import_rules_dir,
    list_rule_names,
    save_rule,
    translate_rule,
    validate_rule_name,
)
from backend.services.monitoring_service import check_db, get_health, get_metrics

__all__ = [
    "InvalidRuleNameError",
    "get_rule_source",
    "get_rules_dir",
    "import_rules_dir",
    "list_rule_names",
    "save_rule",
    "translate_rule",
    "validate_rule_name",
    "check_db",
    "get_health",
    "get_metrics",
]
