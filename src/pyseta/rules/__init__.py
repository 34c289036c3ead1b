"""Normalization rules: loading and evaluation."""

from pyseta.rules.engine import RuleEngine, apply_rules, resolve_model
from pyseta.rules.store import build_rule_store, load_rule_store, load_stop_aliases

__all__ = [
    "RuleEngine",
    "apply_rules",
    "build_rule_store",
    "load_rule_store",
    "load_stop_aliases",
    "resolve_model",
]
