"""Weighted moral-rule evaluation."""

from conscience.evaluator import RuleEvaluator
from conscience.keywords import DescriptionKeywordPolicy, KeywordPolicy
from conscience.rules import DEFAULT_RULES, Evaluation, MoralRule

__all__ = [
    "DEFAULT_RULES",
    "DescriptionKeywordPolicy",
    "Evaluation",
    "KeywordPolicy",
    "MoralRule",
    "RuleEvaluator",
]
