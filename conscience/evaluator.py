"""Weighted moral-rule evaluator."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from conscience.keywords import DescriptionKeywordPolicy, KeywordPolicy
from conscience.repository import RuleRepository
from conscience.rules import DEFAULT_RULES, Evaluation, MoralRule
from conscience.shared_map import SharedMap
from core.errors import RuleConflictError, RuleNotFoundError

logger = logging.getLogger("cm.conscience")


class RuleEvaluator:
    """Scores free text against a shared set of weighted rules.

    A rule fires when the keyword policy matches the action; every fired
    rule contributes its full weight. The score is the plain sum, so the
    order in which rules are visited does not matter.
    """

    def __init__(
        self,
        rules: Iterable[MoralRule] = DEFAULT_RULES,
        policy: KeywordPolicy | None = None,
        repository: RuleRepository | None = None,
    ) -> None:
        self.policy = policy or DescriptionKeywordPolicy()
        self.repository = repository
        self._rules: SharedMap[str, MoralRule] = SharedMap()

        initial = list(rules)
        if repository is not None:
            repository.seed(initial)
            initial = repository.load()
        for rule in initial:
            self._rules.put(rule.name, rule)

    def evaluate(self, action: str) -> Evaluation:
        """Return the summed weight of all rules triggered by ``action``."""
        if not action or not action.strip():
            return Evaluation(score=0.0, action=action or "")

        score = 0.0
        triggered: list[str] = []
        for rule in self._rules.values():
            if self.policy.matches(rule, action):
                score += rule.weight
                triggered.append(rule.name)
        logger.debug("Evaluated action (%d chars): score=%s rules=%s", len(action), score, triggered)
        return Evaluation(score=score, action=action, triggered=tuple(sorted(triggered)))

    def add_rule(
        self,
        name: str,
        description: str,
        weight: float,
        keywords: Iterable[str] = (),
        replace: bool = False,
    ) -> MoralRule:
        """Register a rule; duplicates raise unless ``replace`` is set."""
        rule = MoralRule(
            name=name,
            description=description,
            weight=float(weight),
            keywords=tuple(keywords),
        )
        if replace:
            previous = self._rules.put(name, rule)
        else:
            if not self._rules.put_if_absent(name, rule):
                raise RuleConflictError(name)
            previous = None

        if self.repository is not None:
            try:
                self.repository.save(rule)
            except Exception:
                if previous is None:
                    self._rules.pop(name)
                else:
                    self._rules.put(name, previous)
                raise
        logger.info("Added moral rule %s with weight %s (replaced=%s)", name, rule.weight, previous is not None)
        return rule

    def remove_rule(self, name: str) -> MoralRule:
        """Remove and return the named rule."""
        removed = self._rules.pop(name)
        if removed is None:
            raise RuleNotFoundError(name)
        if self.repository is not None:
            try:
                self.repository.delete(name)
            except Exception:
                self._rules.put(name, removed)
                raise
        logger.info("Removed moral rule %s", name)
        return removed

    def get_rule(self, name: str) -> MoralRule:
        rule = self._rules.get(name)
        if rule is None:
            raise RuleNotFoundError(name)
        return rule

    def list_rules(self) -> list[MoralRule]:
        """Snapshot of all rules in insertion order."""
        return self._rules.values()

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)
