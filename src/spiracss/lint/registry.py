# src/spiracss/lint/registry.py
import importlib
import pkgutil
import logging
from typing import List, Set

from .core import LintRule, RuleSet

logger = logging.getLogger(__name__)

RULES_PACKAGE = "spiracss.lint.rules"


class LintRegistry:
    """
    Central registry for HTML structure lint rules.

    Dynamically discovers RuleSet modules from the 'spiracss.lint.rules' package
    and keeps their rules in RuleSet order, so issues are reported in a stable
    sequence for every node.
    """

    _rule_sets: List[RuleSet] = []
    _all_codes: Set[str] = set()
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        """
        Registers every module in 'spiracss.lint.rules' that defines a `DEFINITION`
        attribute (instance of `RuleSet`).
        """
        if cls._loaded:
            return

        try:
            rules_pkg = importlib.import_module(RULES_PACKAGE)
        except ImportError as e:
            logger.error(f"Could not find rules package: {e}")
            return

        found: List[RuleSet] = []
        for _, name, _ in pkgutil.iter_modules(rules_pkg.__path__):
            full_name = f"{RULES_PACKAGE}.{name}"
            try:
                module = importlib.import_module(full_name)
            except Exception as e:
                logger.error(f"Error loading rule module {name}: {e}")
                continue

            definition = getattr(module, "DEFINITION", None)
            if isinstance(definition, RuleSet):
                found.append(definition)
                cls._all_codes.update(definition.codes)
                logger.debug(f"Lint rule set loaded: {definition.name} ({len(definition.rules)} rules)")

        cls._rule_sets = sorted(found, key=lambda rule_set: (rule_set.order, rule_set.name))
        cls._loaded = True

    @classmethod
    def get_all_rules(cls) -> List[LintRule]:
        """Returns all registered rule functions in evaluation order."""
        return [rule for rule_set in cls._rule_sets for rule in rule_set.rules]

    @classmethod
    def get_all_possible_codes(cls) -> List[str]:
        """Returns every issue code the registered rules can report."""
        return sorted(cls._all_codes)
