"""
Call type classification for Sentinel.

The rule table below is evaluated top to bottom and the first matching
pattern decides the category. The order is part of the contract: a call
type such as "ARMED ROBBERY" matches both the violent and the weapons rule
and must resolve to violent because that rule is listed first.
"""

import re
from typing import NamedTuple, Pattern, Tuple
from .models import Category, Classification


class Rule(NamedTuple):
    pattern: Pattern[str]
    category: Category
    priority: int


def _rule(expr: str, category: Category, priority: int) -> Rule:
    return Rule(re.compile(rf"\b(?:{expr})\b", re.IGNORECASE), category, priority)


RULES: Tuple[Rule, ...] = (
    _rule(r"homicide|shoot(?:ing|s)|shots? fired|stabbing|robbery|assault with a deadly weapon", "violent", 10),
    _rule(r"brandishing|gun|weapon|armed|carjacking", "weapons", 20),
    _rule(
        r"burglary|residential burglary|commercial burglary|theft|larceny|larcen|shoplift(?:ing)?|stolen|auto theft|vehicle theft",
        "property",
        30,
    ),
    _rule(r"traffic collision|hit ?&? ?(?:and )?run|dui|reckless|speed|non-?injury|injury", "traffic", 40),
    _rule(r"disturbance|battery|domestic|fight|prowler|noise", "disturbance", 50),
    _rule(r"drug|narcotic|controlled substance|possession", "drug", 60),
    _rule(r"overdose|medical aid|ambulance|unconscious|cpr", "medical", 70),
    _rule(r"vehicle stop|patrol check|information|follow up|admin|welfare check", "admin", 90),
)

DEFAULT = Classification(category="other", priority=80)


def classify(call_type: str) -> Classification:
    """
    Map a free-text call type to a category and priority.

    Args:
        call_type: Call description as published by the feed

    Returns:
        Classification of the first matching rule, or other/80
    """
    text = call_type or ""
    for rule in RULES:
        if rule.pattern.search(text):
            return Classification(category=rule.category, priority=rule.priority)
    return DEFAULT
