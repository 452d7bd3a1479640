"""Software-evolution analytics over the indexed history."""

from .engine import AnalyticsEngine
from .models import (
    AuthorActivity,
    ChangeCouplingEdge,
    CommitSpreadEntry,
    HotspotEntry,
    ModuleEntry,
    OwnershipEntry,
    SumOfCouplingsEntry,
    Summary,
)
from .rules import AuthorAliases, IgnoreRules, ModuleRules, RuleSet, load_rules
from .state import AnalyticsState
from .trees import Tree
from .view import ActiveView, DateRange

__all__ = [
    "ActiveView",
    "AnalyticsEngine",
    "AnalyticsState",
    "AuthorActivity",
    "AuthorAliases",
    "ChangeCouplingEdge",
    "CommitSpreadEntry",
    "DateRange",
    "HotspotEntry",
    "IgnoreRules",
    "ModuleEntry",
    "ModuleRules",
    "OwnershipEntry",
    "RuleSet",
    "SumOfCouplingsEntry",
    "Summary",
    "Tree",
    "load_rules",
]
