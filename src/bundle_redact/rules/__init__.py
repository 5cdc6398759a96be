"""Rule package exports."""
from .builtin import BUILTIN_RULES, BuiltinRule
from .compiler import CompiledPattern, compile_pair, compile_pattern
from .schema import MultiLinePair, RuleSpec, rules_from_data, rules_from_path

__all__ = [
    "BUILTIN_RULES",
    "BuiltinRule",
    "CompiledPattern",
    "MultiLinePair",
    "RuleSpec",
    "compile_pair",
    "compile_pattern",
    "rules_from_data",
    "rules_from_path",
]
