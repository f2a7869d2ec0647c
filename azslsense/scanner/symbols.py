"""Cross-reference symbol extraction.

Collects the short tokens worth offering as completions across the corpus:
SRG semantics, attributes, PascalCase type names, texture methods, vertex
semantics and option-style ``o_`` names.
"""

from __future__ import annotations
import re

MAX_SYMBOL_LENGTH = 64

_PATTERNS = (
    re.compile(r"\bSRG_[A-Za-z0-9_]+\b"),
    re.compile(r"\[\[[A-Za-z0-9_:\s,()]+\]\]"),
    re.compile(r"\[(unroll|loop|flatten|branch|allow_uav_condition)\]"),
    re.compile(r"\b[A-Z][A-Za-z0-9_]+\b"),
    re.compile(r"\b(Sample|SampleCmp|GetDimensions)\b"),
    re.compile(r":[ \t]*(SV_[A-Za-z0-9_]+|TEXCOORD[0-9]+|POSITION|NORMAL)\b"),
    re.compile(r"\bo_[A-Za-z0-9_]+\b"),
)


def extract_symbols(text: str) -> set[str]:
    symbols: set[str] = set()
    for pattern in _PATTERNS:
        for m in pattern.finditer(text):
            value = m.group(1) if pattern.groups else m.group(0)
            if value and len(value) <= MAX_SYMBOL_LENGTH:
                symbols.add(value)
    return symbols
