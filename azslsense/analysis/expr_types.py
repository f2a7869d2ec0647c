"""Best-effort static typing of the expression in front of ``.`` or ``::``.

The operand text is parsed with a small lark grammar and folded into a type
name by ``_ExprTyper``. Any failure (unparsable text, unknown variable,
unsupported construct) yields None, which callers treat as "do not check".
"""

from __future__ import annotations
from functools import lru_cache
from pathlib import Path

from lark import Lark, Token, Transformer, Tree
from lark.exceptions import LarkError

from azslsense.builtins.functions import INTRINSICS, intrinsic_return_type
from azslsense.builtins.types import (
    MatrixType, ScalarType, TextureType, VectorType, element_type,
    resolve_type, strip_template, swizzle_type, template_argument,
)
from azslsense.logging import get_logger

log = get_logger(__name__)

_GRAMMAR_PATH = Path(__file__).parent.parent / "grammar" / "expr.lark"

_parser = Lark(
    _GRAMMAR_PATH.read_text(encoding="utf-8"),
    parser="earley",
    propagate_positions=False,
)

_TEXTURE_SCALAR_METHODS = frozenset(["SampleCmp", "SampleCmpLevelZero", "CalculateLevelOfDetail"])
_TEXTURE_VALUE_METHODS = frozenset([
    "Sample", "SampleLevel", "SampleGrad", "SampleBias", "Load", "Gather",
    "GatherRed", "GatherGreen", "GatherBlue", "GatherAlpha",
])
_COMPARISON_OPS = frozenset(["==", "!=", "<", ">", "<=", ">="])


class TypeEnvironment:
    """Name lookups the typer needs. Every hook may return None."""

    def variable_type(self, name: str) -> str | None:
        return None

    def member_type(self, owner_type: str, member: str) -> str | None:
        return None

    def function_type(self, name: str) -> str | None:
        return None


def _is_identifier(text: str) -> bool:
    return text.replace("_", "a").isalnum() and not text[0].isdigit()


@lru_cache(maxsize=2048)
def _parse(text: str) -> Tree | Token | None:
    try:
        return _parser.parse(text)
    except LarkError as exc:
        log.debug("expression_unparsed", expression=text, error=type(exc).__name__)
        return None


def _arith(left: str | None, right: str | None) -> str | None:
    if left is None or right is None:
        return None
    if left == right:
        return left
    lt, rt = resolve_type(left), resolve_type(right)
    if isinstance(lt, (VectorType, MatrixType)) and isinstance(rt, ScalarType):
        return left
    if isinstance(rt, (VectorType, MatrixType)) and isinstance(lt, ScalarType):
        return right
    if isinstance(lt, ScalarType) and isinstance(rt, ScalarType):
        # int op float promotes
        return left if left in ("float", "double", "half") else right
    return None


class _ExprTyper(Transformer):
    """Folds an expression tree into the name of its type."""

    def __init__(self, env: TypeEnvironment):
        super().__init__()
        self.env = env

    # --- leaves ---

    def number_lit(self, args):
        text = str(args[0]).lower()
        if text.startswith("0x"):
            return "uint" if "u" in text else "int"
        if any(c in text for c in ".e") or text.endswith(("f", "h")):
            return "half" if text.endswith("h") else "float"
        return "uint" if text.endswith("u") else "int"

    def var_ref(self, args):
        name = str(args[0])
        if name in ("true", "false"):
            return "bool"
        return self.env.variable_type(name)

    def qualified_ref(self, args):
        names = [str(a) for a in args]
        return self.env.member_type("::".join(names[:-1]), names[-1])

    # --- calls ---

    def arg_list(self, args):
        return list(args)

    def call_expr(self, args):
        name = str(args[0])
        arg_types = args[1] if len(args) > 1 and isinstance(args[1], list) else []
        if isinstance(resolve_type(name), (ScalarType, VectorType, MatrixType)):
            return name
        if name in INTRINSICS:
            return intrinsic_return_type(name, arg_types)
        return self.env.function_type(name)

    def qualified_call(self, args):
        names = [str(a) for a in args if isinstance(a, Token)]
        return self.env.member_type("::".join(names[:-1]), names[-1])

    def method_call(self, args):
        base, name = args[0], str(args[1])
        if base is None:
            return None
        t = resolve_type(base)
        if isinstance(t, TextureType):
            if name in _TEXTURE_SCALAR_METHODS:
                return "float"
            if name in _TEXTURE_VALUE_METHODS:
                return template_argument(base) or "float4"
            return None
        return self.env.member_type(base, name)

    # --- access ---

    def field_access(self, args):
        base, name = args[0], str(args[1])
        if base is None:
            return None
        if isinstance(resolve_type(base), VectorType):
            return swizzle_type(base, name)
        return self.env.member_type(base, name)

    def index_access(self, args):
        base = args[0]
        if base is None:
            return None
        if base.endswith("[]"):
            return base[:-2]
        return element_type(base)

    # --- operators ---

    def unary(self, args):
        op, operand = str(args[0]), args[1]
        if op == "!":
            return "bool"
        return operand

    def ternary_expr(self, args):
        if len(args) == 1:
            return args[0]
        a, b = args[1], args[2]
        return a if a is not None else b

    def _fold(self, args):
        result = args[0]
        for i in range(1, len(args) - 1, 2):
            op, right = str(args[i]), args[i + 1]
            if op in _COMPARISON_OPS:
                result = "bool"
            else:
                result = _arith(result, right)
        return result

    def or_expr(self, args):
        return "bool"

    def and_expr(self, args):
        return "bool"

    def bitwise_expr(self, args):
        return self._fold(args)

    def equality_expr(self, args):
        return "bool"

    def comparison_expr(self, args):
        return "bool"

    def shift_expr(self, args):
        return self._fold(args)

    def additive_expr(self, args):
        return self._fold(args)

    def multiplicative_expr(self, args):
        return self._fold(args)


def infer_expression_type(text: str, env: TypeEnvironment) -> str | None:
    """Type name of ``text``, or None when it cannot be determined."""
    text = text.strip()
    if not text:
        return None
    if _is_identifier(text):
        return env.variable_type(text)
    tree = _parse(text)
    if tree is None:
        return None
    if isinstance(tree, Token):
        return None
    try:
        result = _ExprTyper(env).transform(tree)
    except LarkError as exc:
        # visit errors wrap exceptions raised by lookups
        log.debug("expression_untyped", expression=text, error=str(exc))
        return None
    return result if isinstance(result, str) else None


def operand_before(text: str, end: int) -> tuple[str, int] | None:
    """The expression that ends right before column ``end``.

    Walks backwards over identifiers, ``.`` and ``::`` chains and balanced
    ``(...)``/``[...]`` groups. Returns ``(expression, start_column)``.
    """
    i = end
    while i > 0 and text[i - 1] in " \t":
        i -= 1
    while i > 0:
        ch = text[i - 1]
        if ch in ")]":
            j = _matching_open(text, i - 1)
            if j is None:
                return None
            i = j
            if ch == "]":
                continue
            k = i
            while k > 0 and (text[k - 1].isalnum() or text[k - 1] == "_"):
                k -= 1
            i = k
        elif ch.isalnum() or ch == "_":
            while i > 0 and (text[i - 1].isalnum() or text[i - 1] == "_"):
                i -= 1
        else:
            break
        k = i
        while k > 0 and text[k - 1] in " \t":
            k -= 1
        if k > 1 and text[k - 2:k] == "::":
            i = k - 2
        elif k > 0 and text[k - 1] == "." and not (k > 1 and text[k - 2] == "."):
            i = k - 1
        else:
            break
        while i > 0 and text[i - 1] in " \t":
            i -= 1
    expr = text[i:end].strip()
    if not expr or expr[0] in ".:":
        return None
    return expr, i


def _matching_open(text: str, close_index: int) -> int | None:
    pairs = {")": "(", "]": "["}
    stack = []
    for idx in range(close_index, -1, -1):
        ch = text[idx]
        if ch in pairs:
            stack.append(pairs[ch])
        elif ch in "([":
            if not stack or stack[-1] != ch:
                return None
            stack.pop()
            if not stack:
                return idx
    return None


def base_type_name(type_name: str) -> str:
    return strip_template(type_name).rstrip("[]")
