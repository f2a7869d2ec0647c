"""Built-in intrinsic signatures for AZSL/HLSL."""

from __future__ import annotations
from dataclasses import dataclass

from azslsense.builtins.types import (
    MatrixType, VectorType, resolve_type, vector_name,
)

# Return-type rules
SAME_AS_ARG0 = "arg0"
SAME_AS_ARG1 = "arg1"
SAME_AS_LAST = "last"
COMPONENT_OF_ARG0 = "component"
MUL = "mul"


@dataclass(frozen=True)
class IntrinsicSig:
    name: str
    returns: str  # a rule above, or a concrete type name
    arity: int = 1


def _build_intrinsics() -> dict[str, IntrinsicSig]:
    table: dict[str, IntrinsicSig] = {}

    def add(names, returns, arity=1):
        for n in names:
            table[n] = IntrinsicSig(n, returns, arity)

    # --- component-wise math, result shaped like the first argument ---
    add(["abs", "acos", "asin", "atan", "ceil", "cos", "cosh", "ddx", "ddx_coarse",
         "ddx_fine", "ddy", "ddy_coarse", "ddy_fine", "degrees", "exp", "exp2",
         "floor", "frac", "fwidth", "log", "log10", "log2", "normalize", "radians",
         "rcp", "round", "rsqrt", "saturate", "sign", "sin", "sinh", "sqrt", "tan",
         "tanh", "trunc", "reversebits", "countbits", "firstbithigh", "firstbitlow",
         "f32tof16", "f16tof32"], SAME_AS_ARG0)
    add(["atan2", "fmod", "max", "min", "pow", "reflect", "ldexp"], SAME_AS_ARG0, 2)
    add(["clamp", "lerp", "mad", "refract", "faceforward", "fma"], SAME_AS_ARG0, 3)
    add(["step"], SAME_AS_ARG1, 2)
    add(["smoothstep"], SAME_AS_LAST, 3)

    # --- reductions ---
    add(["length"], COMPONENT_OF_ARG0)
    add(["dot", "distance"], COMPONENT_OF_ARG0, 2)
    add(["determinant"], COMPONENT_OF_ARG0)
    add(["cross"], "float3", 2)
    add(["any", "all", "isnan", "isinf", "isfinite"], "bool")

    # --- reinterpretation ---
    add(["asfloat"], "float")
    add(["asint"], "int")
    add(["asuint"], "uint")
    add(["asdouble"], "double", 2)

    # --- matrix ---
    add(["mul"], MUL, 2)
    add(["transpose"], SAME_AS_ARG0)

    # --- no useful value ---
    add(["clip", "sincos", "modf", "frexp", "lit", "dst", "msad4", "noise",
         "abort", "errorf", "printf", "tex1D", "tex2D", "tex3D", "texCUBE"], "void")
    return table


INTRINSICS: dict[str, IntrinsicSig] = _build_intrinsics()

INTRINSIC_NAMES = frozenset(INTRINSICS)


def _transpose(type_name: str) -> str | None:
    t = resolve_type(type_name)
    if isinstance(t, MatrixType):
        return f"{t.component}{t.cols}x{t.rows}"
    return type_name


def _mul_result(left: str | None, right: str | None) -> str | None:
    # mul(vector, matrix) yields a row vector sized by the matrix columns;
    # every other combination reports the second operand's type.
    lt = resolve_type(left) if left else None
    rt = resolve_type(right) if right else None
    if isinstance(lt, VectorType) and isinstance(rt, MatrixType):
        return vector_name(rt.component, rt.cols)
    return right


def intrinsic_return_type(name: str, arg_types: list[str | None]) -> str | None:
    """Result type of an intrinsic call, or None when it cannot be told."""
    sig = INTRINSICS.get(name)
    if sig is None:
        return None
    rule = sig.returns
    if rule == MUL:
        if len(arg_types) != 2:
            return None
        return _mul_result(arg_types[0], arg_types[1])
    if rule == SAME_AS_ARG0:
        if not arg_types:
            return None
        if name == "transpose" and arg_types[0]:
            return _transpose(arg_types[0])
        return arg_types[0]
    if rule == SAME_AS_ARG1:
        return arg_types[1] if len(arg_types) > 1 else None
    if rule == SAME_AS_LAST:
        return arg_types[-1] if arg_types else None
    if rule == COMPONENT_OF_ARG0:
        if not arg_types or arg_types[0] is None:
            return None
        t = resolve_type(arg_types[0])
        if isinstance(t, (VectorType, MatrixType)):
            return t.component
        return arg_types[0]
    if rule == "void":
        return None
    return rule
