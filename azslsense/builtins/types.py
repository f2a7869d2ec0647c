"""Built-in type definitions for AZSL."""

from __future__ import annotations
import itertools
import re
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class AzslType:
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class ScalarType(AzslType):
    pass


@dataclass(frozen=True)
class VectorType(AzslType):
    component: str   # "float", "half", "int", "uint", ...
    size: int        # 2, 3, 4


@dataclass(frozen=True)
class MatrixType(AzslType):
    component: str
    rows: int
    cols: int


@dataclass(frozen=True)
class TextureType(AzslType):
    pass


@dataclass(frozen=True)
class SamplerType(AzslType):
    pass


@dataclass(frozen=True)
class BufferType(AzslType):
    pass


SCALAR_NAMES = (
    "float", "half", "double", "real", "int", "uint", "bool", "dword",
    "min16float", "min10float", "min16int", "min12int", "min16uint",
    "float16_t", "float32_t", "float64_t", "int16_t", "int32_t", "int64_t",
    "uint16_t", "uint32_t", "uint64_t",
)

TEXTURE_TYPES = (
    "Texture1D", "Texture1DArray", "Texture2D", "Texture2DArray",
    "Texture2DMS", "Texture2DMSArray", "Texture3D", "TextureCube",
    "TextureCubeArray", "RWTexture1D", "RWTexture1DArray", "RWTexture2D",
    "RWTexture2DArray", "RWTexture3D",
)

SAMPLER_TYPES = ("Sampler", "SamplerState", "SamplerComparisonState")

BUFFER_TYPES = (
    "Buffer", "RWBuffer", "StructuredBuffer", "RWStructuredBuffer",
    "ByteAddressBuffer", "RWByteAddressBuffer", "AppendStructuredBuffer",
    "ConsumeStructuredBuffer", "ConstantBuffer", "RaytracingAccelerationStructure",
)

# Methods callable on texture objects
TEXTURE_METHODS = (
    "Sample", "SampleLevel", "SampleGrad", "SampleBias", "SampleCmp",
    "SampleCmpLevelZero", "Load", "GetDimensions", "Gather", "GatherRed",
    "GatherGreen", "GatherBlue", "GatherAlpha", "CalculateLevelOfDetail",
)

BUFFER_METHODS = (
    "Load", "Load2", "Load3", "Load4", "Store", "Store2", "Store3", "Store4",
    "GetDimensions", "Append", "Consume", "IncrementCounter", "DecrementCounter",
)

SWIZZLE_SETS = ("xyzw", "rgba")

_scalar_alt = "|".join(sorted(SCALAR_NAMES, key=len, reverse=True))
_VECTOR_RE = re.compile(rf"^(?P<base>{_scalar_alt})(?P<size>[2-4])$")
_MATRIX_RE = re.compile(rf"^(?P<base>{_scalar_alt})(?P<rows>[1-4])x(?P<cols>[1-4])$")
_TEMPLATE_RE = re.compile(r"\s*<.*>\s*$")


def strip_template(type_name: str) -> str:
    """``Texture2D<float4>`` -> ``Texture2D``."""
    return _TEMPLATE_RE.sub("", type_name.strip())


def template_argument(type_name: str) -> str | None:
    """``StructuredBuffer<Light>`` -> ``Light``; None without template args."""
    start = type_name.find("<")
    end = type_name.rfind(">")
    if start < 0 or end <= start:
        return None
    return type_name[start + 1:end].strip() or None


@lru_cache(maxsize=512)
def resolve_type(name: str) -> AzslType | None:
    """Resolve a built-in type name, or None for anything user-defined."""
    base = strip_template(name)
    if base in SCALAR_NAMES:
        return ScalarType(base)
    m = _VECTOR_RE.match(base)
    if m:
        return VectorType(base, m.group("base"), int(m.group("size")))
    m = _MATRIX_RE.match(base)
    if m:
        return MatrixType(base, m.group("base"), int(m.group("rows")), int(m.group("cols")))
    if base == "vector":
        return VectorType(base, "float", 4)
    if base == "matrix":
        return MatrixType(base, "float", 4, 4)
    if base in TEXTURE_TYPES:
        return TextureType(base)
    if base in SAMPLER_TYPES:
        return SamplerType(base)
    if base in BUFFER_TYPES:
        return BufferType(base)
    return None


def is_builtin_type(name: str) -> bool:
    return resolve_type(name) is not None


def is_vector_like(name: str) -> bool:
    return isinstance(resolve_type(name), VectorType)


def vector_name(component: str, size: int) -> str:
    if size == 1:
        return component
    return f"{component}{size}"


@lru_cache(maxsize=None)
def swizzle_accessors(dimension: int) -> frozenset[str]:
    """Every valid swizzle for a vector of ``dimension`` components.

    Accessors draw from a single alphabet (``xyzw`` or ``rgba``), never mix
    the two, never repeat a component, and are between 1 and ``dimension``
    characters long.
    """
    result: set[str] = set()
    for alphabet in SWIZZLE_SETS:
        letters = alphabet[:dimension]
        for length in range(1, dimension + 1):
            for combo in itertools.permutations(letters, length):
                result.add("".join(combo))
    return frozenset(result)


def is_valid_swizzle(type_name: str, accessor: str) -> bool:
    t = resolve_type(type_name)
    if not isinstance(t, VectorType):
        return False
    return accessor in swizzle_accessors(t.size)


def swizzle_type(type_name: str, accessor: str) -> str | None:
    """Type produced by applying ``accessor`` to a vector-like type."""
    if not is_valid_swizzle(type_name, accessor):
        return None
    t = resolve_type(type_name)
    return vector_name(t.component, len(accessor))


def element_type(type_name: str) -> str | None:
    """Type produced by indexing: vector -> scalar, matrix -> row vector."""
    t = resolve_type(type_name)
    if isinstance(t, VectorType):
        return t.component
    if isinstance(t, MatrixType):
        return vector_name(t.component, t.cols)
    arg = template_argument(type_name)
    if isinstance(t, BufferType) and arg:
        return arg
    return None


def type_members(type_name: str) -> tuple[str, ...] | None:
    """Named members (methods) of built-in object types."""
    t = resolve_type(type_name)
    if isinstance(t, TextureType):
        return TEXTURE_METHODS
    if isinstance(t, BufferType):
        return BUFFER_METHODS
    return None
