"""Markdown documentation for built-in intrinsics, types and semantics.

``render_builtin_document`` turns an entry into the read-only pseudo source
file that "go to definition" opens for a built-in name.
"""

from __future__ import annotations
import re

BUILTIN_URI_SCHEME = "azsl-builtin"


def builtin_uri(name: str) -> str:
    return f"{BUILTIN_URI_SCHEME}://documentation/{name}.azsli"


def builtin_name_from_uri(uri: str) -> str | None:
    prefix = f"{BUILTIN_URI_SCHEME}://documentation/"
    if not uri.startswith(prefix) or not uri.endswith(".azsli"):
        return None
    return uri[len(prefix):-len(".azsli")]


def _entry(signature: str, summary: str, params: list[str] | None = None,
           returns: str | None = None, example: str | None = None) -> str:
    parts = [f"```hlsl\n{signature}\n```", summary]
    if params:
        parts.append("**Parameters:**\n" + "\n".join(f"- {p}" for p in params))
    if returns:
        parts.append(f"**Returns:** {returns}")
    if example:
        parts.append(f"**Example:**\n```hlsl\n{example}\n```")
    return "\n\n".join(parts)


def _semantic(kind: str, summary: str, type_name: str | None = None,
              usage: str | None = None) -> str:
    parts = [f"**{kind}**", summary]
    if type_name:
        parts.append(f"**Type:** `{type_name}`")
    if usage:
        parts.append(f"**Usage:**\n```hlsl\n{usage}\n```")
    return "\n\n".join(parts)


# ---------------------------------------------------------------------------
# Intrinsics, resource types and sampler state
# ---------------------------------------------------------------------------

BUILTIN_DOCS: dict[str, str] = {
    "max": _entry("T max(T a, T b)", "Returns the greater of two values. Component-wise for vectors.",
                  ["`a`, `b`: scalar or vector of the same type"], "`T`",
                  "float3 m = max(float3(1, 2, 3), float3(4, 1, 2)); // (4, 2, 3)"),
    "min": _entry("T min(T a, T b)", "Returns the lesser of two values. Component-wise for vectors.",
                  ["`a`, `b`: scalar or vector of the same type"], "`T`"),
    "saturate": _entry("T saturate(T x)", "Clamps `x` to the range [0, 1].",
                       ["`x`: scalar or vector"], "`T` in [0, 1]",
                       "float s = saturate(1.5); // 1.0"),
    "clamp": _entry("T clamp(T x, T minVal, T maxVal)",
                    "Clamps `x` to the range [minVal, maxVal]. Component-wise for vectors.",
                    ["`x`: value to clamp", "`minVal`: lower bound", "`maxVal`: upper bound"], "`T`"),
    "smoothstep": _entry("T smoothstep(T edge0, T edge1, T x)",
                         "Hermite interpolation between 0 and 1 when `edge0 < x < edge1`.",
                         ["`edge0`: lower edge", "`edge1`: upper edge", "`x`: input"], "`T` in [0, 1]"),
    "normalize": _entry("float3 normalize(float3 v)", "Returns a unit-length vector pointing along `v`.",
                        ["`v`: input vector"], "the normalized vector"),
    "length": _entry("float length(floatN v)", "Returns the Euclidean length of `v`.",
                     ["`v`: input vector"], "`float`"),
    "dot": _entry("float dot(floatN a, floatN b)", "Returns the dot product of two vectors.",
                  ["`a`, `b`: vectors of equal size"], "`float`",
                  "float ndotl = saturate(dot(normal, lightDir));"),
    "cross": _entry("float3 cross(float3 a, float3 b)", "Returns the cross product of two 3D vectors.",
                    ["`a`, `b`: 3D vectors"], "`float3` perpendicular to both"),
    "pow": _entry("T pow(T x, T y)", "Raises `x` to the power `y`.",
                  ["`x`: base", "`y`: exponent"], "`T`"),
    "floor": _entry("T floor(T x)", "Largest integer value not greater than `x`.", None, "`T`"),
    "ceil": _entry("T ceil(T x)", "Smallest integer value not less than `x`.", None, "`T`"),
    "round": _entry("T round(T x)", "Rounds `x` to the nearest integer.", None, "`T`"),
    "frac": _entry("T frac(T x)", "Fractional part of `x`, equivalent to `x - floor(x)`.", None, "`T`"),
    "lerp": _entry("T lerp(T a, T b, T t)", "Linear interpolation `a + t * (b - a)`.",
                   ["`a`: start value", "`b`: end value", "`t`: interpolation factor"], "`T`",
                   "float3 c = lerp(colorA, colorB, 0.5);"),
    "step": _entry("T step(T edge, T x)", "Returns 1 when `x >= edge`, otherwise 0.", None, "`T`"),
    "ddx": _entry("T ddx(T x)", "Screen-space partial derivative of `x` along X. Pixel shaders only.",
                  None, "`T`"),
    "ddy": _entry("T ddy(T x)", "Screen-space partial derivative of `x` along Y. Pixel shaders only.",
                  None, "`T`"),
    "abs": _entry("T abs(T x)", "Absolute value of `x`. Component-wise for vectors.", None, "`T`"),
    "sin": _entry("T sin(T x)", "Sine of `x` in radians.", None, "`T`"),
    "cos": _entry("T cos(T x)", "Cosine of `x` in radians.", None, "`T`"),
    "sqrt": _entry("T sqrt(T x)", "Square root of `x`.", None, "`T`"),
    "fmod": _entry("T fmod(T x, T y)", "Floating point remainder of `x / y`.", None, "`T`"),
    "mul": _entry("T mul(A a, B b)",
                  "Matrix multiplication. Vector operands are treated as row or column vectors as needed.",
                  ["`a`: vector or matrix", "`b`: vector or matrix"], "vector or matrix",
                  "float4 clip = mul(ViewSrg::m_viewProjectionMatrix, float4(worldPos, 1.0));"),
    "Sample": _entry("float4 Texture2D.Sample(SamplerState s, float2 uv)",
                     "Samples the texture with filtering described by `s`.",
                     ["`s`: sampler state", "`uv`: texture coordinates"], "sampled value",
                     "float4 c = m_baseColor.Sample(m_sampler, IN.m_uv);"),
    "SampleCmp": _entry("float Texture2D.SampleCmp(SamplerComparisonState s, float2 uv, float cmp)",
                        "Samples the texture and compares the result against `cmp`. Used for shadow maps.",
                        None, "`float` comparison result"),
    "GetDimensions": _entry("void Texture2D.GetDimensions(out uint width, out uint height)",
                            "Queries the dimensions of a texture resource.", None, "`void`"),
    "Texture2D": _entry("Texture2D<T>", "Two-dimensional texture resource.", None, None,
                        "Texture2D m_baseColor;"),
    "Texture3D": _entry("Texture3D<T>", "Three-dimensional volume texture resource."),
    "TextureCube": _entry("TextureCube<T>", "Cube map made of six square faces, sampled by direction."),
    "Texture2DArray": _entry("Texture2DArray<T>", "Array of two-dimensional textures indexed by slice."),
    "RWTexture2D": _entry("RWTexture2D<T>", "Read-write two-dimensional texture for unordered access."),
    "SamplerState": _entry("SamplerState", "Sampler object describing filtering and addressing."),
    "SamplerComparisonState": _entry("SamplerComparisonState",
                                     "Sampler object that compares sampled values, used for shadow mapping."),
    "Sampler": _entry("Sampler", "AZSL sampler declaration with inline filter and address state.",
                      None, None,
                      "Sampler m_sampler\n{\n    MinFilter = Linear;\n    MagFilter = Linear;\n    AddressU = Wrap;\n};"),
    "MaxAnisotropy": _entry("MaxAnisotropy = N;", "Maximum anisotropy level for anisotropic filtering (1-16)."),
    "MinFilter": _entry("MinFilter = Point | Linear;", "Filter used when the texture is minified."),
    "MagFilter": _entry("MagFilter = Point | Linear;", "Filter used when the texture is magnified."),
    "MipFilter": _entry("MipFilter = Point | Linear;", "Filter used between mip levels."),
    "ReductionType": _entry("ReductionType = Filter | Comparison | Minimum | Maximum;",
                            "How filtered samples are combined."),
    "AddressU": _entry("AddressU = Wrap | Clamp | Mirror | Border;", "Addressing mode along U."),
    "AddressV": _entry("AddressV = Wrap | Clamp | Mirror | Border;", "Addressing mode along V."),
    "AddressW": _entry("AddressW = Wrap | Clamp | Mirror | Border;", "Addressing mode along W."),
    "MinLOD": _entry("MinLOD = value;", "Lowest mip level that may be accessed."),
    "MaxLOD": _entry("MaxLOD = value;", "Highest mip level that may be accessed."),
    "Point": _entry("Point", "Nearest-neighbour filtering."),
    "Linear": _entry("Linear", "Linear interpolation filtering."),
    "Wrap": _entry("Wrap", "Repeat the texture outside [0, 1]."),
    "Clamp": _entry("Clamp", "Clamp coordinates to the edge texels."),
    "Mirror": _entry("Mirror", "Mirror the texture at every integer boundary."),
    "Border": _entry("Border", "Use the border color outside [0, 1]."),
    "Filter": _entry("Filter", "Standard filtering reduction."),
}

# ---------------------------------------------------------------------------
# Semantics
# ---------------------------------------------------------------------------

_INPUT = "Input Semantic"
_SYSTEM = "System Value Semantic"

SEMANTIC_DOCS: dict[str, str] = {
    "POSITION": _semantic(_INPUT, "Vertex position in object space.", "float3",
                          "struct VertexInput\n{\n    float3 m_position : POSITION;\n};"),
    "NORMAL": _semantic(_INPUT, "Vertex normal in object space.", "float3"),
    "TEXCOORD0": _semantic(_INPUT, "First set of texture coordinates.", "float2"),
    "TEXCOORD1": _semantic(_INPUT, "Second set of texture coordinates.", "float2"),
    "TEXCOORD2": _semantic(_INPUT, "Third set of texture coordinates.", "float2"),
    "TEXCOORD3": _semantic(_INPUT, "Fourth set of texture coordinates.", "float2"),
    "COLOR0": _semantic(_INPUT, "First vertex color.", "float4"),
    "COLOR1": _semantic(_INPUT, "Second vertex color.", "float4"),
    "TANGENT": _semantic(_INPUT, "Vertex tangent, optionally with handedness in w.", "float4"),
    "BINORMAL": _semantic(_INPUT, "Vertex bitangent.", "float3"),
    "BLENDINDICES": _semantic(_INPUT, "Bone indices for skinning.", "uint4"),
    "BLENDWEIGHT": _semantic(_INPUT, "Bone weights for skinning.", "float4"),
    "SV_Position": _semantic(_SYSTEM, "Clip-space position written by the vertex shader.", "float4"),
    "SV_Target": _semantic(_SYSTEM, "Pixel shader output to render target 0.", "float4",
                           "float4 MainPS(VSOutput IN) : SV_Target\n{\n    return float4(1, 0, 0, 1);\n}"),
    "SV_Target0": _semantic(_SYSTEM, "Render target 0 output.", "float4"),
    "SV_Target1": _semantic(_SYSTEM, "Render target 1 output.", "float4"),
    "SV_Target2": _semantic(_SYSTEM, "Render target 2 output.", "float4"),
    "SV_Target3": _semantic(_SYSTEM, "Render target 3 output.", "float4"),
    "SV_Depth": _semantic(_SYSTEM, "Depth written by the pixel shader.", "float"),
    "SV_Coverage": _semantic(_SYSTEM, "MSAA coverage mask.", "uint"),
    "SV_InstanceID": _semantic(_SYSTEM, "Instance index for instanced draws.", "uint"),
    "SV_VertexID": _semantic(_SYSTEM, "Vertex index within the draw.", "uint"),
    "SV_PrimitiveID": _semantic(_SYSTEM, "Primitive index.", "uint"),
    "SV_GSInstanceID": _semantic(_SYSTEM, "Geometry shader instance index.", "uint"),
    "SV_IsFrontFace": _semantic(_SYSTEM, "Whether the primitive faces the camera.", "bool"),
    "SV_DispatchThreadID": _semantic(_SYSTEM, "Thread index within the whole dispatch.", "uint3"),
    "SV_GroupID": _semantic(_SYSTEM, "Thread group index within the dispatch.", "uint3"),
    "SV_GroupThreadID": _semantic(_SYSTEM, "Thread index within its group.", "uint3"),
    "SV_GroupIndex": _semantic(_SYSTEM, "Flattened thread index within its group.", "uint"),
    "SV_RenderTargetArrayIndex": _semantic(_SYSTEM, "Render target array slice for layered rendering.", "uint"),
    "SV_ViewportArrayIndex": _semantic(_SYSTEM, "Viewport array index.", "uint"),
    "SV_ClipDistance": _semantic(_SYSTEM, "User clip plane distances.", "float[N]"),
    "SV_CullDistance": _semantic(_SYSTEM, "User cull distances.", "float[N]"),
    "SRG_PerDraw": _semantic("SRG Semantic: Per-Draw",
                             "The SRG is updated for every draw call. Can hold the shader variant fallback key.",
                             None, "ShaderResourceGroup ObjectSrg : SRG_PerDraw\n{\n    float4x4 m_world;\n};"),
    "SRG_PerMaterial": _semantic("SRG Semantic: Per-Material",
                                 "The SRG is shared by every object that uses the same material."),
    "SRG_PerScene": _semantic("SRG Semantic: Per-Scene", "The SRG is shared by everything in the scene."),
    "SRG_PerView": _semantic("SRG Semantic: Per-View", "The SRG is updated once per view or camera."),
}

# ---------------------------------------------------------------------------
# Pseudo source rendering
# ---------------------------------------------------------------------------

_SAMPLER_PROPERTIES = {
    "MaxAnisotropy": "4",
    "MinFilter": "Linear",
    "MagFilter": "Linear",
    "MipFilter": "Linear",
    "ReductionType": "Filter",
    "AddressU": "Wrap",
    "AddressV": "Wrap",
    "AddressW": "Wrap",
    "MinLOD": "0.0",
    "MaxLOD": "0.0",
}

_BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")
_CODE_RE = re.compile(r"`([^`]+)`")
_HEADING_RE = re.compile(r"^#+\s*")
_BULLET_RE = re.compile(r"^[-*]\s")


def _example_usage(name: str) -> str:
    if name.startswith("Texture"):
        return f"{name} m_texture;\n"
    if name.startswith("RWTexture"):
        return f"{name}<float4> m_texture;\n"
    if name.startswith("Sampler"):
        return f"{name} m_sampler;\n"
    if name in _SAMPLER_PROPERTIES:
        return f"Sampler m_sampler\n{{\n    {name} = {_SAMPLER_PROPERTIES[name]};\n}};\n"
    if name in ("Point", "Linear"):
        return f"MinFilter = {name};\nMagFilter = {name};\nMipFilter = {name};\n"
    if name in ("Wrap", "Clamp", "Mirror", "Border"):
        return f"AddressU = {name};\nAddressV = {name};\n"
    if name == "Filter":
        return f"ReductionType = {name};\n"
    return f"{name} m_resource;\n"


def render_builtin_document(name: str) -> str:
    """Render the documentation of ``name`` as a commented pseudo source file."""
    doc = BUILTIN_DOCS.get(name)
    if doc is None:
        return f"// Built-in type: {name}\n// No documentation available."

    out = [f"/*\n * Built-in HLSL/AZSL Type: {name}\n *\n"]
    in_code = False
    code: list[str] = []

    def flush_code():
        if code:
            out.append(" *\n")
            out.extend(f" * {c}\n" for c in code)
            out.append(" *\n")

    for line in doc.split("\n"):
        if line.strip().startswith("```"):
            if in_code:
                flush_code()
                code = []
            in_code = not in_code
            continue
        if in_code:
            code.append(line)
            continue
        if not line.strip():
            out.append(" *\n")
            continue
        clean = _HEADING_RE.sub("", _CODE_RE.sub(r"\1", _BOLD_RE.sub(r"\1", line))).strip()
        clean = _BULLET_RE.sub("  - ", clean)
        if clean:
            out.append(f" * {clean}\n")
    if in_code:
        flush_code()

    out.append(" */\n\n// Example usage:\n")
    out.append(_example_usage(name))
    return "".join(out)


def builtin_markdown(name: str) -> str | None:
    return BUILTIN_DOCS.get(name) or SEMANTIC_DOCS.get(name)
