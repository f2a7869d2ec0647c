"""Vertex/pixel semantics and the well-known SRG semantics."""

from __future__ import annotations

SRG_SEMANTIC_PREFIX = "SRG_"

# Semantics shipped with the engine; a scanned declaration of the same name
# replaces the seed entry.
BUILTIN_SRG_SEMANTICS = (
    "SRG_PerDraw",
    "SRG_PerMaterial",
    "SRG_PerObject",
    "SRG_PerPass",
    "SRG_PerPass_WithFallback",
    "SRG_PerScene",
    "SRG_PerSubPass",
    "SRG_PerView",
    "SRG_RayTracingGlobal",
    "SRG_RayTracingLocal",
    "SRG_RayTracingMaterial",
    "SRG_RayTracingScene",
)

# Semantics whose SRGs can carry the shader-variant fallback key
FALLBACK_SEMANTICS = frozenset(["SRG_PerDraw", "SRG_PerPass_WithFallback"])

VERTEX_SEMANTICS = (
    "POSITION", "NORMAL", "TANGENT", "BINORMAL", "BLENDINDICES", "BLENDWEIGHT",
    "COLOR", "COLOR0", "COLOR1", "PSIZE",
) + tuple(f"TEXCOORD{i}" for i in range(8)) + tuple(f"UV{i}" for i in range(4))

SYSTEM_VALUE_SEMANTICS = (
    "SV_Position", "SV_Target", "SV_Target0", "SV_Target1", "SV_Target2",
    "SV_Target3", "SV_Target4", "SV_Target5", "SV_Target6", "SV_Target7",
    "SV_Depth", "SV_DepthGreaterEqual", "SV_DepthLessEqual", "SV_Coverage",
    "SV_InstanceID", "SV_VertexID", "SV_PrimitiveID", "SV_GSInstanceID",
    "SV_IsFrontFace", "SV_DispatchThreadID", "SV_GroupID", "SV_GroupThreadID",
    "SV_GroupIndex", "SV_RenderTargetArrayIndex", "SV_ViewportArrayIndex",
    "SV_ClipDistance", "SV_CullDistance", "SV_SampleIndex", "SV_StencilRef",
    "SV_ViewID", "SV_ShadingRate",
)

SEMANTIC_NAMES = frozenset(VERTEX_SEMANTICS + SYSTEM_VALUE_SEMANTICS)


def is_srg_semantic_name(name: str) -> bool:
    return name.startswith(SRG_SEMANTIC_PREFIX)
