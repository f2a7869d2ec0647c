"""Well-known engine (Atom) types and their seeded members.

The engine's material headers define ``Surface`` and ``LightingData``
through several concrete classes. Members found in those classes are merged
into the canonical type so that ``surface.albedo`` resolves no matter which
concrete header the corpus provides.
"""

from __future__ import annotations

# canonical type -> concrete class names that contribute members
ATOM_TYPE_ALIASES: dict[str, tuple[str, ...]] = {
    "Surface": ("SurfaceData_StandardPBR", "SurfaceData_BasePBR", "Surface"),
    "LightingData": ("LightingData_BasePBR", "LightingData"),
}

ATOM_MEMBER_SEEDS: dict[str, tuple[str, ...]] = {
    "Surface": (
        "position", "normal", "vertexNormal", "metallic", "roughnessLinear",
        "opacityAffectsSpecularFactor", "opacityAffectsEmissiveFactor",
        "albedo", "roughnessA", "specularF0",
        "CalculateRoughnessA", "SetAlbedoAndSpecularF0", "GetDefaultNormal",
        "GetSpecularF0",
    ),
    "LightingData": (
        "diffuseResponse", "specularResponse", "diffuseLighting",
        "specularLighting", "diffuseAmbientOcclusion", "specularOcclusion",
        "Init", "FinalizeLighting", "CalculateMultiscatterCompensation",
        "GetSpecularNdotV",
    ),
}

# Engine types that are always considered declared
ATOM_TYPE_NAMES = frozenset([
    "ForwardPassOutput", "Surface", "LightingData", "DirectionalLight",
    "SimplePointLight", "PointLight", "SimpleSpotLight", "DiskLight",
    "ViewSrg", "SceneSrg", "ObjectSrg",
])

_CLASS_TO_ATOM = {
    cls: atom for atom, classes in ATOM_TYPE_ALIASES.items() for cls in classes
}


def atom_type_for(class_name: str) -> str | None:
    """Canonical Atom type a concrete class contributes to, if any."""
    return _CLASS_TO_ATOM.get(class_name)


def is_atom_type(name: str) -> bool:
    return name in ATOM_TYPE_ALIASES or name in _CLASS_TO_ATOM
