"""Tests for built-in types, swizzles and intrinsic return types."""

import pytest

from azslsense.builtins.functions import intrinsic_return_type
from azslsense.builtins.types import (
    BufferType, MatrixType, ScalarType, TextureType, VectorType,
    element_type, is_valid_swizzle, resolve_type, strip_template,
    swizzle_accessors, swizzle_type, template_argument, type_members,
)


class TestResolveType:
    def test_scalars_vectors_matrices(self):
        assert resolve_type("float") == ScalarType("float")
        assert resolve_type("half3") == VectorType("half3", "half", 3)
        m = resolve_type("float4x3")
        assert isinstance(m, MatrixType)
        assert (m.rows, m.cols) == (4, 3)

    def test_objects(self):
        assert isinstance(resolve_type("Texture2D<float4>"), TextureType)
        assert isinstance(resolve_type("StructuredBuffer<Light>"), BufferType)

    def test_user_types(self):
        assert resolve_type("Light") is None
        assert resolve_type("float5") is None

    def test_templates(self):
        assert strip_template("Texture2D<float4>") == "Texture2D"
        assert template_argument("StructuredBuffer<Light>") == "Light"
        assert template_argument("Texture2D") is None


class TestSwizzles:
    @pytest.mark.parametrize("accessor", ["x", "xy", "xyz", "zyx", "rgb", "b"])
    def test_valid_on_float3(self, accessor):
        assert is_valid_swizzle("float3", accessor)

    @pytest.mark.parametrize("accessor", ["xyzw", "w", "q", "xx", "xg", "a"])
    def test_invalid_on_float3(self, accessor):
        assert not is_valid_swizzle("float3", accessor)

    def test_not_a_vector(self):
        assert not is_valid_swizzle("float", "x")
        assert not is_valid_swizzle("Light", "x")

    def test_accessor_count(self):
        # 2 alphabets x (2 + 2) permutations of up to two letters
        assert len(swizzle_accessors(2)) == 8

    def test_swizzle_type(self):
        assert swizzle_type("float4", "xy") == "float2"
        assert swizzle_type("half3", "x") == "half"
        assert swizzle_type("float2", "z") is None


class TestElementAndMembers:
    def test_element_type(self):
        assert element_type("float4") == "float"
        assert element_type("float4x3") == "float3"
        assert element_type("StructuredBuffer<Light>") == "Light"
        assert element_type("Light") is None

    def test_type_members(self):
        assert "Sample" in type_members("Texture2D<float4>")
        assert "Load" in type_members("ByteAddressBuffer")
        assert type_members("float3") is None


class TestIntrinsics:
    def test_mul_vector_matrix(self):
        assert intrinsic_return_type("mul", ["float4", "float4x4"]) == "float4"
        assert intrinsic_return_type("mul", ["float3", "float3x4"]) == "float4"

    def test_mul_matrix_vector(self):
        assert intrinsic_return_type("mul", ["float4x4", "float4"]) == "float4"
        assert intrinsic_return_type("mul", ["float3x4", "float4"]) == "float4"
        assert intrinsic_return_type("mul", [None, "float3"]) == "float3"

    def test_mul_arity(self):
        assert intrinsic_return_type("mul", ["float4"]) is None

    def test_component_wise(self):
        assert intrinsic_return_type("normalize", ["float3"]) == "float3"
        assert intrinsic_return_type("lerp", ["half3", "half3", "half"]) == "half3"

    def test_reductions(self):
        assert intrinsic_return_type("dot", ["float3", "float3"]) == "float"
        assert intrinsic_return_type("length", ["half4"]) == "half"
        assert intrinsic_return_type("length", [None]) is None

    def test_fixed_results(self):
        assert intrinsic_return_type("cross", [None, None]) == "float3"
        assert intrinsic_return_type("any", ["bool3"]) == "bool"
        assert intrinsic_return_type("transpose", ["float3x4"]) == "float4x3"

    def test_no_value(self):
        assert intrinsic_return_type("clip", ["float"]) is None
        assert intrinsic_return_type("notAnIntrinsic", []) is None
