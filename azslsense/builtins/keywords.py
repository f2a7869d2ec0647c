"""Language keywords, attributes and storage qualifiers."""

from __future__ import annotations

KEYWORDS = frozenset([
    "if", "else", "for", "while", "do", "switch", "case", "default", "break",
    "continue", "return", "discard", "true", "false", "struct", "class",
    "typedef", "enum", "namespace", "cbuffer", "tbuffer", "static", "const",
    "inline", "uniform", "extern", "volatile", "groupshared", "precise",
    "nointerpolation", "noperspective", "linear", "centroid", "sample", "in",
    "out", "inout", "row_major", "column_major", "packoffset", "register",
    "option", "partial", "sizeof", "this", "using", "void", "export",
    "snorm", "unorm", "rootconstant", "ShaderResourceGroup",
    "ShaderResourceGroupSemantic", "ShaderVariantFallback", "FrequencyId",
])

# Words that can never start a declaration's type position
NON_TYPE_WORDS = frozenset([
    "return", "else", "case", "goto", "new", "delete", "typedef", "using",
    "struct", "class", "enum", "namespace", "ShaderResourceGroup",
    "ShaderResourceGroupSemantic", "partial", "if", "while", "for", "switch",
    "do", "break", "continue", "discard", "default", "sizeof", "option",
    "static", "const", "in", "out", "inout", "public", "private", "protected",
    "friend", "virtual", "operator", "template", "typename", "cbuffer", "tbuffer",
])

# Qualifiers that may prefix a declaration
QUALIFIERS = (
    "precise", "static", "const", "nointerpolation", "noperspective", "linear",
    "centroid", "sample", "uniform", "row_major", "column_major", "groupshared",
    "volatile", "inline", "snorm", "unorm", "export", "in", "out", "inout",
    "option", "rootconstant",
)

KNOWN_ATTRIBUTES = (
    "unroll", "branch", "flatten", "loop", "fastopt", "allow_uav_condition",
    "numthreads", "domain", "partitioning", "outputtopology",
    "outputcontrolpoints", "patchconstantfunc", "maxtessfactor", "instance",
    "maxvertexcount", "earlydepthstencil", "conservative", "precise",
    "groupshared", "static", "row_major", "column_major", "packoffset",
    "register", "in", "out", "inout",
)

# Declaration keywords; a name directly after one of these is being declared
DECLARATION_KEYWORDS = frozenset([
    "struct", "class", "enum", "namespace", "cbuffer", "tbuffer",
    "ShaderResourceGroup", "ShaderResourceGroupSemantic", "typedef",
])
