"""
GLSL Syntax Tree Definitions
============================

This module defines the node types produced by the GLSL parser and
consumed by the quoter. The tree mirrors the GLSL grammar closely: no
semantic information (types, scopes, constant values) is attached.

Node Hierarchy
--------------
Node (base)
├── ExternalDeclaration - top-level item of a translation unit
│   ├── Preprocessor - #version / #extension
│   ├── FunctionDefinition - prototype plus body
│   └── Declaration - prototypes, variables, precision, blocks, globals
├── Statement
│   ├── CompoundStatement - { ... }
│   └── SimpleStatement - declarations, expressions, selection,
│       switch, case labels, iteration and jumps
├── Expr - variables, literals, operators, calls, field access
├── Type nodes - TypeSpecifier, FullySpecifiedType, StructSpecifier,
│   TypeName, StructFieldSpecifier, ArrayedIdentifier, ArraySpecifier
└── Qualifier nodes - TypeQualifier and its non-enum specs

Variants without payload that belong to a closed catalog (built-in type
names, storage qualifiers, operators...) are Enum members instead of
nodes. Each enum member's value is the GLSL spelling.

A translation unit is a plain ``list`` of ExternalDeclaration.

Design Notes
------------
- All nodes are dataclasses; equality is structural
- Nodes do not carry source locations: two parses of the same text in
  different files compare equal
- Optional children are None when absent; sequences are lists and keep
  source order
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


# =============================================================================
# Node Base Class
# =============================================================================

@dataclass
class Node:
    """Base class for all syntax tree nodes."""
    pass


# =============================================================================
# Built-in Type Catalog
# =============================================================================

class TypeSpecifierNonArray(Enum):
    """
    Closed catalog of GLSL built-in type names.

    The member value is the GLSL keyword. User-defined types are
    represented by StructSpecifier or TypeName instead.
    """
    # Scalars
    VOID = "void"
    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    DOUBLE = "double"

    # Vectors
    VEC2 = "vec2"
    VEC3 = "vec3"
    VEC4 = "vec4"
    DVEC2 = "dvec2"
    DVEC3 = "dvec3"
    DVEC4 = "dvec4"
    BVEC2 = "bvec2"
    BVEC3 = "bvec3"
    BVEC4 = "bvec4"
    IVEC2 = "ivec2"
    IVEC3 = "ivec3"
    IVEC4 = "ivec4"
    UVEC2 = "uvec2"
    UVEC3 = "uvec3"
    UVEC4 = "uvec4"

    # Matrices
    MAT2 = "mat2"
    MAT3 = "mat3"
    MAT4 = "mat4"
    MAT23 = "mat2x3"
    MAT24 = "mat2x4"
    MAT32 = "mat3x2"
    MAT34 = "mat3x4"
    MAT42 = "mat4x2"
    MAT43 = "mat4x3"
    DMAT2 = "dmat2"
    DMAT3 = "dmat3"
    DMAT4 = "dmat4"
    DMAT23 = "dmat2x3"
    DMAT24 = "dmat2x4"
    DMAT32 = "dmat3x2"
    DMAT34 = "dmat3x4"
    DMAT42 = "dmat4x2"
    DMAT43 = "dmat4x3"

    # Floating-point samplers and images
    SAMPLER_1D = "sampler1D"
    IMAGE_1D = "image1D"
    SAMPLER_2D = "sampler2D"
    IMAGE_2D = "image2D"
    SAMPLER_3D = "sampler3D"
    IMAGE_3D = "image3D"
    SAMPLER_CUBE = "samplerCube"
    IMAGE_CUBE = "imageCube"
    SAMPLER_2D_RECT = "sampler2DRect"
    IMAGE_2D_RECT = "image2DRect"
    SAMPLER_1D_ARRAY = "sampler1DArray"
    IMAGE_1D_ARRAY = "image1DArray"
    SAMPLER_2D_ARRAY = "sampler2DArray"
    IMAGE_2D_ARRAY = "image2DArray"
    SAMPLER_BUFFER = "samplerBuffer"
    IMAGE_BUFFER = "imageBuffer"
    SAMPLER_2D_MS = "sampler2DMS"
    IMAGE_2D_MS = "image2DMS"
    SAMPLER_2D_MS_ARRAY = "sampler2DMSArray"
    IMAGE_2D_MS_ARRAY = "image2DMSArray"
    SAMPLER_CUBE_ARRAY = "samplerCubeArray"
    IMAGE_CUBE_ARRAY = "imageCubeArray"
    SAMPLER_1D_SHADOW = "sampler1DShadow"
    SAMPLER_2D_SHADOW = "sampler2DShadow"
    SAMPLER_2D_RECT_SHADOW = "sampler2DRectShadow"
    SAMPLER_1D_ARRAY_SHADOW = "sampler1DArrayShadow"
    SAMPLER_2D_ARRAY_SHADOW = "sampler2DArrayShadow"
    SAMPLER_CUBE_SHADOW = "samplerCubeShadow"
    SAMPLER_CUBE_ARRAY_SHADOW = "samplerCubeArrayShadow"

    # Signed integer samplers and images
    ISAMPLER_1D = "isampler1D"
    IIMAGE_1D = "iimage1D"
    ISAMPLER_2D = "isampler2D"
    IIMAGE_2D = "iimage2D"
    ISAMPLER_3D = "isampler3D"
    IIMAGE_3D = "iimage3D"
    ISAMPLER_CUBE = "isamplerCube"
    IIMAGE_CUBE = "iimageCube"
    ISAMPLER_2D_RECT = "isampler2DRect"
    IIMAGE_2D_RECT = "iimage2DRect"
    ISAMPLER_1D_ARRAY = "isampler1DArray"
    IIMAGE_1D_ARRAY = "iimage1DArray"
    ISAMPLER_2D_ARRAY = "isampler2DArray"
    IIMAGE_2D_ARRAY = "iimage2DArray"
    ISAMPLER_BUFFER = "isamplerBuffer"
    IIMAGE_BUFFER = "iimageBuffer"
    ISAMPLER_2D_MS = "isampler2DMS"
    IIMAGE_2D_MS = "iimage2DMS"
    ISAMPLER_2D_MS_ARRAY = "isampler2DMSArray"
    IIMAGE_2D_MS_ARRAY = "iimage2DMSArray"
    ISAMPLER_CUBE_ARRAY = "isamplerCubeArray"
    IIMAGE_CUBE_ARRAY = "iimageCubeArray"

    # Atomic counter
    ATOMIC_UINT = "atomic_uint"

    # Unsigned integer samplers and images
    USAMPLER_1D = "usampler1D"
    UIMAGE_1D = "uimage1D"
    USAMPLER_2D = "usampler2D"
    UIMAGE_2D = "uimage2D"
    USAMPLER_3D = "usampler3D"
    UIMAGE_3D = "uimage3D"
    USAMPLER_CUBE = "usamplerCube"
    UIMAGE_CUBE = "uimageCube"
    USAMPLER_2D_RECT = "usampler2DRect"
    UIMAGE_2D_RECT = "uimage2DRect"
    USAMPLER_1D_ARRAY = "usampler1DArray"
    UIMAGE_1D_ARRAY = "uimage1DArray"
    USAMPLER_2D_ARRAY = "usampler2DArray"
    UIMAGE_2D_ARRAY = "uimage2DArray"
    USAMPLER_BUFFER = "usamplerBuffer"
    UIMAGE_BUFFER = "uimageBuffer"
    USAMPLER_2D_MS = "usampler2DMS"
    UIMAGE_2D_MS = "uimage2DMS"
    USAMPLER_2D_MS_ARRAY = "usampler2DMSArray"
    UIMAGE_2D_MS_ARRAY = "uimage2DMSArray"
    USAMPLER_CUBE_ARRAY = "usamplerCubeArray"
    UIMAGE_CUBE_ARRAY = "uimageCubeArray"


# =============================================================================
# Qualifier Enumerations
# =============================================================================

class StorageQualifier(Enum):
    """Storage qualifiers without payload (subroutine is a node)."""
    CONST = "const"
    IN_OUT = "inout"
    IN = "in"
    OUT = "out"
    CENTROID = "centroid"
    PATCH = "patch"
    SAMPLE = "sample"
    UNIFORM = "uniform"
    BUFFER = "buffer"
    SHARED = "shared"
    COHERENT = "coherent"
    VOLATILE = "volatile"
    RESTRICT = "restrict"
    READ_ONLY = "readonly"
    WRITE_ONLY = "writeonly"


class PrecisionQualifier(Enum):
    """Precision qualifiers."""
    HIGH = "highp"
    MEDIUM = "mediump"
    LOW = "lowp"


class InterpolationQualifier(Enum):
    """Interpolation qualifiers."""
    SMOOTH = "smooth"
    FLAT = "flat"
    NO_PERSPECTIVE = "noperspective"


# =============================================================================
# Operator Enumerations
# =============================================================================

class UnaryOp(Enum):
    """Prefix unary operators."""
    INC = "++"
    DEC = "--"
    ADD = "+"
    MINUS = "-"
    NOT = "!"
    COMPLEMENT = "~"


class BinaryOp(Enum):
    """Binary operators, from lowest to highest precedence group."""
    OR = "||"
    XOR = "^^"
    AND = "&&"
    BIT_OR = "|"
    BIT_XOR = "^"
    BIT_AND = "&"
    EQUAL = "=="
    NON_EQUAL = "!="
    LT = "<"
    GT = ">"
    LTE = "<="
    GTE = ">="
    LSHIFT = "<<"
    RSHIFT = ">>"
    ADD = "+"
    SUB = "-"
    MULT = "*"
    DIV = "/"
    MOD = "%"


class AssignmentOp(Enum):
    """Simple and compound assignment operators."""
    EQUAL = "="
    MULT = "*="
    DIV = "/="
    MOD = "%="
    ADD = "+="
    SUB = "-="
    LSHIFT = "<<="
    RSHIFT = ">>="
    AND = "&="
    XOR = "^="
    OR = "|="


# =============================================================================
# Preprocessor Enumerations
# =============================================================================

class PreprocessorVersionProfile(Enum):
    """Profile named in a #version directive."""
    CORE = "core"
    COMPATIBILITY = "compatibility"
    ES = "es"


class PreprocessorExtensionBehavior(Enum):
    """Behavior named in an #extension directive."""
    REQUIRE = "require"
    ENABLE = "enable"
    WARN = "warn"
    DISABLE = "disable"


# =============================================================================
# Expressions
# =============================================================================

@dataclass
class Expr(Node):
    """Base class for all expression nodes."""
    pass


@dataclass
class Variable(Expr):
    """Reference to a named variable."""
    ident: str = None


@dataclass
class IntConst(Expr):
    """Signed integer literal."""
    value: int = 0


@dataclass
class UIntConst(Expr):
    """Unsigned integer literal (``u`` suffix)."""
    value: int = 0


@dataclass
class BoolConst(Expr):
    """``true`` or ``false``."""
    value: bool = False


@dataclass
class FloatConst(Expr):
    """Single-precision literal (no suffix or ``f``)."""
    value: float = 0.0


@dataclass
class DoubleConst(Expr):
    """Double-precision literal (``lf`` suffix)."""
    value: float = 0.0


@dataclass
class Unary(Expr):
    """Prefix unary operation."""
    op: UnaryOp = None
    expr: Expr = None


@dataclass
class Binary(Expr):
    """Binary operation."""
    op: BinaryOp = None
    left: Expr = None
    right: Expr = None


@dataclass
class Ternary(Expr):
    """Conditional expression ``cond ? then_expr : else_expr``."""
    cond: Expr = None
    then_expr: Expr = None
    else_expr: Expr = None


@dataclass
class Assignment(Expr):
    """
    Assignment expression.

    Attributes:
        target: The assigned-to expression (left-hand side)
        op: Simple or compound assignment operator
        value: The assigned value (right-hand side)
    """
    target: Expr = None
    op: AssignmentOp = None
    value: Expr = None


@dataclass
class Bracket(Expr):
    """Indexing ``expr[index]``; the index is kept as an array specifier."""
    expr: Expr = None
    array_spec: "ArraySpecifier" = None


@dataclass
class FunCall(Expr):
    """
    Function call or constructor call.

    Attributes:
        fun: What is being called
        args: Argument expressions in source order
    """
    fun: "FunIdentifier" = None
    args: list[Expr] = field(default_factory=list)


@dataclass
class Dot(Expr):
    """Field selection or swizzle ``expr.field``."""
    expr: Expr = None
    field: str = None


@dataclass
class PostInc(Expr):
    """Postfix ``expr++``."""
    expr: Expr = None


@dataclass
class PostDec(Expr):
    """Postfix ``expr--``."""
    expr: Expr = None


@dataclass
class Comma(Expr):
    """Sequence expression ``left, right``."""
    left: Expr = None
    right: Expr = None


@dataclass
class FunIdentifier(Node):
    """Base class for the callee of a FunCall."""
    pass


@dataclass
class FunName(FunIdentifier):
    """
    Callee named directly: a function, a struct constructor or a
    built-in type constructor such as ``vec3``.
    """
    name: str = None


@dataclass
class FunExpr(FunIdentifier):
    """Callee computed from an expression, e.g. ``arr.length()``."""
    expr: Expr = None


# =============================================================================
# Types
# =============================================================================

@dataclass
class ArraySpecifier(Node):
    """Base class for array dimensions."""
    pass


@dataclass
class UnsizedArray(ArraySpecifier):
    """``[]``"""
    pass


@dataclass
class SizedArray(ArraySpecifier):
    """``[size]``"""
    size: Expr = None


@dataclass
class ArrayedIdentifier(Node):
    """Identifier with optional array dimensions, e.g. ``foo[3]``."""
    ident: str = None
    array_spec: Optional[ArraySpecifier] = None


@dataclass
class TypeName(Node):
    """Reference to a user-defined type by name."""
    name: str = None


@dataclass
class StructFieldSpecifier(Node):
    """
    One field line of a struct or interface block.

    ``float a, b[2];`` is a single specifier with two identifiers.
    """
    qualifier: Optional["TypeQualifier"] = None
    ty: "TypeSpecifier" = None
    identifiers: list[ArrayedIdentifier] = field(default_factory=list)


@dataclass
class StructSpecifier(Node):
    """
    Struct type definition.

    Attributes:
        name: The struct name, or None for an anonymous struct
        fields: Field specifiers in declaration order
    """
    name: Optional[str] = None
    fields: list[StructFieldSpecifier] = field(default_factory=list)


NonArrayType = Union[TypeSpecifierNonArray, StructSpecifier, TypeName]


@dataclass
class TypeSpecifier(Node):
    """A type with optional array dimensions, e.g. ``float[3]``."""
    ty: NonArrayType = None
    array_specifier: Optional[ArraySpecifier] = None


# =============================================================================
# Qualifiers
# =============================================================================

@dataclass
class SubroutineQualifier(Node):
    """``subroutine`` or ``subroutine(TypeA, TypeB)``."""
    type_names: list[str] = field(default_factory=list)


@dataclass
class LayoutQualifierSpec(Node):
    """Base class for the entries of a layout qualifier."""
    pass


@dataclass
class LayoutIdentifier(LayoutQualifierSpec):
    """``name`` or ``name = value`` inside ``layout(...)``."""
    name: str = None
    value: Optional[Expr] = None


@dataclass
class LayoutShared(LayoutQualifierSpec):
    """``shared`` inside ``layout(...)``."""
    pass


@dataclass
class LayoutQualifier(Node):
    """``layout(id, id = value, ...)``"""
    ids: list[LayoutQualifierSpec] = field(default_factory=list)


@dataclass
class InvariantQualifier(Node):
    """``invariant``"""
    pass


@dataclass
class PreciseQualifier(Node):
    """``precise``"""
    pass


TypeQualifierSpec = Union[
    StorageQualifier,
    SubroutineQualifier,
    LayoutQualifier,
    PrecisionQualifier,
    InterpolationQualifier,
    InvariantQualifier,
    PreciseQualifier,
]


@dataclass
class TypeQualifier(Node):
    """Ordered, non-empty sequence of qualifier specs."""
    qualifiers: list[TypeQualifierSpec] = field(default_factory=list)


@dataclass
class FullySpecifiedType(Node):
    """A type specifier with its optional qualifiers."""
    qualifier: Optional[TypeQualifier] = None
    ty: TypeSpecifier = None


# =============================================================================
# Top-level and Declarations
# =============================================================================

@dataclass
class ExternalDeclaration(Node):
    """Base class for items of a translation unit."""
    pass


@dataclass
class Declaration(ExternalDeclaration):
    """Base class for declarations (global or local)."""
    pass


@dataclass
class FunctionParameterDeclarator(Node):
    """Named parameter's type, name and optional array dimensions."""
    ty: TypeSpecifier = None
    name: str = None
    array_spec: Optional[ArraySpecifier] = None


@dataclass
class FunctionParameterDeclaration(Node):
    """Base class for function parameters."""
    pass


@dataclass
class NamedParameter(FunctionParameterDeclaration):
    """Parameter with a name, e.g. ``in vec3 normal``."""
    qualifier: Optional[TypeQualifier] = None
    declarator: FunctionParameterDeclarator = None


@dataclass
class UnnamedParameter(FunctionParameterDeclaration):
    """Parameter given by type only, e.g. ``float`` or ``void``."""
    qualifier: Optional[TypeQualifier] = None
    ty: TypeSpecifier = None


@dataclass
class FunctionPrototype(Declaration):
    """
    Function signature.

    Attributes:
        ty: Return type
        name: Function name
        parameters: Parameters in declaration order
    """
    ty: FullySpecifiedType = None
    name: str = None
    parameters: list[FunctionParameterDeclaration] = field(default_factory=list)


@dataclass
class Initializer(Node):
    """Base class for declaration initializers."""
    pass


@dataclass
class SimpleInitializer(Initializer):
    """``= expr``"""
    expr: Expr = None


@dataclass
class ListInitializer(Initializer):
    """``= { init, init, ... }`` (never empty)."""
    initializers: list[Initializer] = field(default_factory=list)


@dataclass
class SingleDeclaration(Node):
    """
    First declarator of a declaration, carrying the type.

    The name is None for type-only declarations such as
    ``struct S { float x; };``.
    """
    ty: FullySpecifiedType = None
    name: Optional[str] = None
    array_specifier: Optional[ArraySpecifier] = None
    initializer: Optional[Initializer] = None


@dataclass
class SingleDeclarationNoType(Node):
    """Further declarators sharing the head's type: ``float a, b = 1.0;``"""
    name: str = None
    array_specifier: Optional[ArraySpecifier] = None
    initializer: Optional[Initializer] = None


@dataclass
class InitDeclaratorList(Declaration):
    """Variable or type declaration with one or more declarators."""
    head: SingleDeclaration = None
    tail: list[SingleDeclarationNoType] = field(default_factory=list)


@dataclass
class PrecisionDeclaration(Declaration):
    """``precision highp float;``"""
    qualifier: PrecisionQualifier = None
    ty: TypeSpecifier = None


@dataclass
class Block(Declaration):
    """
    Interface block.

    Attributes:
        qualifier: Block qualifiers, e.g. ``uniform`` or ``layout(std140) buffer``
        name: Block name
        fields: Members in declaration order
        identifier: Optional instance name with array dimensions
    """
    qualifier: TypeQualifier = None
    name: str = None
    fields: list[StructFieldSpecifier] = field(default_factory=list)
    identifier: Optional[ArrayedIdentifier] = None


@dataclass
class GlobalDeclaration(Declaration):
    """
    Qualifier applied to existing names, or to the default of a stage.

    Examples: ``invariant gl_Position;``,
    ``layout(local_size_x = 8) in;``
    """
    qualifier: TypeQualifier = None
    identifiers: list[str] = field(default_factory=list)


# =============================================================================
# Statements
# =============================================================================

@dataclass
class Statement(Node):
    """Base class for all statements."""
    pass


@dataclass
class CompoundStatement(Statement):
    """Braced statement list."""
    statement_list: list[Statement] = field(default_factory=list)


@dataclass
class SimpleStatement(Statement):
    """Base class for non-compound statements."""
    pass


@dataclass
class DeclarationStatement(SimpleStatement):
    """Declaration used as a statement."""
    declaration: Declaration = None


@dataclass
class ExpressionStatement(SimpleStatement):
    """Expression statement; ``expr`` is None for an empty ``;``."""
    expr: Optional[Expr] = None


@dataclass
class SelectionRestStatement(Node):
    """Base class for the branches of an if statement."""
    pass


@dataclass
class SelectionThen(SelectionRestStatement):
    """Branch of an if without else."""
    statement: Statement = None


@dataclass
class SelectionElse(SelectionRestStatement):
    """Both branches of an if/else."""
    then_statement: Statement = None
    else_statement: Statement = None


@dataclass
class SelectionStatement(SimpleStatement):
    """``if (cond) ... [else ...]``"""
    cond: Expr = None
    rest: SelectionRestStatement = None


@dataclass
class SwitchStatement(SimpleStatement):
    """``switch (head) { body }``; case labels appear in the body."""
    head: Expr = None
    body: list[Statement] = field(default_factory=list)


@dataclass
class CaseLabel(SimpleStatement):
    """Base class for switch labels."""
    pass


@dataclass
class Case(CaseLabel):
    """``case expr:``"""
    expr: Expr = None


@dataclass
class DefaultCase(CaseLabel):
    """``default:``"""
    pass


@dataclass
class Condition(Node):
    """Base class for while and for conditions."""
    pass


@dataclass
class ConditionExpr(Condition):
    """Plain expression condition."""
    expr: Expr = None


@dataclass
class ConditionAssignment(Condition):
    """Declaring condition: ``while (bool done = check())``."""
    ty: FullySpecifiedType = None
    name: str = None
    initializer: Initializer = None


@dataclass
class ForInitStatement(Node):
    """Base class for the first clause of a for loop."""
    pass


@dataclass
class ForInitExpression(ForInitStatement):
    """Expression clause; ``expr`` is None for an empty clause."""
    expr: Optional[Expr] = None


@dataclass
class ForInitDeclaration(ForInitStatement):
    """Declaration clause, e.g. ``int i = 0``."""
    declaration: Declaration = None


@dataclass
class ForRestStatement(Node):
    """Condition and post-expression clauses of a for loop."""
    condition: Optional[Condition] = None
    post_expr: Optional[Expr] = None


@dataclass
class IterationStatement(SimpleStatement):
    """Base class for loops."""
    pass


@dataclass
class WhileStatement(IterationStatement):
    condition: Condition = None
    body: Statement = None


@dataclass
class DoWhileStatement(IterationStatement):
    body: Statement = None
    condition: Expr = None


@dataclass
class ForStatement(IterationStatement):
    init: ForInitStatement = None
    rest: ForRestStatement = None
    body: Statement = None


@dataclass
class JumpStatement(SimpleStatement):
    """Base class for jumps."""
    pass


@dataclass
class ContinueStatement(JumpStatement):
    pass


@dataclass
class BreakStatement(JumpStatement):
    pass


@dataclass
class DiscardStatement(JumpStatement):
    pass


@dataclass
class ReturnStatement(JumpStatement):
    """``return expr;`` or ``return;``"""
    expr: Optional[Expr] = None


@dataclass
class FunctionDefinition(ExternalDeclaration):
    """Function prototype with its body."""
    prototype: FunctionPrototype = None
    statement: CompoundStatement = None


# =============================================================================
# Preprocessor Directives
# =============================================================================

@dataclass
class Preprocessor(ExternalDeclaration):
    """Base class for preprocessor directives."""
    pass


@dataclass
class PreprocessorVersion(Preprocessor):
    """``#version 450 core``"""
    version: int = None
    profile: Optional[PreprocessorVersionProfile] = None


@dataclass
class PreprocessorExtensionName(Node):
    """Base class for the subject of an #extension directive."""
    pass


@dataclass
class AllExtensions(PreprocessorExtensionName):
    """``#extension all : ...``"""
    pass


@dataclass
class SpecificExtension(PreprocessorExtensionName):
    """``#extension GL_ARB_foo : ...``"""
    name: str = None


@dataclass
class PreprocessorExtension(Preprocessor):
    """``#extension name : behavior``"""
    name: PreprocessorExtensionName = None
    behavior: Optional[PreprocessorExtensionBehavior] = None


TranslationUnit = list[ExternalDeclaration]
