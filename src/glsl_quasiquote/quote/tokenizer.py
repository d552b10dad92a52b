"""
Syntax Tree Quoter
==================

This module turns a GLSL syntax tree into a constructor expression: a
Python expression that rebuilds the same tree when evaluated with the
syntax module in scope.

Every node kind has its own explicit case and the dispatch chains end
with UnhandledNodeError instead of a catch-all, so a node kind added to
the syntax module without a quoting case fails loudly.

Fidelity
--------
For every node N:

    evaluate(render(quote(N))) == N

Order, length and optionality of every child are preserved; identifier
text and literal values are reproduced exactly.

Quoting Categories
------------------
- Preprocessor: #version, #extension
- Declarations: prototypes, parameters, declarator lists, initializers,
  precision declarations, interface blocks, global qualifiers
- Statements: compound, declaration, expression, selection, switch,
  case labels, loops, jumps
- Expressions: all Expr variants and the operator catalogs
- Types: the built-in type catalog, struct specifiers, type names,
  array specifiers
- Qualifiers: storage, subroutine, layout, precision, interpolation,
  invariant, precise

Example Usage
-------------
>>> from glsl_quasiquote.glsl import parse_source
>>> from glsl_quasiquote.quote.tokenizer import Quoter
>>> from glsl_quasiquote.quote.constructor import render
>>> expr = Quoter().quote_translation_unit(parse_source("void main() {}"))
>>> print(render(expr))  # doctest: +SKIP
"""

from enum import Enum
import logging

from glsl_quasiquote.errors import UnhandledNodeError
from glsl_quasiquote.glsl import syntax
from glsl_quasiquote.quote.constructor import Argument, Call, ConstructorExpr, Reference, Sequence
from glsl_quasiquote.quote.quoted import (
    quote_bool,
    quote_double,
    quote_enum,
    quote_float,
    quote_identifier,
    quote_indirect,
    quote_int,
    quote_optional,
    quote_sequence,
    quote_string,
    quote_uint,
)

logger = logging.getLogger(__name__)

# Catalog enums quoted as references
CATALOG_ENUMS: tuple[type[Enum], ...] = (
    syntax.TypeSpecifierNonArray,
    syntax.StorageQualifier,
    syntax.PrecisionQualifier,
    syntax.InterpolationQualifier,
    syntax.UnaryOp,
    syntax.BinaryOp,
    syntax.AssignmentOp,
    syntax.PreprocessorVersionProfile,
    syntax.PreprocessorExtensionBehavior,
)


def construct(class_name: str, **fields: ConstructorExpr) -> Call:
    """Build a keyword-argument call of a syntax class."""
    return Call(
        Reference((class_name,)),
        tuple(Argument(name, value) for name, value in fields.items()),
    )


class Quoter:
    """
    Quotes syntax tree nodes into constructor expressions.

    A Quoter keeps only the set of nodes on the current recursion path
    and can be reused for any number of trees.

    Usage:
        quoter = Quoter()
        expr = quoter.quote_translation_unit(unit)
    """

    def __init__(self):
        self._active: set[int] = set()

    def _indirect(self, node, quote) -> ConstructorExpr:
        return quote_indirect(node, quote, self._active)

    def _expr(self, node: syntax.Expr) -> ConstructorExpr:
        return quote_indirect(node, self.quote_expr, self._active)

    def _statement(self, node: syntax.Statement) -> ConstructorExpr:
        return quote_indirect(node, self.quote_statement, self._active)

    # =========================================================================
    # Generic Entry Point
    # =========================================================================

    def quote(self, node) -> ConstructorExpr:
        """
        Quote any syntax value: a translation unit (list), a node of any
        category or a catalog enum member.
        """
        if isinstance(node, list):
            return self.quote_translation_unit(node)
        if isinstance(node, CATALOG_ENUMS):
            return quote_enum(node, type(node))
        if isinstance(node, syntax.ExternalDeclaration):
            return self.quote_external_declaration(node)
        if isinstance(node, syntax.Statement):
            return self.quote_statement(node)
        if isinstance(node, syntax.Expr):
            return self.quote_expr(node)
        if isinstance(node, syntax.FunIdentifier):
            return self.quote_fun_identifier(node)
        if isinstance(node, syntax.TypeSpecifier):
            return self.quote_type_specifier(node)
        if isinstance(node, syntax.FullySpecifiedType):
            return self.quote_fully_specified_type(node)
        if isinstance(node, (syntax.StructSpecifier, syntax.TypeName)):
            return self.quote_type_specifier_non_array(node)
        if isinstance(node, syntax.StructFieldSpecifier):
            return self.quote_struct_field_specifier(node)
        if isinstance(node, syntax.ArrayedIdentifier):
            return self.quote_arrayed_identifier(node)
        if isinstance(node, syntax.ArraySpecifier):
            return self.quote_array_specifier(node)
        if isinstance(node, syntax.TypeQualifier):
            return self.quote_type_qualifier(node)
        if isinstance(node, (
            syntax.SubroutineQualifier,
            syntax.LayoutQualifier,
            syntax.InvariantQualifier,
            syntax.PreciseQualifier,
        )):
            return self.quote_type_qualifier_spec(node)
        if isinstance(node, syntax.LayoutQualifierSpec):
            return self.quote_layout_qualifier_spec(node)
        if isinstance(node, syntax.FunctionParameterDeclaration):
            return self.quote_function_parameter_declaration(node)
        if isinstance(node, syntax.FunctionParameterDeclarator):
            return self.quote_function_parameter_declarator(node)
        if isinstance(node, syntax.SingleDeclaration):
            return self.quote_single_declaration(node)
        if isinstance(node, syntax.SingleDeclarationNoType):
            return self.quote_single_declaration_no_type(node)
        if isinstance(node, syntax.Initializer):
            return self.quote_initializer(node)
        if isinstance(node, syntax.SelectionRestStatement):
            return self.quote_selection_rest(node)
        if isinstance(node, syntax.Condition):
            return self.quote_condition(node)
        if isinstance(node, syntax.ForInitStatement):
            return self.quote_for_init(node)
        if isinstance(node, syntax.ForRestStatement):
            return self.quote_for_rest(node)
        if isinstance(node, syntax.PreprocessorExtensionName):
            return self.quote_extension_name(node)
        raise UnhandledNodeError(node, "syntax")

    # =========================================================================
    # Translation Unit and Top Level
    # =========================================================================

    def quote_translation_unit(self, unit: syntax.TranslationUnit) -> Sequence:
        """Quote every external declaration, in source order."""
        expr = quote_sequence(unit, self.quote_external_declaration)
        logger.debug(f"Quoted translation unit with {len(unit)} external declaration(s)")
        return expr

    def quote_external_declaration(self, node: syntax.ExternalDeclaration) -> ConstructorExpr:
        if isinstance(node, syntax.Preprocessor):
            return self.quote_preprocessor(node)
        if isinstance(node, syntax.FunctionDefinition):
            return self.quote_function_definition(node)
        if isinstance(node, syntax.Declaration):
            return self.quote_declaration(node)
        raise UnhandledNodeError(node, "external declaration")

    def quote_function_definition(self, node: syntax.FunctionDefinition) -> Call:
        return construct(
            "FunctionDefinition",
            prototype=self.quote_function_prototype(node.prototype),
            statement=self.quote_compound_statement(node.statement),
        )

    # =========================================================================
    # Preprocessor
    # =========================================================================

    def quote_preprocessor(self, node: syntax.Preprocessor) -> Call:
        if isinstance(node, syntax.PreprocessorVersion):
            return construct(
                "PreprocessorVersion",
                version=quote_uint(node.version),
                profile=quote_optional(
                    node.profile,
                    lambda p: quote_enum(p, syntax.PreprocessorVersionProfile),
                ),
            )
        if isinstance(node, syntax.PreprocessorExtension):
            return construct(
                "PreprocessorExtension",
                name=self.quote_extension_name(node.name),
                behavior=quote_optional(
                    node.behavior,
                    lambda b: quote_enum(b, syntax.PreprocessorExtensionBehavior),
                ),
            )
        raise UnhandledNodeError(node, "preprocessor")

    def quote_extension_name(self, node: syntax.PreprocessorExtensionName) -> Call:
        if isinstance(node, syntax.AllExtensions):
            return construct("AllExtensions")
        if isinstance(node, syntax.SpecificExtension):
            return construct("SpecificExtension", name=quote_string(node.name))
        raise UnhandledNodeError(node, "extension name")

    # =========================================================================
    # Declarations
    # =========================================================================

    def quote_declaration(self, node: syntax.Declaration) -> Call:
        if isinstance(node, syntax.FunctionPrototype):
            return self.quote_function_prototype(node)

        if isinstance(node, syntax.InitDeclaratorList):
            return construct(
                "InitDeclaratorList",
                head=self.quote_single_declaration(node.head),
                tail=quote_sequence(node.tail, self.quote_single_declaration_no_type),
            )

        if isinstance(node, syntax.PrecisionDeclaration):
            return construct(
                "PrecisionDeclaration",
                qualifier=quote_enum(node.qualifier, syntax.PrecisionQualifier),
                ty=self.quote_type_specifier(node.ty),
            )

        if isinstance(node, syntax.Block):
            return construct(
                "Block",
                qualifier=self.quote_type_qualifier(node.qualifier),
                name=quote_identifier(node.name),
                fields=quote_sequence(node.fields, self.quote_struct_field_specifier),
                identifier=quote_optional(node.identifier, self.quote_arrayed_identifier),
            )

        if isinstance(node, syntax.GlobalDeclaration):
            return construct(
                "GlobalDeclaration",
                qualifier=self.quote_type_qualifier(node.qualifier),
                identifiers=quote_sequence(node.identifiers, quote_identifier),
            )

        raise UnhandledNodeError(node, "declaration")

    def quote_function_prototype(self, node: syntax.FunctionPrototype) -> Call:
        if not isinstance(node, syntax.FunctionPrototype):
            raise UnhandledNodeError(node, "function prototype")
        return construct(
            "FunctionPrototype",
            ty=self.quote_fully_specified_type(node.ty),
            name=quote_identifier(node.name),
            parameters=quote_sequence(node.parameters, self.quote_function_parameter_declaration),
        )

    def quote_function_parameter_declaration(
        self, node: syntax.FunctionParameterDeclaration
    ) -> Call:
        if isinstance(node, syntax.NamedParameter):
            return construct(
                "NamedParameter",
                qualifier=quote_optional(node.qualifier, self.quote_type_qualifier),
                declarator=self.quote_function_parameter_declarator(node.declarator),
            )
        if isinstance(node, syntax.UnnamedParameter):
            return construct(
                "UnnamedParameter",
                qualifier=quote_optional(node.qualifier, self.quote_type_qualifier),
                ty=self.quote_type_specifier(node.ty),
            )
        raise UnhandledNodeError(node, "function parameter")

    def quote_function_parameter_declarator(
        self, node: syntax.FunctionParameterDeclarator
    ) -> Call:
        return construct(
            "FunctionParameterDeclarator",
            ty=self.quote_type_specifier(node.ty),
            name=quote_identifier(node.name),
            array_spec=quote_optional(node.array_spec, self.quote_array_specifier),
        )

    def quote_single_declaration(self, node: syntax.SingleDeclaration) -> Call:
        return construct(
            "SingleDeclaration",
            ty=self.quote_fully_specified_type(node.ty),
            name=quote_optional(node.name, quote_identifier),
            array_specifier=quote_optional(node.array_specifier, self.quote_array_specifier),
            initializer=quote_optional(node.initializer, self.quote_initializer),
        )

    def quote_single_declaration_no_type(self, node: syntax.SingleDeclarationNoType) -> Call:
        return construct(
            "SingleDeclarationNoType",
            name=quote_identifier(node.name),
            array_specifier=quote_optional(node.array_specifier, self.quote_array_specifier),
            initializer=quote_optional(node.initializer, self.quote_initializer),
        )

    def quote_initializer(self, node: syntax.Initializer) -> Call:
        if isinstance(node, syntax.SimpleInitializer):
            return construct("SimpleInitializer", expr=self._expr(node.expr))
        if isinstance(node, syntax.ListInitializer):
            return construct(
                "ListInitializer",
                initializers=quote_sequence(
                    node.initializers,
                    lambda child: self._indirect(child, self.quote_initializer),
                ),
            )
        raise UnhandledNodeError(node, "initializer")

    # =========================================================================
    # Statements
    # =========================================================================

    def quote_statement(self, node: syntax.Statement) -> Call:
        if isinstance(node, syntax.CompoundStatement):
            return self.quote_compound_statement(node)
        if isinstance(node, syntax.SimpleStatement):
            return self.quote_simple_statement(node)
        raise UnhandledNodeError(node, "statement")

    def quote_compound_statement(self, node: syntax.CompoundStatement) -> Call:
        if not isinstance(node, syntax.CompoundStatement):
            raise UnhandledNodeError(node, "compound statement")
        return construct(
            "CompoundStatement",
            statement_list=quote_sequence(node.statement_list, self._statement),
        )

    def quote_simple_statement(self, node: syntax.SimpleStatement) -> Call:
        if isinstance(node, syntax.DeclarationStatement):
            return construct(
                "DeclarationStatement",
                declaration=self.quote_declaration(node.declaration),
            )

        if isinstance(node, syntax.ExpressionStatement):
            return construct(
                "ExpressionStatement",
                expr=quote_optional(node.expr, self._expr),
            )

        if isinstance(node, syntax.SelectionStatement):
            return construct(
                "SelectionStatement",
                cond=self._expr(node.cond),
                rest=self.quote_selection_rest(node.rest),
            )

        if isinstance(node, syntax.SwitchStatement):
            return construct(
                "SwitchStatement",
                head=self._expr(node.head),
                body=quote_sequence(node.body, self._statement),
            )

        if isinstance(node, syntax.CaseLabel):
            return self.quote_case_label(node)

        if isinstance(node, syntax.IterationStatement):
            return self.quote_iteration_statement(node)

        if isinstance(node, syntax.JumpStatement):
            return self.quote_jump_statement(node)

        raise UnhandledNodeError(node, "simple statement")

    def quote_selection_rest(self, node: syntax.SelectionRestStatement) -> Call:
        if isinstance(node, syntax.SelectionThen):
            return construct("SelectionThen", statement=self._statement(node.statement))
        if isinstance(node, syntax.SelectionElse):
            return construct(
                "SelectionElse",
                then_statement=self._statement(node.then_statement),
                else_statement=self._statement(node.else_statement),
            )
        raise UnhandledNodeError(node, "selection branch")

    def quote_case_label(self, node: syntax.CaseLabel) -> Call:
        if isinstance(node, syntax.Case):
            return construct("Case", expr=self._expr(node.expr))
        if isinstance(node, syntax.DefaultCase):
            return construct("DefaultCase")
        raise UnhandledNodeError(node, "case label")

    def quote_iteration_statement(self, node: syntax.IterationStatement) -> Call:
        if isinstance(node, syntax.WhileStatement):
            return construct(
                "WhileStatement",
                condition=self.quote_condition(node.condition),
                body=self._statement(node.body),
            )
        if isinstance(node, syntax.DoWhileStatement):
            return construct(
                "DoWhileStatement",
                body=self._statement(node.body),
                condition=self._expr(node.condition),
            )
        if isinstance(node, syntax.ForStatement):
            return construct(
                "ForStatement",
                init=self.quote_for_init(node.init),
                rest=self.quote_for_rest(node.rest),
                body=self._statement(node.body),
            )
        raise UnhandledNodeError(node, "iteration statement")

    def quote_condition(self, node: syntax.Condition) -> Call:
        if isinstance(node, syntax.ConditionExpr):
            return construct("ConditionExpr", expr=self._expr(node.expr))
        if isinstance(node, syntax.ConditionAssignment):
            return construct(
                "ConditionAssignment",
                ty=self.quote_fully_specified_type(node.ty),
                name=quote_identifier(node.name),
                initializer=self.quote_initializer(node.initializer),
            )
        raise UnhandledNodeError(node, "condition")

    def quote_for_init(self, node: syntax.ForInitStatement) -> Call:
        if isinstance(node, syntax.ForInitExpression):
            return construct("ForInitExpression", expr=quote_optional(node.expr, self._expr))
        if isinstance(node, syntax.ForInitDeclaration):
            return construct(
                "ForInitDeclaration",
                declaration=self.quote_declaration(node.declaration),
            )
        raise UnhandledNodeError(node, "for-loop initializer")

    def quote_for_rest(self, node: syntax.ForRestStatement) -> Call:
        if not isinstance(node, syntax.ForRestStatement):
            raise UnhandledNodeError(node, "for-loop clauses")
        return construct(
            "ForRestStatement",
            condition=quote_optional(node.condition, self.quote_condition),
            post_expr=quote_optional(node.post_expr, self._expr),
        )

    def quote_jump_statement(self, node: syntax.JumpStatement) -> Call:
        if isinstance(node, syntax.ContinueStatement):
            return construct("ContinueStatement")
        if isinstance(node, syntax.BreakStatement):
            return construct("BreakStatement")
        if isinstance(node, syntax.DiscardStatement):
            return construct("DiscardStatement")
        if isinstance(node, syntax.ReturnStatement):
            return construct("ReturnStatement", expr=quote_optional(node.expr, self._expr))
        raise UnhandledNodeError(node, "jump statement")

    # =========================================================================
    # Expressions
    # =========================================================================

    def quote_expr(self, node: syntax.Expr) -> Call:
        """Quote an expression; sub-expressions go through the indirection lift."""
        if isinstance(node, syntax.Variable):
            return construct("Variable", ident=quote_identifier(node.ident))

        if isinstance(node, syntax.IntConst):
            return construct("IntConst", value=quote_int(node.value))

        if isinstance(node, syntax.UIntConst):
            return construct("UIntConst", value=quote_uint(node.value))

        if isinstance(node, syntax.BoolConst):
            return construct("BoolConst", value=quote_bool(node.value))

        if isinstance(node, syntax.FloatConst):
            return construct("FloatConst", value=quote_float(node.value))

        if isinstance(node, syntax.DoubleConst):
            return construct("DoubleConst", value=quote_double(node.value))

        if isinstance(node, syntax.Unary):
            return construct(
                "Unary",
                op=quote_enum(node.op, syntax.UnaryOp),
                expr=self._expr(node.expr),
            )

        if isinstance(node, syntax.Binary):
            return construct(
                "Binary",
                op=quote_enum(node.op, syntax.BinaryOp),
                left=self._expr(node.left),
                right=self._expr(node.right),
            )

        if isinstance(node, syntax.Ternary):
            return construct(
                "Ternary",
                cond=self._expr(node.cond),
                then_expr=self._expr(node.then_expr),
                else_expr=self._expr(node.else_expr),
            )

        if isinstance(node, syntax.Assignment):
            return construct(
                "Assignment",
                target=self._expr(node.target),
                op=quote_enum(node.op, syntax.AssignmentOp),
                value=self._expr(node.value),
            )

        if isinstance(node, syntax.Bracket):
            return construct(
                "Bracket",
                expr=self._expr(node.expr),
                array_spec=self.quote_array_specifier(node.array_spec),
            )

        if isinstance(node, syntax.FunCall):
            return construct(
                "FunCall",
                fun=self.quote_fun_identifier(node.fun),
                args=quote_sequence(node.args, self._expr),
            )

        if isinstance(node, syntax.Dot):
            return construct(
                "Dot",
                expr=self._expr(node.expr),
                field=quote_identifier(node.field),
            )

        if isinstance(node, syntax.PostInc):
            return construct("PostInc", expr=self._expr(node.expr))

        if isinstance(node, syntax.PostDec):
            return construct("PostDec", expr=self._expr(node.expr))

        if isinstance(node, syntax.Comma):
            return construct(
                "Comma",
                left=self._expr(node.left),
                right=self._expr(node.right),
            )

        raise UnhandledNodeError(node, "expression")

    def quote_fun_identifier(self, node: syntax.FunIdentifier) -> Call:
        if isinstance(node, syntax.FunName):
            return construct("FunName", name=quote_identifier(node.name))
        if isinstance(node, syntax.FunExpr):
            return construct("FunExpr", expr=self._expr(node.expr))
        raise UnhandledNodeError(node, "function identifier")

    # =========================================================================
    # Types
    # =========================================================================

    def quote_type_specifier_non_array(self, ty: syntax.NonArrayType) -> ConstructorExpr:
        if isinstance(ty, syntax.TypeSpecifierNonArray):
            return quote_enum(ty, syntax.TypeSpecifierNonArray)
        if isinstance(ty, syntax.StructSpecifier):
            return self.quote_struct_specifier(ty)
        if isinstance(ty, syntax.TypeName):
            return construct("TypeName", name=quote_identifier(ty.name))
        raise UnhandledNodeError(ty, "type specifier")

    def quote_type_specifier(self, node: syntax.TypeSpecifier) -> Call:
        return construct(
            "TypeSpecifier",
            ty=self.quote_type_specifier_non_array(node.ty),
            array_specifier=quote_optional(node.array_specifier, self.quote_array_specifier),
        )

    def quote_fully_specified_type(self, node: syntax.FullySpecifiedType) -> Call:
        return construct(
            "FullySpecifiedType",
            qualifier=quote_optional(node.qualifier, self.quote_type_qualifier),
            ty=self.quote_type_specifier(node.ty),
        )

    def quote_struct_specifier(self, node: syntax.StructSpecifier) -> Call:
        return construct(
            "StructSpecifier",
            name=quote_optional(node.name, quote_string),
            fields=quote_sequence(node.fields, self.quote_struct_field_specifier),
        )

    def quote_struct_field_specifier(self, node: syntax.StructFieldSpecifier) -> Call:
        return construct(
            "StructFieldSpecifier",
            qualifier=quote_optional(node.qualifier, self.quote_type_qualifier),
            ty=self._indirect(node.ty, self.quote_type_specifier),
            identifiers=quote_sequence(node.identifiers, self.quote_arrayed_identifier),
        )

    def quote_arrayed_identifier(self, node: syntax.ArrayedIdentifier) -> Call:
        return construct(
            "ArrayedIdentifier",
            ident=quote_identifier(node.ident),
            array_spec=quote_optional(node.array_spec, self.quote_array_specifier),
        )

    def quote_array_specifier(self, node: syntax.ArraySpecifier) -> Call:
        if isinstance(node, syntax.UnsizedArray):
            return construct("UnsizedArray")
        if isinstance(node, syntax.SizedArray):
            return construct("SizedArray", size=self._expr(node.size))
        raise UnhandledNodeError(node, "array specifier")

    # =========================================================================
    # Qualifiers
    # =========================================================================

    def quote_type_qualifier(self, node: syntax.TypeQualifier) -> Call:
        """Quote a qualifier list; order is significant."""
        return construct(
            "TypeQualifier",
            qualifiers=quote_sequence(node.qualifiers, self.quote_type_qualifier_spec),
        )

    def quote_type_qualifier_spec(self, spec: syntax.TypeQualifierSpec) -> ConstructorExpr:
        if isinstance(spec, syntax.StorageQualifier):
            return quote_enum(spec, syntax.StorageQualifier)
        if isinstance(spec, syntax.SubroutineQualifier):
            return construct(
                "SubroutineQualifier",
                type_names=quote_sequence(spec.type_names, quote_string),
            )
        if isinstance(spec, syntax.LayoutQualifier):
            return construct(
                "LayoutQualifier",
                ids=quote_sequence(spec.ids, self.quote_layout_qualifier_spec),
            )
        if isinstance(spec, syntax.PrecisionQualifier):
            return quote_enum(spec, syntax.PrecisionQualifier)
        if isinstance(spec, syntax.InterpolationQualifier):
            return quote_enum(spec, syntax.InterpolationQualifier)
        if isinstance(spec, syntax.InvariantQualifier):
            return construct("InvariantQualifier")
        if isinstance(spec, syntax.PreciseQualifier):
            return construct("PreciseQualifier")
        raise UnhandledNodeError(spec, "type qualifier")

    def quote_layout_qualifier_spec(self, spec: syntax.LayoutQualifierSpec) -> Call:
        if isinstance(spec, syntax.LayoutIdentifier):
            return construct(
                "LayoutIdentifier",
                name=quote_identifier(spec.name),
                value=quote_optional(spec.value, self._expr),
            )
        if isinstance(spec, syntax.LayoutShared):
            return construct("LayoutShared")
        raise UnhandledNodeError(spec, "layout qualifier")
