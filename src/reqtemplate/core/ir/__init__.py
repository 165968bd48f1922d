"""
Intermediate representations: placeholder expression AST and template nodes.
"""

from .expressions import (
    ArrayLiteral,
    Expr,
    FieldRef,
    FuncCall,
    Literal,
    ObjectLiteral,
    PathRoot,
)
from .template import (
    CompositeNode,
    ContainerKind,
    FieldRefNode,
    FunctionCallRefNode,
    LiteralNode,
    TemplateNode,
)

__all__ = [
    # Expressions
    "ArrayLiteral",
    "Expr",
    "FieldRef",
    "FuncCall",
    "Literal",
    "ObjectLiteral",
    "PathRoot",
    # Template nodes
    "CompositeNode",
    "ContainerKind",
    "FieldRefNode",
    "FunctionCallRefNode",
    "LiteralNode",
    "TemplateNode",
]
