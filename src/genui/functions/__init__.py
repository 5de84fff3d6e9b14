"""Client functions and binding resolution."""

from .base import (
    ClientFunction,
    FunctionArgumentError,
    FunctionRegistry,
    ReturnType,
    SynchronousClientFunction,
    UnknownFunctionError,
)
from .basic import basic_functions
from .context import DataContext, ExecutionContext, as_bool, is_truthy

__all__ = [
    "ClientFunction",
    "SynchronousClientFunction",
    "ReturnType",
    "FunctionRegistry",
    "UnknownFunctionError",
    "FunctionArgumentError",
    "basic_functions",
    "ExecutionContext",
    "DataContext",
    "is_truthy",
    "as_bool",
]
