"""Bundled parameter generators for Python syntax exercises."""

from .base import GeneratedParams, ParameterGenerator, evaluate_expression
from .comprehensions import CompFilterGenerator, CompMappingGenerator, DictCompGenerator
from .containers import (
    AnyAllGenerator,
    DictValuesGenerator,
    IndexValuesGenerator,
    ListMethodGenerator,
    ListValuesGenerator,
    NestedAccessGenerator,
    SetOpsGenerator,
    SortedListGenerator,
    TupleAccessGenerator,
    ZipListsGenerator,
)
from .control_flow import (
    ConditionalChainGenerator,
    ExceptionScenarioGenerator,
    FinallyFlowGenerator,
    LoopSimulationGenerator,
    TryExceptFlowGenerator,
)
from .functions import DefaultArgsGenerator, FunctionCallGenerator, LambdaExprGenerator
from .numbers import (
    ArithmeticValuesGenerator,
    BoolLogicGenerator,
    ComparisonLogicGenerator,
    OperatorChainGenerator,
    TruthinessGenerator,
    TypeConversionGenerator,
)
from .strings import (
    SliceBoundsGenerator,
    StringFormatGenerator,
    StringOpsGenerator,
    StringSliceGenerator,
    VariableNamesGenerator,
)

BUILTIN_GENERATORS: tuple[type[ParameterGenerator], ...] = (
    SliceBoundsGenerator,
    StringSliceGenerator,
    StringOpsGenerator,
    StringFormatGenerator,
    VariableNamesGenerator,
    ArithmeticValuesGenerator,
    ComparisonLogicGenerator,
    BoolLogicGenerator,
    OperatorChainGenerator,
    TypeConversionGenerator,
    TruthinessGenerator,
    ListValuesGenerator,
    IndexValuesGenerator,
    DictValuesGenerator,
    TupleAccessGenerator,
    SetOpsGenerator,
    SortedListGenerator,
    ZipListsGenerator,
    AnyAllGenerator,
    ListMethodGenerator,
    NestedAccessGenerator,
    CompFilterGenerator,
    CompMappingGenerator,
    DictCompGenerator,
    LambdaExprGenerator,
    LoopSimulationGenerator,
    ConditionalChainGenerator,
    TryExceptFlowGenerator,
    FinallyFlowGenerator,
    ExceptionScenarioGenerator,
    FunctionCallGenerator,
    DefaultArgsGenerator,
)

__all__ = [
    "BUILTIN_GENERATORS",
    "AnyAllGenerator",
    "ArithmeticValuesGenerator",
    "BoolLogicGenerator",
    "CompFilterGenerator",
    "CompMappingGenerator",
    "ComparisonLogicGenerator",
    "ConditionalChainGenerator",
    "DefaultArgsGenerator",
    "DictCompGenerator",
    "DictValuesGenerator",
    "ExceptionScenarioGenerator",
    "FinallyFlowGenerator",
    "FunctionCallGenerator",
    "IndexValuesGenerator",
    "LambdaExprGenerator",
    "ListMethodGenerator",
    "ListValuesGenerator",
    "LoopSimulationGenerator",
    "NestedAccessGenerator",
    "OperatorChainGenerator",
    "SetOpsGenerator",
    "SliceBoundsGenerator",
    "SortedListGenerator",
    "StringFormatGenerator",
    "StringOpsGenerator",
    "StringSliceGenerator",
    "TruthinessGenerator",
    "TryExceptFlowGenerator",
    "TupleAccessGenerator",
    "TypeConversionGenerator",
    "VariableNamesGenerator",
    "ZipListsGenerator",
    "GeneratedParams",
    "ParameterGenerator",
    "evaluate_expression",
]
