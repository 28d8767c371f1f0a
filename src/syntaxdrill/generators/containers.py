"""Generators for list, tuple, dict, and set exercises."""

from __future__ import annotations

from typing import Literal

from pydantic import model_validator

from ..interface import GeneratorParams
from ..prng import SeededRandom
from .base import GeneratedParams, ParameterGenerator, check, evaluate_expression

PRODUCT_NAMES = (
    "apple",
    "banana",
    "cherry",
    "widget",
    "gadget",
    "lamp",
    "mug",
    "notebook",
)


def _list_literal(values: list[int]) -> str:
    return repr(values)


def _set_literal(values: list[int]) -> str:
    return "{" + ", ".join(str(value) for value in values) + "}"


class _ListValuesParams(GeneratedParams):
    a: int
    b: int
    c: int
    list_str: str
    total: int

    @model_validator(mode="after")
    def validate_values(self) -> "_ListValuesParams":
        values = [self.a, self.b, self.c]
        check(all(1 <= value <= 99 for value in values), "values must be within [1, 99]")
        check(len(set(values)) == 3, "values must be distinct")
        check(self.list_str == _list_literal(values), "list_str mismatch")
        check(self.total == sum(values), "total mismatch")
        return self


class ListValuesGenerator(ParameterGenerator):
    """Three distinct integers in [1, 99] and the list they form."""

    name = "list-values"
    params_model = _ListValuesParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        a, b, c = rng.shuffle(range(1, 100))[:3]
        return {
            "a": a,
            "b": b,
            "c": c,
            "list_str": _list_literal([a, b, c]),
            "total": a + b + c,
        }


class _IndexValuesParams(GeneratedParams):
    idx: int
    negative_idx: int

    @model_validator(mode="after")
    def validate_index(self) -> "_IndexValuesParams":
        check(0 <= self.idx <= 4, "idx must be within [0, 4]")
        check(self.negative_idx == self.idx - 5, "negative_idx must address the same slot")
        return self


class IndexValuesGenerator(ParameterGenerator):
    """An index into a five element list plus its negative equivalent."""

    name = "index-values"
    params_model = _IndexValuesParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        idx = rng.int(0, 4)
        return {"idx": idx, "negative_idx": idx - 5}


class _DictValuesParams(GeneratedParams):
    dict_str: str
    key: str
    value: str
    exists: bool

    @model_validator(mode="after")
    def validate_lookup(self) -> "_DictValuesParams":
        data = evaluate_expression(self.dict_str)
        check(isinstance(data, dict), "dict_str must be a dict literal")
        check(2 <= len(data) <= 4, "dict must hold 2 to 4 entries")
        check(
            all(isinstance(value, int) and 1 <= value <= 99 for value in data.values()),
            "values must be integers within [1, 99]",
        )
        check(self.exists == (self.key in data), "exists mismatch")
        expected = str(data[self.key]) if self.exists else "KeyError"
        check(self.value == expected, "value mismatch")
        return self


class DictValuesGenerator(ParameterGenerator):
    """Dictionary lookups where about one in five keys is missing."""

    name = "dict-values"
    params_model = _DictValuesParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        keys = rng.shuffle(PRODUCT_NAMES)[: rng.int(2, 4)]
        data = {key: rng.int(1, 99) for key in keys}

        if rng.chance(0.8):
            key = rng.pick(keys)
            value, exists = str(data[key]), True
        else:
            key = rng.pick([name for name in PRODUCT_NAMES if name not in data])
            value, exists = "KeyError", False

        return {"dict_str": repr(data), "key": key, "value": value, "exists": exists}


_TUPLE_SCENARIOS: dict[str, tuple[str, str, int, tuple[int, int]]] = {
    "coordinates": ("point", "3D coordinates", 3, (1, 100)),
    "rgb": ("color", "RGB color", 3, (0, 255)),
    "pair": ("pair", "number pair", 2, (1, 50)),
}


class _TupleAccessParams(GeneratedParams):
    tuple_str: str
    tuple_var: str
    index: int
    result: str
    length: int
    context: str
    scenario: Literal["coordinates", "rgb", "pair"]

    @model_validator(mode="after")
    def validate_access(self) -> "_TupleAccessParams":
        var, context, length, (low, high) = _TUPLE_SCENARIOS[self.scenario]
        check((self.tuple_var, self.context, self.length) == (var, context, length), "scenario mismatch")
        values = evaluate_expression(self.tuple_str)
        check(isinstance(values, tuple) and len(values) == length, "tuple_str has the wrong shape")
        check(all(low <= value <= high for value in values), "tuple value out of range")
        check(0 <= self.index < length, "index out of range")
        check(self.result == str(values[self.index]), "result mismatch")
        return self


class TupleAccessGenerator(ParameterGenerator):
    """Index into a small named tuple such as a point or an RGB color."""

    name = "tuple-access"
    params_model = _TupleAccessParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(tuple(_TUPLE_SCENARIOS))
        var, context, length, (low, high) = _TUPLE_SCENARIOS[scenario]
        values = tuple(rng.int(low, high) for _ in range(length))
        index = rng.int(0, length - 1)
        return {
            "tuple_str": repr(values),
            "tuple_var": var,
            "index": index,
            "result": str(values[index]),
            "length": length,
            "context": context,
            "scenario": scenario,
        }


_SET_SCENARIOS: dict[str, tuple[str, str]] = {
    "union": ("|", "union combines all elements"),
    "intersection": ("&", "intersection keeps only common elements"),
    "difference": ("-", "difference removes elements in the second set"),
    "symmetric_difference": ("^", "symmetric difference keeps elements in exactly one set"),
}


class _SetOpsParams(GeneratedParams):
    set1: list[int]
    set2: list[int]
    operator: Literal["|", "&", "-", "^"]
    code: str
    result: str
    description: str
    scenario: str

    @model_validator(mode="after")
    def validate_result(self) -> "_SetOpsParams":
        check(self.scenario in _SET_SCENARIOS, "unknown scenario")
        check((self.operator, self.description) == _SET_SCENARIOS[self.scenario], "scenario mismatch")
        expected_code = (
            f"sorted({_set_literal(self.set1)} {self.operator} {_set_literal(self.set2)})"
        )
        check(self.code == expected_code, "code mismatch")
        check(self.result == repr(evaluate_expression(self.code)), "result mismatch")
        return self


class SetOpsGenerator(ParameterGenerator):
    """Set algebra with one shared element, printed through ``sorted``."""

    name = "set-ops"
    params_model = _SetOpsParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(tuple(_SET_SCENARIOS))
        operator, description = _SET_SCENARIOS[scenario]
        common = rng.int(1, 10)
        set1 = [common, rng.int(11, 20)]
        set2 = [common, rng.int(21, 30)]
        code = f"sorted({_set_literal(set1)} {operator} {_set_literal(set2)})"
        return {
            "set1": set1,
            "set2": set2,
            "operator": operator,
            "code": code,
            "result": repr(evaluate_expression(code)),
            "description": description,
            "scenario": scenario,
        }


class _SortedListParams(GeneratedParams):
    input_list: str
    output: str
    code: str
    func: Literal["sorted", "reversed"]
    reverse: bool
    scenario: Literal["sorted_asc", "sorted_desc", "reversed"]

    @model_validator(mode="after")
    def validate_output(self) -> "_SortedListParams":
        if self.scenario == "sorted_asc":
            expected = f"sorted({self.input_list})"
        elif self.scenario == "sorted_desc":
            expected = f"sorted({self.input_list}, reverse=True)"
        else:
            expected = f"list(reversed({self.input_list}))"
        check(self.code == expected, "code mismatch")
        check(self.func == ("reversed" if self.scenario == "reversed" else "sorted"), "func mismatch")
        check(self.reverse == (self.scenario == "sorted_desc"), "reverse mismatch")
        check(self.output == repr(evaluate_expression(self.code)), "output mismatch")
        return self


class SortedListGenerator(ParameterGenerator):
    """``sorted`` ascending or descending, or ``reversed``, over three numbers."""

    name = "sorted-list"
    params_model = _SortedListParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(("sorted_asc", "sorted_desc", "reversed"))
        nums = rng.shuffle([rng.int(1, 20), rng.int(21, 40), rng.int(41, 60)])
        input_list = _list_literal(nums)
        if scenario == "sorted_asc":
            code = f"sorted({input_list})"
        elif scenario == "sorted_desc":
            code = f"sorted({input_list}, reverse=True)"
        else:
            code = f"list(reversed({input_list}))"

        return {
            "input_list": input_list,
            "output": repr(evaluate_expression(code)),
            "code": code,
            "func": "reversed" if scenario == "reversed" else "sorted",
            "reverse": scenario == "sorted_desc",
            "scenario": scenario,
        }


_ZIP_SCENARIOS = {
    "equal_length": "zip pairs elements by position",
    "unequal_length": "zip stops at the shortest input",
    "numbers_only": "zip inside a comprehension for a pairwise sum",
}


class _ZipListsParams(GeneratedParams):
    list1: str
    list2: str
    output: str
    code: str
    description: str
    scenario: Literal["equal_length", "unequal_length", "numbers_only"]

    @model_validator(mode="after")
    def validate_output(self) -> "_ZipListsParams":
        check(self.description == _ZIP_SCENARIOS[self.scenario], "description mismatch")
        check(self.list1 in self.code and self.list2 in self.code, "code must use both lists")
        check(self.output == repr(evaluate_expression(self.code)), "output mismatch")
        return self


class ZipListsGenerator(ParameterGenerator):
    """``zip`` over two lists, including the shortest-input rule."""

    name = "zip-lists"
    params_model = _ZipListsParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(tuple(_ZIP_SCENARIOS))
        if scenario == "equal_length":
            list1 = _list_literal([rng.int(1, 10), rng.int(11, 20), rng.int(21, 30)])
            list2 = "['a', 'b', 'c']"
            code = f"list(zip({list1}, {list2}))"
        elif scenario == "unequal_length":
            list1 = _list_literal([rng.int(1, 10), rng.int(11, 20)])
            list2 = "['x', 'y', 'z']"
            code = f"list(zip({list1}, {list2}))"
        else:
            list1 = _list_literal([rng.int(1, 5), rng.int(6, 10)])
            list2 = _list_literal([rng.int(11, 15), rng.int(16, 20)])
            code = f"[a + b for a, b in zip({list1}, {list2})]"

        return {
            "list1": list1,
            "list2": list2,
            "output": repr(evaluate_expression(code)),
            "code": code,
            "description": _ZIP_SCENARIOS[scenario],
            "scenario": scenario,
        }


_ANY_ALL_SCENARIOS = {
    "any_true": ("any", "at least one True element"),
    "any_false": ("any", "no True elements"),
    "all_true": ("all", "all elements are True"),
    "all_false": ("all", "at least one False element"),
    "any_numbers": ("any", "non-zero numbers are truthy"),
}


class _AnyAllParams(GeneratedParams):
    list_str: str
    func: Literal["any", "all"]
    result: Literal["True", "False"]
    description: str
    scenario: str

    @model_validator(mode="after")
    def validate_result(self) -> "_AnyAllParams":
        check(self.scenario in _ANY_ALL_SCENARIOS, "unknown scenario")
        check((self.func, self.description) == _ANY_ALL_SCENARIOS[self.scenario], "scenario mismatch")
        check(
            self.result == repr(evaluate_expression(f"{self.func}({self.list_str})")),
            "result mismatch",
        )
        return self


class AnyAllGenerator(ParameterGenerator):
    """``any``/``all`` over short lists of booleans or numbers."""

    name = "any-all"
    params_model = _AnyAllParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(tuple(_ANY_ALL_SCENARIOS))
        func, description = _ANY_ALL_SCENARIOS[scenario]
        if scenario == "any_true":
            values: list[object] = rng.shuffle([False, False, True])
        elif scenario == "any_false":
            values = [False, False, False]
        elif scenario == "all_true":
            values = [True, True, True]
        elif scenario == "all_false":
            values = rng.shuffle([True, True, False])
        else:
            values = rng.shuffle([0, 0, rng.int(1, 9)])

        list_str = repr(values)
        return {
            "list_str": list_str,
            "func": func,
            "result": repr(evaluate_expression(f"{func}({list_str})")),
            "description": description,
            "scenario": scenario,
        }


_LIST_METHODS: dict[str, tuple[str, bool]] = {
    "append": ("append adds one item to the end", True),
    "extend": ("extend adds every item of another list", True),
    "insert": ("insert places an item before an index", True),
    "remove": ("remove deletes the first matching value", True),
    "pop": ("pop removes and returns the last item", False),
    "index": ("index returns the position of a value", False),
    "count": ("count returns how often a value occurs", False),
}


def _apply_list_method(nums: list[int], method: str, args: str) -> str:
    """Return what ``print`` shows after the method call in the snippet."""

    target = list(nums)
    call_args = evaluate_expression(f"({args},)") if args else ()
    returned = getattr(target, method)(*call_args)
    mutates = _LIST_METHODS[method][1]
    return repr(target) if mutates else repr(returned)


def _list_method_code(nums_str: str, method: str, args: str, mutates: bool) -> str:
    if mutates:
        return f"nums = {nums_str}\nnums.{method}({args})\nprint(nums)"
    return f"nums = {nums_str}\nprint(nums.{method}({args}))"


class _ListMethodParams(GeneratedParams):
    nums: list[int]
    nums_str: str
    method: str
    args: str
    result: str
    description: str
    code: str
    scenario: str

    @model_validator(mode="after")
    def validate_result(self) -> "_ListMethodParams":
        check(self.method in _LIST_METHODS, "unknown list method")
        description, mutates = _LIST_METHODS[self.method]
        check(self.scenario == self.method, "scenario must name the method")
        check(self.description == description, "description mismatch")
        check(self.nums_str == _list_literal(self.nums), "nums_str mismatch")
        check(
            self.code == _list_method_code(self.nums_str, self.method, self.args, mutates),
            "code mismatch",
        )
        check(
            self.result == _apply_list_method(self.nums, self.method, self.args),
            "result mismatch",
        )
        return self


class ListMethodGenerator(ParameterGenerator):
    """Mutating and querying ``list`` methods with the printed outcome."""

    name = "list-method"
    params_model = _ListMethodParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        method = rng.pick(tuple(_LIST_METHODS))
        description, mutates = _LIST_METHODS[method]
        nums = [rng.int(1, 9) for _ in range(rng.int(3, 5))]

        if method == "append":
            args = str(rng.int(10, 20))
        elif method == "extend":
            args = _list_literal([rng.int(10, 20), rng.int(21, 30)])
        elif method == "insert":
            args = f"{rng.int(0, len(nums) - 1)}, {rng.int(10, 20)}"
        elif method == "pop":
            args = ""
        else:
            args = str(rng.pick(nums))

        nums_str = _list_literal(nums)
        return {
            "nums": nums,
            "nums_str": nums_str,
            "method": method,
            "args": args,
            "result": _apply_list_method(nums, method, args),
            "description": description,
            "code": _list_method_code(nums_str, method, args, mutates),
            "scenario": method,
        }


_NESTED_SCENARIOS: dict[str, str] = {
    "list_of_lists": "index a row, then a column",
    "dict_of_lists": "look up a key, then index the list",
    "list_of_dicts": "index a record, then look up a field",
    "dict_of_dicts": "look up a section, then a setting",
}


class _NestedAccessParams(GeneratedParams):
    data_str: str
    var_name: str
    access_expr: str
    result: str
    description: str
    code: str
    scenario: str

    @model_validator(mode="after")
    def validate_access(self) -> "_NestedAccessParams":
        check(self.scenario in _NESTED_SCENARIOS, "unknown scenario")
        check(self.description == _NESTED_SCENARIOS[self.scenario], "description mismatch")
        check(self.access_expr.startswith(self.var_name + "["), "access_expr must index var_name")
        data = evaluate_expression(self.data_str)
        value = evaluate_expression(self.access_expr, {self.var_name: data})
        check(self.result == str(value), "result mismatch")
        check(
            self.code == f"{self.var_name} = {self.data_str}\nprint({self.access_expr})",
            "code mismatch",
        )
        return self


class NestedAccessGenerator(ParameterGenerator):
    """Two-level indexing through lists and dicts."""

    name = "nested-access"
    params_model = _NestedAccessParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(tuple(_NESTED_SCENARIOS))
        if scenario == "list_of_lists":
            var_name = "matrix"
            data: object = [[rng.int(1, 9) for _ in range(3)] for _ in range(3)]
            access_expr = f"matrix[{rng.int(0, 2)}][{rng.int(0, 2)}]"
        elif scenario == "dict_of_lists":
            var_name = "scores"
            data = {
                name: [rng.int(50, 100) for _ in range(3)]
                for name in rng.shuffle(("alice", "bob", "cara"))[:2]
            }
            access_expr = f"scores[{rng.pick(list(data))!r}][{rng.int(0, 2)}]"
        elif scenario == "list_of_dicts":
            var_name = "users"
            data = [
                {"name": name, "age": rng.int(18, 65)}
                for name in rng.shuffle(("ana", "ben", "chen", "dev"))[:3]
            ]
            access_expr = f"users[{rng.int(0, 2)}][{rng.pick(('name', 'age'))!r}]"
        else:
            var_name = "config"
            data = {
                "db": {"host": "localhost", "port": rng.pick((5432, 3306, 6379))},
                "app": {"debug": rng.chance(0.5), "workers": rng.int(1, 8)},
            }
            section = rng.pick(("db", "app"))
            key = rng.pick(tuple(data[section]))
            access_expr = f"config[{section!r}][{key!r}]"

        data_str = repr(data)
        value = evaluate_expression(access_expr, {var_name: data})
        return {
            "data_str": data_str,
            "var_name": var_name,
            "access_expr": access_expr,
            "result": str(value),
            "description": _NESTED_SCENARIOS[scenario],
            "code": f"{var_name} = {data_str}\nprint({access_expr})",
            "scenario": scenario,
        }
