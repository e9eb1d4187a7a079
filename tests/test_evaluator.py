"""
Test suite for interpolation evaluation.
Covers string/number/list/map defaults, absent data, conditionals and metadata.
"""

import pytest

from tfeval.config import Config
from tfeval.evaluator import Evaluator
from tfeval.exceptions import (
    DepthExceededError,
    EvaluationIndexError,
    UnsupportedSyntaxError,
)
from tfeval.values import ABSENT, ListValue, MapValue, Num, Str


def make_evaluator(variables=None, config=None, overrides=()):
    """Helper: build an evaluator over one file declaring the given variable blocks."""
    body = {'variable': variables} if variables is not None else {}
    return Evaluator({'testfile': body}, [], list(overrides), config or Config.init())


NAME_STRING = {'name': {'type': 'string', 'default': 'test'}}
NAME_INTEGER = {'name': {'type': 'string', 'default': 1}}
NAME_LIST = {'name': {'type': 'list', 'default': ['test1', 'test2']}}
NAME_MAP = {'name': {'type': 'map', 'default': {'key': 'test1', 'value': 'test2'}}}


class TestEvalReturnString:
    """Single-segment strings resolving to string values."""

    @pytest.mark.parametrize('variables, source, expected', [
        (NAME_STRING, '${var.name}', 'test'),
        (NAME_INTEGER, '${var.name}', '1'),
        (NAME_LIST, '${var.name[0]}', 'test1'),
        (NAME_MAP, '${var.name["key"]}', 'test1'),
        ({'name': {'default': 'test'}}, '${var.name}', 'test'),
        ({'name': {'default': 1}}, '${var.name}', '1'),
        ({'name': {'default': ['test1', 'test2']}}, '${var.name[0]}', 'test1'),
        ({'name': {'default': {'key': 'test1', 'value': 'test2'}}}, '${var.name["key"]}', 'test1'),
        (
            {'name': {'type': 'string', 'default': 'prod'}},
            '${var.name == "prod" ? "production" : "development"}',
            'production',
        ),
    ], ids=[
        'completed string variable',
        'completed integer variable',
        'completed list variable',
        'completed map variable',
        'string variable in missing type',
        'integer variable in missing type',
        'list variable in missing type',
        'map variable in missing type',
        'conditional',
    ])
    def test_eval_returns_string(self, variables, source, expected):
        evaluator = make_evaluator(variables)
        assert evaluator.eval_native(source) == expected

    def test_integer_default_is_number_value(self):
        """The native Value of an integer default is Num, rendered without fraction."""
        evaluator = make_evaluator(NAME_INTEGER)
        result = evaluator.eval('${var.name}')
        assert result == Num(1)
        assert result.to_string() == '1'

    def test_integral_float_default_drops_fraction(self):
        evaluator = make_evaluator({'name': {'default': 2.0}})
        assert evaluator.eval_native('${var.name}') == '2'

    def test_non_integral_float_default(self):
        evaluator = make_evaluator({'name': {'default': 1.5}})
        assert evaluator.eval_native('${var.name}') == '1.5'

    def test_type_mismatch_does_not_block_resolution(self):
        """A declared type that disagrees with the default's shape is ignored."""
        evaluator = make_evaluator({'name': {'type': 'string', 'default': ['a', 'b']}})
        assert evaluator.eval_native('${var.name[1]}') == 'b'


class TestEvalReturnCollections:
    """Single-segment references to list and map defaults keep their type."""

    def test_return_list_variable(self):
        evaluator = make_evaluator({'name': {'default': ['test1', 'test2']}})
        result = evaluator.eval('${var.name}')
        assert isinstance(result, ListValue)
        assert evaluator.eval_native('${var.name}') == ['test1', 'test2']

    def test_return_map_variable(self):
        evaluator = make_evaluator({'name': {'default': {'key': 'test1', 'value': 'test2'}}})
        result = evaluator.eval('${var.name}')
        assert isinstance(result, MapValue)
        assert evaluator.eval_native('${var.name}') == {'key': 'test1', 'value': 'test2'}

    def test_nested_index(self):
        evaluator = make_evaluator({'name': {'default': {'zones': ['a', 'b']}}})
        assert evaluator.eval('${var.name["zones"][1]}') == Str('b')

    def test_index_by_numeric_string_on_list(self):
        evaluator = make_evaluator(NAME_LIST)
        assert evaluator.eval('${var.name["1"]}') == Str('test2')

    def test_tuple_literal(self):
        evaluator = make_evaluator(NAME_STRING)
        assert evaluator.eval_native('${["a", var.name]}') == ['a', 'test']

    def test_object_literal_with_index(self):
        evaluator = make_evaluator()
        assert evaluator.eval('${{a = "b"}["a"]}') == Str('b')


class TestEvalReturnNil:
    """Absent data is a successful result, not an error."""

    def test_undefined_variable(self):
        evaluator = make_evaluator()
        assert evaluator.eval('${var.name}') is ABSENT
        assert evaluator.eval_native('${var.name}') is None

    def test_missing_default(self):
        evaluator = make_evaluator({'name': {}})
        assert evaluator.eval('${var.name}') is ABSENT

    def test_null_default(self):
        evaluator = make_evaluator({'name': {'default': None}})
        assert evaluator.eval('${var.name}') is ABSENT

    def test_missing_map_key(self):
        evaluator = make_evaluator(NAME_MAP)
        assert evaluator.eval('${var.name["missing"]}') is ABSENT

    def test_index_into_absent(self):
        evaluator = make_evaluator()
        assert evaluator.eval('${var.name[0]}') is ABSENT

    def test_index_into_string(self):
        evaluator = make_evaluator(NAME_STRING)
        assert evaluator.eval('${var.name[0]}') is ABSENT

    def test_absent_in_composite_renders_empty(self):
        evaluator = make_evaluator()
        assert evaluator.eval('a-${var.name}-b') == Str('a--b')


class TestEvalErrors:
    """Failures that surface to the caller."""

    def test_list_index_out_of_range(self):
        evaluator = make_evaluator(NAME_LIST)
        with pytest.raises(EvaluationIndexError) as exc_info:
            evaluator.eval('${var.name[5]}')
        assert exc_info.value.index == 5
        assert exc_info.value.length == 2

    def test_out_of_range_is_builtin_index_error(self):
        evaluator = make_evaluator(NAME_LIST)
        with pytest.raises(IndexError):
            evaluator.eval('${var.name[2]}')

    @pytest.mark.parametrize('source', [
        '${module.text}',
        '${aws_subnet.app.id}',
        '${lookup(var.roles, count.index)}',
        '${var.text} ${lookup(var.roles, count.index)}',
        '${var.name',
        '${}',
    ])
    def test_unsupported_syntax(self, source):
        evaluator = make_evaluator(NAME_STRING)
        with pytest.raises(UnsupportedSyntaxError):
            evaluator.eval(source)

    def test_depth_exceeded(self):
        evaluator = make_evaluator(NAME_STRING, config=Config(max_depth=3))
        with pytest.raises(DepthExceededError):
            evaluator.eval('${((((var.name))))}')

    def test_depth_within_limit(self):
        evaluator = make_evaluator(NAME_STRING, config=Config(max_depth=3))
        assert evaluator.eval('${(var.name)}') == Str('test')


class TestComposite:
    """Strings mixing literal text and segments always produce Str."""

    def test_plain_text(self):
        evaluator = make_evaluator()
        assert evaluator.eval('text') == Str('text')

    def test_empty_string(self):
        evaluator = make_evaluator()
        assert evaluator.eval('') == Str('')

    def test_text_with_segment(self):
        evaluator = make_evaluator({'world': {'default': 'earth'}})
        assert evaluator.eval('Hello ${var.world}') == Str('Hello earth')

    def test_multiple_segments(self):
        evaluator = make_evaluator({'a': {'default': 'x'}, 'b': {'default': 3}})
        assert evaluator.eval('${var.a}:${var.b}') == Str('x:3')

    def test_list_stringified_in_composite(self):
        evaluator = make_evaluator(NAME_LIST)
        assert evaluator.eval('items=${var.name}') == Str('items=["test1", "test2"]')

    def test_map_stringified_with_sorted_keys(self):
        evaluator = make_evaluator({'name': {'default': {'z': '1', 'a': '2'}}})
        assert evaluator.eval('m=${var.name}') == Str('m={"a": "2", "z": "1"}')

    def test_escaped_interpolation(self):
        evaluator = make_evaluator(NAME_STRING)
        assert evaluator.eval('$${var.name}') == Str('${var.name}')

    def test_close_brace_inside_string_key(self):
        evaluator = make_evaluator({'name': {'default': {'}': 'brace'}}})
        assert evaluator.eval('${var.name["}"]}') == Str('brace')


class TestConditional:
    """Ternary conditionals compare both sides as strings."""

    SOURCE = '${var.name == "prod" ? "production" : "development"}'

    @pytest.mark.parametrize('default, expected', [
        ('prod', 'production'),
        ('staging', 'development'),
        ('', 'development'),
    ])
    def test_branch_selection(self, default, expected):
        evaluator = make_evaluator({'name': {'default': default}})
        assert evaluator.eval(self.SOURCE) == Str(expected)

    def test_number_compared_as_string(self):
        evaluator = make_evaluator({'count': {'default': 1}})
        assert evaluator.eval('${var.count == "1" ? "one" : "other"}') == Str('one')

    def test_absent_equals_empty_string(self):
        evaluator = make_evaluator()
        assert evaluator.eval('${var.missing == "" ? "empty" : "set"}') == Str('empty')

    def test_untaken_branch_not_evaluated(self):
        """An out-of-range index in the untaken branch must not fail."""
        evaluator = make_evaluator({'name': {'default': 'prod'}, 'list': {'default': ['a']}})
        source = '${var.name == "prod" ? "production" : var.list[10]}'
        assert evaluator.eval(source) == Str('production')

    def test_branch_keeps_native_type(self):
        evaluator = make_evaluator({'name': {'default': 'prod'}, 'list': {'default': ['a']}})
        assert evaluator.eval('${var.name == "prod" ? var.list : "none"}') == ListValue([Str('a')])

    def test_nested_conditional(self):
        evaluator = make_evaluator({'name': {'default': 'qa'}})
        source = '${var.name == "prod" ? "p" : var.name == "qa" ? "q" : "d"}'
        assert evaluator.eval(source) == Str('q')


class TestMetadata:
    """terraform.env and terraform.workspace come from the config."""

    def test_terraform_environment(self):
        evaluator = Evaluator({}, [], [], Config(terraform_env='dev'))
        assert evaluator.eval('${terraform.env}') == Str('dev')

    def test_terraform_workspace(self):
        evaluator = Evaluator({}, [], [], Config(terraform_workspace='dev'))
        assert evaluator.eval('${terraform.workspace}') == Str('dev')

    def test_unset_metadata_is_empty_string(self):
        evaluator = Evaluator({}, [], [], Config.init())
        assert evaluator.eval('${terraform.env}') == Str('')

    def test_variable_named_env_does_not_shadow_metadata(self):
        evaluator = make_evaluator({'env': {'default': 'var-value'}}, Config(terraform_env='meta'))
        assert evaluator.eval('${terraform.env}') == Str('meta')
        assert evaluator.eval('${var.env}') == Str('var-value')


class TestOverrides:
    """Variable-value files replace defaults of declared variables."""

    def test_override_replaces_default(self):
        evaluator = make_evaluator(NAME_STRING, overrides=[{'name': 'override'}])
        assert evaluator.eval('${var.name}') == Str('override')

    def test_override_supplies_missing_default(self):
        evaluator = make_evaluator({'name': {}}, overrides=[{'name': ['x']}])
        assert evaluator.eval_native('${var.name}') == ['x']

    def test_override_for_undeclared_variable_ignored(self):
        evaluator = make_evaluator(overrides=[{'name': 'override'}])
        assert evaluator.eval('${var.name}') is ABSENT

    def test_later_override_wins(self):
        evaluator = make_evaluator(NAME_STRING, overrides=[{'name': 'first'}, {'name': 'second'}])
        assert evaluator.eval('${var.name}') == Str('second')


def test_eval_is_idempotent():
    evaluator = make_evaluator(NAME_MAP)
    first = evaluator.eval('${var.name}')
    second = evaluator.eval('${var.name}')
    assert first == second
    assert evaluator.eval('x ${var.name["key"]}') == evaluator.eval('x ${var.name["key"]}')


def test_evaluator_is_evaluable_delegates():
    evaluator = make_evaluator()
    assert evaluator.is_evaluable('${var.name}') is True
    assert evaluator.is_evaluable('${module.name}') is False


def test_from_table_shares_table():
    evaluator = make_evaluator(NAME_STRING)
    other = Evaluator.from_table(evaluator.table)
    assert other.eval('${var.name}') == Str('test')
