import pytest

from kreconciler._cogs.structs.diffs import DiffItem, DiffOperation, DiffScope, diff


def test_equal_values_have_an_empty_diff():
    assert diff({'a': 1}, {'a': 1}) == ()
    assert diff(None, None) == ()
    assert not diff({'a': [1, {'b': 2}]}, {'a': [1, {'b': 2}]})


@pytest.mark.parametrize('a, b, expected', [
    pytest.param(None, {'x': 1}, (('add', (), None, {'x': 1}),), id='added-root'),
    pytest.param({'x': 1}, None, (('remove', (), {'x': 1}, None),), id='removed-root'),
    pytest.param({'x': 1}, {'x': 2}, (('change', ('x',), 1, 2),), id='changed-field'),
    pytest.param({'x': {'y': 1}}, {'x': {'y': 1, 'z': 2}}, (('add', ('x', 'z'), None, 2),),
                 id='added-nested'),
    pytest.param({'x': [1, 2]}, {'x': [1]}, (('change', ('x',), [1, 2], [1]),),
                 id='lists-as-a-whole'),
    pytest.param({'x': 'a'}, {'x': {'y': 1}}, (('change', ('x',), 'a', {'y': 1}),),
                 id='scalar-to-dict'),
])
def test_full_diffs(a, b, expected):
    d = diff(a, b)
    assert d == expected
    assert bool(d)


def test_fields_are_visited_in_sorted_order():
    d = diff({'b': 1, 'a': 1}, {'a': 2, 'b': 2})
    assert [item.path for item in d] == [('a',), ('b',)]


def test_left_scope_ignores_extra_fields_on_the_right():
    d = diff({'x': 1}, {'x': 1, 'defaulted': True}, scope=DiffScope.LEFT)
    assert not d


def test_left_scope_notices_missing_fields_on_the_right():
    d = diff({'x': 1, 'y': 2}, {'x': 1}, scope=DiffScope.LEFT)
    assert d == (('remove', ('y',), 2, None),)


def test_right_scope_ignores_extra_fields_on_the_left():
    d = diff({'x': 1, 'y': 2}, {'x': 1}, scope=DiffScope.RIGHT)
    assert not d


def test_diff_items_are_readable():
    item = DiffItem(DiffOperation.CHANGE, ('spec', 'replicas'), 1, 2)
    assert item.op == 'change'
    assert str(item.op) == 'change'
    assert str(item) == "change spec.replicas: 1 -> 2"
    assert str(DiffItem(DiffOperation.ADD, (), None, {})) == "add <root>: None -> {}"
