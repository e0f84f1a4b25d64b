"""
Test cases for tag groups: parsing, subset comparison and tag-placeholder rewriting.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import pytest

from engine.exceptions import InputError, TagParseError
from engine.tags import EMPTY, TagSet, replace_tags


def test_parse_plain_and_braced():
    assert TagSet.parse("host=a,dc=1") == {"host": "a", "dc": "1"}
    assert TagSet.parse("{host=a, dc=1}") == {"host": "a", "dc": "1"}
    assert TagSet.parse("") == EMPTY
    assert TagSet.parse("{}") == EMPTY


@pytest.mark.parametrize("text", ["host", "host=", "=a", "host=a,,dc=1", "host=a,host=b"])
def test_parse_rejects_malformed(text):
    with pytest.raises(TagParseError):
        TagSet.parse(text)


def test_parse_error_is_an_input_error():
    with pytest.raises(InputError):
        TagSet.parse("nope")


def test_subset_semantics():
    a = TagSet(host="a")
    ab = TagSet(host="a", dc="1")
    assert a.subset(ab)
    assert not ab.subset(a)
    assert a.subset(a)
    assert EMPTY.subset(a)
    assert EMPTY.subset(EMPTY)
    assert not TagSet(host="b").subset(ab)


def test_order_irrelevant_equality_and_hash():
    x = TagSet({"host": "a", "dc": "1"})
    y = TagSet({"dc": "1", "host": "a"})
    assert x == y
    assert hash(x) == hash(y)
    assert str(x) == "{dc=1,host=a}"
    assert x.tags() == "dc=1,host=a"


def test_coerce_accepts_strings_and_sets():
    t = TagSet(host="a")
    assert TagSet.coerce(t) is t
    assert TagSet.coerce("host=a") == t
    with pytest.raises(TagParseError):
        TagSet.coerce(42)


def test_replace_tags_promql_matchers():
    text = 'avg(q(\'sum(rate(cpu{host=~".*",dc="1"}[5m])) by (host)\', \'1h\', \'\'))'
    out = replace_tags(text, TagSet(host="web01"))
    assert 'cpu{host="web01",dc="1"}' in out
    assert "by (host)" in out


def test_replace_tags_unquoted_placeholders():
    assert replace_tags("cpu{host=*,env=prod}", TagSet(host="a")) == "cpu{host=a,env=prod}"


def test_replace_tags_leaves_unrelated_blocks():
    group = TagSet(host="a")
    assert replace_tags("x{}", group) == "x{}"
    assert replace_tags("cpu{dc=\"1\"}", group) == "cpu{dc=\"1\"}"
    assert replace_tags("cpu{host=*}", EMPTY) == "cpu{host=*}"


def test_replace_tags_escapes_quotes():
    out = replace_tags('m{host="x"}', TagSet(host='we"ird'))
    assert out == 'm{host="we\\"ird"}'
