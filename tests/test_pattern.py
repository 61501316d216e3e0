# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for the pattern compiler."""

import re

import pytest

from genro_navroutes import InvalidPattern, ParamSpec, compile_pattern


def test_literal_pattern_matches_only_itself():
    compiled = compile_pattern("/about/team")
    assert compiled.params == ()
    assert compiled.regex.search("/about/team")
    assert not compiled.regex.search("/about/teams")
    assert not compiled.regex.search("/about")
    assert not compiled.regex.search("/x/about/team")


def test_matching_is_case_insensitive_by_default():
    assert compile_pattern("/About").regex.search("/about")
    compiled = compile_pattern("/About", case_sensitive=True)
    assert compiled.regex.search("/About")
    assert not compiled.regex.search("/about")


def test_trailing_slash_accepted_unless_strict():
    assert compile_pattern("/about").regex.search("/about/")
    assert not compile_pattern("/about", strict=True).regex.search("/about/")
    assert compile_pattern("/about", strict=True).regex.search("/about")


def test_literal_dot_is_escaped():
    regex = compile_pattern("/robots.txt").regex
    assert regex.search("/robots.txt")
    assert not regex.search("/robotsXtxt")


def test_named_params_follow_declaration_order():
    compiled = compile_pattern("/a/:x/:y")
    assert compiled.params == (ParamSpec("x", False), ParamSpec("y", False))
    assert compiled.names == ["x", "y"]


def test_optional_param_is_flagged():
    compiled = compile_pattern("/user/:id?")
    assert compiled.params == (ParamSpec("id", True),)
    assert compiled.regex.search("/user")
    assert compiled.regex.search("/user/5")


def test_default_segment_excludes_slash_and_dot():
    regex = compile_pattern("/user/:id").regex
    assert regex.search("/user/42")
    assert not regex.search("/user/4.2")
    assert not regex.search("/user/4/2")


def test_param_after_literal_dot_may_contain_dots():
    regex = compile_pattern("/file.:ext").regex
    assert regex.search("/file.tar.gz").group(1) == "tar.gz"
    assert not regex.search("/file")


def test_custom_capture_replaces_default_class():
    compiled = compile_pattern(r"/item/:id(\d+)")
    assert compiled.params == (ParamSpec("id"),)
    assert compiled.regex.groups == 1
    assert compiled.regex.search("/item/12")
    assert not compiled.regex.search("/item/ab")


def test_consecutive_optional_params_are_independent():
    regex = compile_pattern("/range/:start?/:end?").regex
    assert regex.search("/range").groups() == (None, None)
    assert regex.search("/range/1").groups() == ("1", None)
    assert regex.search("/range/1/2").groups() == ("1", "2")


def test_group_after_slash_is_optional_segment():
    compiled = compile_pattern("/docs/(intro)?")
    assert compiled.params == ()
    assert compiled.regex.groups == 0
    assert compiled.regex.search("/docs")
    assert compiled.regex.search("/docs/intro")
    assert not compiled.regex.search("/docs/other")


def test_wildcards_take_positional_slots():
    compiled = compile_pattern("/files/*/rev/+")
    assert compiled.params == (ParamSpec(0), ParamSpec(1))
    assert compiled.regex.search("/files/a/b/rev/3").groups() == ("a/b", "3")
    assert not compiled.regex.search("/files/a/rev/")


def test_named_and_unnamed_slots_are_numbered_separately():
    compiled = compile_pattern("/:section/*")
    assert compiled.params == (ParamSpec("section"), ParamSpec(0))


def test_escaped_characters_stay_literal():
    compiled = compile_pattern(r"/price\+tax")
    assert compiled.params == ()
    assert compiled.regex.search("/price+tax")


def test_sequence_becomes_alternation_group():
    compiled = compile_pattern(["/home", "/index"])
    assert compiled.params == (ParamSpec(0),)
    assert compiled.regex.search("/home")
    assert compiled.regex.search("/index/")
    assert not compiled.regex.search("/other")


def test_prebuilt_regex_is_returned_unchanged():
    regex = re.compile(r"^/raw/(\d+)$")
    compiled = compile_pattern(regex)
    assert compiled.regex is regex
    assert compiled.params == ()
    assert compiled.source is regex


@pytest.mark.parametrize("bad", [42, None, 3.5, {"/a": 1}])
def test_unsupported_pattern_types_are_rejected(bad):
    with pytest.raises(InvalidPattern) as excinfo:
        compile_pattern(bad)
    assert excinfo.value.pattern is bad


def test_sequence_members_must_be_strings():
    with pytest.raises(InvalidPattern, match="strings"):
        compile_pattern(["/a", 1])


def test_pattern_producing_invalid_regex_is_rejected():
    with pytest.raises(InvalidPattern) as excinfo:
        compile_pattern("/a/(b")
    assert isinstance(excinfo.value.__cause__, re.error)
