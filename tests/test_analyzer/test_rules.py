"""Tests for the named extraction rules."""

from __future__ import annotations

from vibes_update.analyzer.rules import (
    ComponentRule,
    VersionRule,
    dependency_version_re,
    detect_template_type,
    find_function_block,
    find_import_map,
)
from vibes_update.core.models import TemplateType


class TestVersionRule:
    def test_does_not_match_inside_other_names(self):
        text = '"https://esm.sh/preact@10.0.0" "https://esm.sh/my-react@1.0.0"'
        assert VersionRule("react").extract(text) is None

    def test_react_does_not_match_react_dom(self):
        text = '"https://esm.sh/react-dom@18.2.0"'
        assert VersionRule("react").extract(text) is None
        assert VersionRule("react-dom").extract(text) == "18.2.0"

    def test_scoped_path_still_matches(self):
        assert VersionRule("react").extract("https://esm.sh/react@18.3.1/jsx-runtime") == "18.3.1"

    def test_malformed_version_is_absent(self):
        assert VersionRule("react").extract("https://esm.sh/react@latest") is None

    def test_dependency_pattern_captures_prerelease(self):
        match = dependency_version_re("use-vibes").search("use-vibes@0.19.0-dev-preview-50?x")
        assert match.group(1) == "0.19.0-dev-preview-50"


class TestFindImportMap:
    def test_groups(self):
        text = "<head><script type='importmap'>{\"imports\": {}}</script></head>"
        match = find_import_map(text)

        assert match is not None
        assert match.group(1) == "<script type='importmap'>"
        assert match.group(2) == '{"imports": {}}'
        assert match.group(3) == "</script>"

    def test_absent(self):
        assert find_import_map("<script>var x;</script>") is None


class TestFindFunctionBlock:
    def test_function_declaration(self):
        text = "a;\nfunction VibesSwitch(props) {\n  if (x) { y(); }\n  return 1;\n}\nb;"
        span = find_function_block(text, "VibesSwitch")

        assert span is not None
        block = text[span.start:span.end]
        assert block.startswith("function VibesSwitch(")
        assert block.endswith("return 1;\n}")

    def test_arrow_component(self):
        text = "const VibesSwitch = ({ isOn }) => {\n  return { isOn };\n};\nnext();"
        span = find_function_block(text, "VibesSwitch")

        assert text[span.start:span.end] == "const VibesSwitch = ({ isOn }) => {\n  return { isOn };\n}"

    def test_destructured_props_are_not_the_body(self, vibes_switch_v1: str):
        text = "a;\n" + vibes_switch_v1 + "\nb;"
        span = find_function_block(text, "VibesSwitch")

        assert text[span.start:span.end] == vibes_switch_v1

    def test_default_argument_calls_in_params(self):
        text = "function VibesSwitch({ size = pick(1, 2) }) {\n  return size;\n}\nb;"
        span = find_function_block(text, "VibesSwitch")

        assert text[span.start:span.end] == "function VibesSwitch({ size = pick(1, 2) }) {\n  return size;\n}"

    def test_single_parameter_arrow(self):
        text = "const VibesSwitch = props => {\n  return props;\n};"
        span = find_function_block(text, "VibesSwitch")

        assert text[span.start:span.end] == "const VibesSwitch = props => {\n  return props;\n}"

    def test_unbalanced_block(self):
        assert find_function_block("function VibesSwitch() { {", "VibesSwitch") is None

    def test_missing(self):
        assert find_function_block("function Other() {}", "VibesSwitch") is None


class TestComponentRule:
    def test_absent_component(self):
        assert ComponentRule("VibesSwitch", "useMobile").extract("function App() {}") is None

    def test_marker_in_body_after_destructured_props(self, vibes_switch_v1: str, vibes_switch_v2: str):
        rule = ComponentRule("VibesSwitch", "useMobile")

        assert rule.extract(vibes_switch_v1) == "v1"
        assert rule.extract(vibes_switch_v2) == "v2"

    def test_marker_outside_block_is_ignored(self):
        text = "function VibesSwitch() { return 1; }\nfunction Other() { useMobile(); }"
        assert ComponentRule("VibesSwitch", "useMobile").extract(text) == "v1"


class TestDetectTemplateType:
    def test_sell_markers_take_precedence(self):
        text = '<script type="importmap">{}</script><ClerkProvider>'
        assert detect_template_type(text) == TemplateType.SELL

    def test_babel_only_is_basic(self):
        assert detect_template_type('<script type="text/babel">x</script>') == TemplateType.VIBES_BASIC

    def test_unknown(self):
        assert detect_template_type("<p>hi</p>") == TemplateType.UNKNOWN
