"""Tests for report rendering and the comment preamble."""

from unittest.mock import PropertyMock

from compatlens_core.models import Incompatibility, IncompatibilityReport, parse_report
from compatlens_core.renderer import ERROR_EMOJI, WARNING_EMOJI, compose_comment, emoji_for, render_report


def _class_entry(cls=None, methods=None, fields=None):
    return {
        "classIncompatibilities": cls or [],
        "methodIncompatibilities": methods or {},
        "fieldIncompatibilities": fields or {},
    }


def _err(message):
    return {"message": message, "isError": True}


def _warn(message):
    return {"message": message, "isError": False}


class TestEmoji:
    def test_error_marker(self):
        assert emoji_for(Incompatibility("x", is_error=True)) == ERROR_EMOJI

    def test_warning_marker(self):
        assert emoji_for(Incompatibility("x", is_error=False)) == WARNING_EMOJI


class TestRenderReport:
    def test_removed_class_is_breaking(self):
        report = parse_report({"libA": {"Foo": _class_entry(cls=[_err("removed")])}})
        verdict = render_report(report)
        assert verdict.breaking is True
        assert "libA" in verdict.message
        assert "Foo" in verdict.message
        assert "removed" in verdict.message
        assert ERROR_EMOJI in verdict.message

    def test_exact_layout(self):
        report = parse_report(
            {
                "libA": {
                    "com.example.Foo": _class_entry(
                        cls=[_err("Class was removed")],
                        methods={"bar()": [_err("Method removed"), _warn("Now deprecated")]},
                        fields={"BAZ": [_warn("Value changed")]},
                    )
                }
            }
        )
        assert render_report(report).message == (
            "\n## `libA`\n"
            "  - `com.example.Foo`\n"
            f"    * {ERROR_EMOJI} `Class was removed`\n"
            f"    * `bar()`: {ERROR_EMOJI} Method removed; {WARNING_EMOJI} Now deprecated\n"
            f"    * `BAZ`: {WARNING_EMOJI} Value changed\n"
        )

    def test_project_without_classes_emits_nothing(self):
        verdict = render_report(parse_report({"libA": {}}))
        assert verdict.message == ""
        assert verdict.breaking is False

    def test_all_projects_empty(self):
        verdict = render_report(parse_report({"libA": {}, "libB": {}, "libC": {}}))
        assert verdict.message == ""
        assert verdict.breaking is False

    def test_empty_project_skipped_among_others(self):
        report = parse_report({"empty": {}, "libB": {"Bar": _class_entry(cls=[_warn("changed")])}})
        message = render_report(report).message
        assert "empty" not in message
        assert "libB" in message

    def test_warnings_only_not_breaking(self):
        report = parse_report(
            {
                "libA": {
                    "Foo": _class_entry(
                        cls=[_warn("a")],
                        methods={"m()": [_warn("b")]},
                        fields={"f": [_warn("c")]},
                    )
                }
            }
        )
        verdict = render_report(report)
        assert verdict.breaking is False
        assert verdict.message
        assert ERROR_EMOJI not in verdict.message

    def test_error_in_method_is_breaking(self):
        report = parse_report({"libA": {"Foo": _class_entry(methods={"m()": [_warn("a"), _err("b")]})}})
        assert render_report(report).breaking is True

    def test_error_in_field_is_breaking(self):
        report = parse_report({"libA": {"Foo": _class_entry(fields={"f": [_err("gone")]})}})
        assert render_report(report).breaking is True

    def test_error_in_later_project_is_breaking(self):
        report = parse_report(
            {
                "libA": {"Foo": _class_entry(cls=[_warn("a")])},
                "libB": {"Bar": _class_entry(cls=[_err("b")])},
            }
        )
        assert render_report(report).breaking is True

    def test_breaking_matches_report_flag(self):
        report = parse_report({"libA": {"Foo": _class_entry(fields={"f": [_err("gone")]})}})
        assert render_report(report).breaking == report.is_breaking

    def test_breaking_comes_from_report(self, mocker):
        mocker.patch.object(IncompatibilityReport, "is_breaking", new_callable=PropertyMock, return_value=True)
        report = parse_report({"libA": {"Foo": _class_entry(cls=[_warn("deprecated")])}})

        assert render_report(report).breaking is True

    def test_every_entry_appears(self):
        report = parse_report(
            {
                "libA": {
                    "Foo": _class_entry(methods={"one()": [_warn("w1")], "two()": [_warn("w2")]}),
                    "Bar": _class_entry(fields={"x": [_warn("w3")]}),
                },
                "libB": {"Baz": _class_entry(cls=[_warn("w4")])},
            }
        )
        message = render_report(report).message
        for text in ("libA", "libB", "Foo", "Bar", "Baz", "one()", "two()", "x", "w1", "w2", "w3", "w4"):
            assert text in message

    def test_rendering_is_deterministic(self):
        report = parse_report({"libA": {"Foo": _class_entry(cls=[_err("removed")], fields={"f": [_warn("x")]})}})
        assert render_report(report) == render_report(report)


class TestComposeComment:
    def test_addresses_author(self):
        assert compose_comment("octocat", "body", beta=False).startswith(
            "@octocat, this PR introduces breaking changes.\n"
        )

    def test_stable_wording(self):
        text = compose_comment("octocat", "body", beta=False)
        assert "not accepting breaking changes right now" in text
        assert "Please revert them before this PR can be merged." in text

    def test_beta_wording(self):
        text = compose_comment("octocat", "body", beta=True)
        assert "currently accepting breaking changes" in text
        assert "not accepting" not in text

    def test_body_follows_preamble(self):
        assert compose_comment("octocat", "\n## `libA`\n", beta=True).endswith("\n\n## `libA`\n")
