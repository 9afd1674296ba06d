"""Tests for decoding event payloads and compatibility reports."""

import pytest

from compatlens_core.errors import EventPayloadError, ReportFormatError
from compatlens_core.models import Incompatibility, WorkflowRun, load_report, parse_report


def _run_payload(**overrides):
    payload = {
        "id": 123,
        "conclusion": "success",
        "event": "pull_request",
        "head_branch": "feature/x",
        "head_repository": {"owner": {"login": "contributor"}, "name": "project"},
        "head_sha": "a" * 40,
        "pull_requests": [{"number": 7}],
    }
    payload.update(overrides)
    return payload


class TestWorkflowRun:
    def test_from_payload(self):
        run = WorkflowRun.from_payload(_run_payload())
        assert run.id == 123
        assert run.conclusion == "success"
        assert run.event == "pull_request"
        assert run.head_branch == "feature/x"
        assert run.head_repository.owner == "contributor"
        assert run.head_repository.name == "project"

    def test_null_head_branch_becomes_none(self):
        assert WorkflowRun.from_payload(_run_payload(head_branch=None)).head_branch is None

    def test_empty_head_branch_becomes_none(self):
        assert WorkflowRun.from_payload(_run_payload(head_branch="")).head_branch is None

    def test_payload_pr_list_not_carried(self):
        assert not hasattr(WorkflowRun.from_payload(_run_payload()), "pull_requests")

    def test_missing_event_raises(self):
        payload = _run_payload()
        del payload["event"]
        with pytest.raises(EventPayloadError):
            WorkflowRun.from_payload(payload)

    def test_bad_head_repository_raises(self):
        with pytest.raises(EventPayloadError):
            WorkflowRun.from_payload(_run_payload(head_repository={"name": "project"}))

    def test_not_a_dict_raises(self):
        with pytest.raises(EventPayloadError):
            WorkflowRun.from_payload(None)


class TestParseReport:
    def test_decodes_nested_structure(self):
        report = parse_report(
            {
                "libA": {
                    "Foo": {
                        "classIncompatibilities": [{"message": "removed", "isError": True}],
                        "methodIncompatibilities": {"bar()": [{"message": "changed", "isError": False}]},
                        "fieldIncompatibilities": {},
                    }
                }
            }
        )
        foo = report.projects["libA"]["Foo"]
        assert foo.class_incompatibilities == [Incompatibility("removed", True)]
        assert foo.method_incompatibilities == {"bar()": [Incompatibility("changed", False)]}
        assert foo.field_incompatibilities == {}

    def test_missing_sections_default_to_empty(self):
        foo = parse_report({"libA": {"Foo": {}}}).projects["libA"]["Foo"]
        assert foo.class_incompatibilities == []
        assert foo.method_incompatibilities == {}
        assert foo.field_incompatibilities == {}

    def test_missing_is_error_means_warning(self):
        report = parse_report({"libA": {"Foo": {"classIncompatibilities": [{"message": "m"}]}}})
        assert report.projects["libA"]["Foo"].class_incompatibilities[0].is_error is False

    def test_preserves_key_order(self):
        report = parse_report({"b": {}, "a": {}, "c": {}})
        assert list(report.projects) == ["b", "a", "c"]

    def test_is_breaking(self):
        report = parse_report({"libA": {"Foo": {"fieldIncompatibilities": {"f": [{"message": "m", "isError": True}]}}}})
        assert report.is_breaking is True

    def test_empty_report_not_breaking(self):
        assert parse_report({"libA": {}}).is_breaking is False

    @pytest.mark.parametrize(
        "document",
        [
            [],
            {"libA": []},
            {"libA": {"Foo": "nope"}},
            {"libA": {"Foo": {"classIncompatibilities": {}}}},
            {"libA": {"Foo": {"methodIncompatibilities": []}}},
            {"libA": {"Foo": {"classIncompatibilities": [{"isError": True}]}}},
        ],
    )
    def test_malformed_documents_raise(self, document):
        with pytest.raises(ReportFormatError):
            parse_report(document)


class TestLoadReport:
    def test_parses_json_text(self):
        report = load_report('{"libA": {"Foo": {"classIncompatibilities": [{"message": "x", "isError": true}]}}}')
        assert report.is_breaking is True

    def test_invalid_json_raises(self):
        with pytest.raises(ReportFormatError, match="not valid JSON"):
            load_report("{not json")
