"""
Tests for the snapshot integrity audit.

Tests cover:
1. Clean snapshots pass
2. Each issue code is detected
3. Multiple problems reported in one pass
"""

import pytest

from lineage.models.member import Member
from lineage.utils.response import create_issue, is_success, validation_response
from lineage.validators.integrity import check_integrity


def make(member_id, *parent_ids, **kwargs):
    return Member(id=member_id, parent_ids=list(parent_ids), **kwargs)


def codes(report):
    return [issue["code"] for issue in report["data"]["issues"]]


class TestCheckIntegrity:
    """Test audit findings."""

    def test_clean_snapshot(self):
        """Test a consistent snapshot has no issues."""
        report = check_integrity([make("A"), make("B", "A", generation=2)])
        assert is_success(report)
        assert report["data"]["status"] == "ok"
        assert report["data"]["issues"] == []
        assert report["data"]["metrics"] == {"members": 2, "edges": 1, "cycles": 0}

    def test_duplicate_id(self):
        """Test duplicate ids are errors."""
        report = check_integrity([make("A"), make("A")])
        assert not is_success(report)
        assert codes(report) == ["DUPLICATE_ID"]

    def test_dangling_parent(self):
        """Test unresolved parents are errors naming the parent."""
        report = check_integrity([make("A", "ghost")])
        issue = report["data"]["issues"][0]
        assert issue["code"] == "DANGLING_PARENT"
        assert issue["member_id"] == "A"
        assert issue["details"] == {"parent_id": "ghost"}

    def test_self_parent(self):
        """Test self-parents are errors."""
        report = check_integrity([make("A", "A")])
        assert codes(report) == ["SELF_PARENT"]

    def test_cycle(self):
        """Test cycles are reported once with their members."""
        report = check_integrity([make("X", "Y"), make("Y", "X"), make("Z")])
        assert codes(report) == ["CYCLE"]
        assert report["data"]["issues"][0]["details"] == {"members": ["X", "Y"]}
        assert report["data"]["metrics"]["cycles"] == 1

    def test_generation_drift_is_warning(self):
        """Test stale generations are warnings, not errors."""
        report = check_integrity([make("A"), make("B", "A", generation=9)])
        assert is_success(report)
        assert report["data"]["status"] == "warning"
        issue = report["data"]["issues"][0]
        assert issue["code"] == "GENERATION_DRIFT"
        assert issue["details"] == {"stored": 9, "resolved": 2}

    def test_several_problems_in_one_pass(self):
        """Test every problem is listed, not just the first."""
        report = check_integrity([
            make("A", "ghost"),
            make("B", "B"),
            make("C"),
            make("C"),
        ])
        assert sorted(codes(report)) == ["DANGLING_PARENT", "DUPLICATE_ID", "SELF_PARENT"]


class TestResponseHelpers:
    """Test the envelope helpers used by the audit."""

    def test_unknown_severity_rejected(self):
        """Test create_issue validates severity."""
        with pytest.raises(ValueError, match="severity"):
            create_issue("fatal", "boom")

    def test_status_from_worst_issue(self):
        """Test the envelope status follows the worst severity."""
        info = create_issue("info", "fyi")
        warning = create_issue("warning", "hmm")
        assert validation_response([info])["data"]["status"] == "ok"
        assert validation_response([info, warning])["data"]["status"] == "warning"
