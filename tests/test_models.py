"""Tests for member and layout metadata models."""

import pytest
from pydantic import ValidationError

from lineage.models.layout_metadata import (
    BoundingBox,
    EdgeRoute,
    EdgeSection,
    LayoutMetadata,
    NodePosition,
)
from lineage.models.member import ROOT_GENERATION, Member, MemberStatus


class TestMember:
    """Test Member model."""

    def test_defaults(self):
        """Test a bare member is a root at the root generation."""
        member = Member(id="m-1")
        assert member.is_root
        assert member.generation == ROOT_GENERATION
        assert member.status == MemberStatus.STUDYING

    def test_empty_id_rejected(self):
        """Test ids must be non-empty."""
        with pytest.raises(ValidationError):
            Member(id="")

    def test_duplicate_parents_rejected(self):
        """Test a parent cannot be listed twice."""
        with pytest.raises(ValidationError, match="Duplicate parent id 'p'"):
            Member(id="m", parent_ids=["p", "p"])

    def test_negative_generation_rejected(self):
        """Test generation 0 is the lowest accepted value."""
        Member(id="m", generation=0)
        with pytest.raises(ValidationError):
            Member(id="m", generation=-1)

    def test_frozen(self):
        """Test members cannot be mutated in place."""
        member = Member(id="m")
        with pytest.raises(ValidationError):
            member.generation = 3

    def test_extra_fields_kept(self):
        """Test unknown payload fields are carried through."""
        member = Member(id="m", faculty="Engineering")
        assert member.model_dump()["faculty"] == "Engineering"

    @pytest.mark.parametrize(
        "fields,expected",
        [
            ({"nickname": "Pim", "first_name": "Pimchanok"}, "Pim"),
            ({"first_name": "Pimchanok", "last_name": "S."}, "Pimchanok S."),
            ({"last_name": "S."}, "S."),
            ({}, "m-9"),
        ],
    )
    def test_display_name(self, fields, expected):
        """Test display name falls back nickname -> full name -> id."""
        assert Member(id="m-9", **fields).display_name == expected

    def test_with_parents_copies(self):
        """Test with_parents returns a new member and leaves the original."""
        member = Member(id="m", parent_ids=["a"])
        moved = member.with_parents(["b", "c"])
        assert moved.parent_ids == ["b", "c"]
        assert member.parent_ids == ["a"]

    def test_with_parents_revalidates(self):
        """Test with_parents rejects a repeated parent like the constructor does."""
        member = Member(id="m", parent_ids=["a"], nickname="Pim")
        with pytest.raises(ValidationError, match="Duplicate parent"):
            member.with_parents(["b", "b"])
        assert member.with_parents(["b"]).nickname == "Pim"

    def test_with_generation_same_value_returns_self(self):
        """Test an unchanged generation does not copy."""
        member = Member(id="m", generation=2)
        assert member.with_generation(2) is member
        assert member.with_generation(3).generation == 3


class TestNodePosition:
    """Test NodePosition model."""

    def test_list_conversion(self):
        """Test [x, y] conversions."""
        pos = NodePosition.from_list([100.0, 200.0])
        assert pos.to_list() == [100.0, 200.0]

    def test_from_list_invalid_length(self):
        """Test that invalid list length raises error."""
        with pytest.raises(ValueError):
            NodePosition.from_list([100.0])


class TestLayoutMetadata:
    """Test LayoutMetadata model."""

    @pytest.fixture
    def metadata_args(self):
        return dict(
            algorithm="layered",
            layout_options={"rankdir": "TB"},
            positions={
                "A": NodePosition(x=40.0, y=40.0),
                "B": NodePosition(x=300.0, y=260.0),
            },
            edges={
                "edge-A-B": EdgeRoute(
                    source="A",
                    target="B",
                    sections=[EdgeSection(startPoint=(140.0, 140.0), endPoint=(400.0, 260.0))],
                )
            },
            ranks={"A": 0, "B": 1},
        )

    def test_bounding_box_computed(self, metadata_args):
        """Test the bounding box covers every card."""
        box = LayoutMetadata(**metadata_args).bounding_box
        assert box == BoundingBox(min_x=40.0, max_x=500.0, min_y=40.0, max_y=360.0)
        assert box.width == 460.0
        assert box.height == 320.0

    def test_etag_is_sha256(self, metadata_args):
        """Test the etag is a 64-character hex digest."""
        etag = LayoutMetadata(**metadata_args).etag
        assert len(etag) == 64
        int(etag, 16)

    def test_etag_stable(self, metadata_args):
        """Test identical content gives identical etags."""
        assert LayoutMetadata(**metadata_args).etag == LayoutMetadata(**metadata_args).etag

    def test_etag_tracks_positions(self, metadata_args):
        """Test moving a node changes the etag."""
        before = LayoutMetadata(**metadata_args).etag
        metadata_args["positions"]["B"] = NodePosition(x=301.0, y=260.0)
        assert LayoutMetadata(**metadata_args).etag != before

    def test_empty_has_no_bounding_box(self):
        """Test an empty layout has no bounding box."""
        assert LayoutMetadata(algorithm="layered").bounding_box is None

    def test_bounding_box_requires_positions(self):
        """Test bounding box of nothing is an error."""
        with pytest.raises(ValueError, match="empty positions"):
            BoundingBox.from_positions({})

    def test_route_points(self):
        """Test route points are start, bends, end."""
        route = EdgeRoute(
            source="A",
            target="C",
            sections=[EdgeSection(startPoint=(0, 0), endPoint=(0, 20), bendPoints=[(0, 10)])],
        )
        assert route.get_all_points() == [(0, 0), (0, 10), (0, 20)]
