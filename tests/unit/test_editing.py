"""Unit tests for edit mode selection and request validation."""

import math

import pytest

from elbowroute.editing import compute_edit, select_edit_mode, validate_edit_request
from elbowroute.models import (
    BindingChange,
    BindingRef,
    ContractViolation,
    EditMode,
    EditRequest,
    Point,
    Rect,
)
from elbowroute.tracer import RouteTrace


class TestSelectEditMode:
    """Tests for select_edit_mode()."""

    def test_no_fixed_segments(self):
        """Without fixed segments every edit routes fresh."""
        assert select_edit_mode(False, True, True, True, True) is EditMode.ROUTE_FRESH

    def test_release_wins(self):
        """A removed fixed segment is handled before anything else."""
        assert select_edit_mode(True, True, True, True, True) is EditMode.RELEASE

    def test_binding_change(self):
        """A rebound endpoint is a drag."""
        assert select_edit_mode(True, False, True, False, True) is EditMode.DRAG_ENDPOINTS

    def test_points_moved(self):
        """Moved points with unchanged fixed segments are a drag."""
        assert select_edit_mode(True, False, False, True, False) is EditMode.DRAG_ENDPOINTS

    def test_fixed_moved(self):
        """Moved fixed segments are re-applied."""
        assert select_edit_mode(True, False, False, True, True) is EditMode.APPLY_FIXED
        assert select_edit_mode(True, False, False, False, True) is EditMode.APPLY_FIXED


class TestValidateEditRequest:
    """Tests for validate_edit_request()."""

    def test_too_few_points(self):
        """A path needs at least two points."""
        with pytest.raises(ContractViolation):
            validate_edit_request(EditRequest(previous_points=[Point(0, 0)]))

    def test_nan_override(self):
        """Override points must be finite."""
        request = EditRequest(
            previous_points=[Point(0, 0), Point(10, 0)],
            end_override=Point(math.nan, 0),
        )
        with pytest.raises(ContractViolation) as excinfo:
            validate_edit_request(request)
        assert excinfo.value.field_name == "end_override"

    def test_nan_rebinding(self):
        """Bindings carried by an override are checked."""
        binding = BindingRef("a", Rect(0, 0, math.nan, 10))
        request = EditRequest(
            previous_points=[Point(0, 0), Point(10, 0)],
            start_override=BindingChange(binding),
        )
        with pytest.raises(ContractViolation):
            validate_edit_request(request)


class TestComputeEditTrace:
    """Tests for the trace recorded by compute_edit()."""

    def test_stages(self):
        """Mode selection and the result are recorded."""
        trace = RouteTrace()
        result = compute_edit(
            EditRequest(
                previous_points=[Point(0, 0), Point(100, 0)],
                end_override=Point(100, 100),
            ),
            trace=trace,
        )
        assert result.mode is EditMode.ROUTE_FRESH
        assert trace.get_stage("edit_mode").data["mode"] == EditMode.ROUTE_FRESH.value
        assert trace.stage_names()[0] == "sanitize"
        assert trace.stage_names()[-1] == "edit_result"
        assert "route_fresh" in trace.stage_names()
