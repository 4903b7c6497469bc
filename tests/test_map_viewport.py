"""
Unit tests for the map viewport controller.
"""

from unittest.mock import MagicMock

import pytest

from app.schemas.map import MapFocusTarget, MarkerStyle
from app.services.map_viewport import MapViewportController, RecordingMapWidget


@pytest.fixture
def widget():
    return RecordingMapWidget(14.5995, 120.9842, 11)


@pytest.fixture
def controller(sample_properties, widget):
    c = MapViewportController(properties=sample_properties)
    c.on_map_load(widget)
    return c


def test_every_focus_is_a_noop(sample_properties):
    c = MapViewportController(properties=sample_properties)
    assert c.ready is False
    assert c.focus_location(1.0, 2.0) is False
    assert c.focus_property("makati") is False
    assert c.focus_by_location_name("Makati") is False
    assert c.focus is None
    assert c.active_marker is None


def test_pans_and_zooms(controller, widget):
    assert controller.focus_location(10.0, 120.0) is True
    assert widget.viewport() == MapFocusTarget(lat=10.0, lng=120.0, zoom=15)
    assert controller.focus == MapFocusTarget(lat=10.0, lng=120.0, zoom=15)

def test_each_request_overwrites(controller):
    controller.focus_location(10.0, 120.0, zoom=8)
    controller.focus_location(11.0, 121.0)
    assert controller.focus == MapFocusTarget(lat=11.0, lng=121.0, zoom=15)

def test_uses_widget_protocol(sample_properties):
    widget = MagicMock()
    c = MapViewportController(properties=sample_properties)
    c.on_map_load(widget)
    c.focus_location(1.5, 2.5, zoom=9)
    widget.pan_to.assert_called_once_with(1.5, 2.5)
    widget.set_zoom.assert_called_once_with(9)

@pytest.mark.parametrize("lat, lng, zoom", [(14.55, 121.02, 23), (14.55, 121.02, -1), (91.0, 121.02, 15), (14.55, 181.0, 15)])
def test_out_of_range_target_is_silent(controller, widget, lat, lng, zoom):
    controller.focus_location(10.0, 120.0)
    before = widget.viewport()
    assert controller.focus_location(lat, lng, zoom=zoom) is False
    assert widget.viewport() == before
    assert controller.focus == before


def test_focuses_and_activates(controller):
    assert controller.focus_property("cebu") is True
    assert controller.focus == MapFocusTarget(lat=10.3157, lng=123.9777, zoom=15)
    assert controller.active_marker.id == "cebu"

def test_missing_id_is_silent(controller, widget):
    before = widget.viewport()
    assert controller.focus_property("missing-id") is False
    assert widget.viewport() == before
    assert controller.focus is None

def test_without_coordinates_is_silent(controller):
    assert controller.focus_property("tagaytay") is False
    assert controller.active_marker is None

def test_uses_last_provided_collection(controller, make_record):
    controller.set_properties([make_record("new", coordinates={"lat": 1, "lng": 2})])
    assert controller.focus_property("cebu") is False
    assert controller.focus_property("new") is True


def test_single_match_uses_area_zoom(make_record):
    records = [
        make_record("a", location="Quezon City", coordinates={"lat": 14.67, "lng": 121.04}),
        make_record("b", location="Ayala Avenue, Makati", coordinates={"lat": 14.55, "lng": 121.02}),
    ]
    c = MapViewportController(properties=records)
    c.on_map_load(RecordingMapWidget(0, 0, 11))
    assert c.focus_by_location_name("Makati") is True
    assert c.focus == MapFocusTarget(lat=14.55, lng=121.02, zoom=13)

def test_first_match_in_collection_order(controller):
    assert controller.focus_by_location_name("metro manila") is True
    assert (controller.focus.lat, controller.focus.lng) == (14.55, 121.02)

def test_first_match_without_coordinates_is_silent(controller):
    assert controller.focus_by_location_name("Tagaytay") is False
    assert controller.focus is None

@pytest.mark.parametrize("name", ["", None, "Atlantis"])
def test_no_match_is_silent(controller, name):
    assert controller.focus_by_location_name(name) is False
    assert controller.focus is None

def test_does_not_activate_marker(controller):
    controller.focus_by_location_name("Cebu")
    assert controller.active_marker is None


def test_toggle_same_marker_clears(controller, sample_properties):
    cebu = sample_properties[1]
    assert controller.toggle_active_marker(cebu).id == "cebu"
    assert controller.toggle_active_marker(cebu) is None

def test_other_marker_replaces(controller, sample_properties):
    controller.toggle_active_marker(sample_properties[0])
    controller.toggle_active_marker(sample_properties[1])
    assert controller.active_marker.id == "cebu"

def test_clear(controller):
    controller.focus_property("makati")
    controller.clear_active_marker()
    assert controller.active_marker is None


def test_collection_context_skips_unlocated(sample_properties):
    markers = MapViewportController(properties=sample_properties).markers()
    assert [m.property_id for m in markers] == ["makati", "cebu", "vigan", "bgc", "batangas"]
    assert {m.style for m in markers} == {MarkerStyle.secondary}

def test_single_property_context(sample_properties):
    markers = MapViewportController(properties=sample_properties, property=sample_properties[0]).markers()
    assert len(markers) == 1
    assert markers[0].style == MarkerStyle.primary
    assert markers[0].price_label == "₱12,500,000"
    assert markers[0].image_url == "/images/placeholder-property.jpg"

def test_marker_image_is_first_listing_image(make_record):
    record = make_record("x", coordinates={"lat": 1, "lng": 2}, images=["/images/properties/1-front.jpg", "/images/properties/2-back.jpg"])
    [marker] = MapViewportController(properties=[record]).markers()
    assert marker.image_url == "http://localhost:5000/images/properties/1-front.jpg"

def test_single_property_without_coordinates(sample_properties):
    tagaytay = sample_properties[3]
    assert MapViewportController(property=tagaytay).markers() == []


def test_list_context_uses_default_centre():
    assert MapViewportController().initial_viewport(14.5995, 120.9842) == MapFocusTarget(
        lat=14.5995, lng=120.9842, zoom=11
    )

def test_property_context_centres_on_property(sample_properties):
    c = MapViewportController(property=sample_properties[1])
    assert c.initial_viewport(0, 0) == MapFocusTarget(lat=10.3157, lng=123.9777, zoom=15)
