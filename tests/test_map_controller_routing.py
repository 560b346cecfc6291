import asyncio

import pytest

from core.exceptions import ExternalServiceException
from events import FitKind
from fake_providers import flush, make_place, make_preview, make_route
from interaction.state import InteractionMode, RouteStatus


@pytest.mark.asyncio
async def test_start_route_without_selection_is_noop(controller, directions) -> None:
    state = await controller.start_route()

    assert state.status is RouteStatus.IDLE
    assert directions.calls == []
    assert controller.mode is InteractionMode.BROWSING


@pytest.mark.asyncio
async def test_start_route_activates_and_fits_route_bounds(controller, directions, previews, settings) -> None:
    previews.reply_with(None)
    destination = make_place("a", lat=37.3230, lon=-122.0300)
    route = make_route((-122.0090, 37.3346), (-122.0300, 37.3230))
    directions.reply_with(route)
    controller.select(destination)
    fits = controller.camera_fits()

    state = await controller.start_route()

    assert state.status is RouteStatus.ACTIVE
    assert state.destination == destination
    assert state.geometry == route
    origin, target = directions.calls[0].args
    assert origin == settings.origin
    assert target == destination.coordinate
    assert controller.mode is InteractionMode.ROUTING
    assert controller.selection_state.details_visible is False
    assert controller.snapshot().route_polyline == route.coordinates

    [fit] = fits.pending()
    assert fit.kind is FitKind.BOUNDS
    assert fit.bounds.west < -122.0300
    assert fit.bounds.east > -122.0090
    assert fit.bounds.south < 37.3230
    assert fit.bounds.north > 37.3346
    await controller.wait_idle()


@pytest.mark.asyncio
async def test_directions_failure_still_activates_without_geometry(controller, directions, previews) -> None:
    previews.reply_with(None)
    directions.reply_with(ExternalServiceException("Valhalla request failed"))
    controller.select(make_place("a"))
    fits = controller.camera_fits()

    state = await controller.start_route()

    assert state.status is RouteStatus.ACTIVE
    assert state.geometry is None
    assert controller.mode is InteractionMode.ROUTING
    assert controller.snapshot().route_polyline is None
    assert fits.pending() == []
    await controller.wait_idle()


@pytest.mark.asyncio
async def test_route_stays_idle_while_request_in_flight(controller, directions, previews) -> None:
    previews.reply_with(None)
    controller.select(make_place("a"))

    task = asyncio.create_task(controller.start_route())
    await flush()

    assert controller.route_state.status is RouteStatus.IDLE
    assert controller.route_state.pending is True
    assert controller.mode is InteractionMode.BROWSING

    directions.calls[0].resolve(make_route())
    await task
    assert controller.route_state.pending is False
    await controller.wait_idle()


@pytest.mark.asyncio
@pytest.mark.parametrize("older_first", [True, False])
async def test_overlapping_route_requests_last_issued_wins(controller, directions, previews, older_first) -> None:
    previews.reply_with(None)
    a, b = make_place("a"), make_place("b")
    first_route = make_route((-122.0, 37.0), (-122.1, 37.1))
    second_route = make_route((-121.0, 36.0), (-121.1, 36.1))

    controller.select(a)
    first = asyncio.create_task(controller.start_route())
    await flush()
    controller.select(b)
    second = asyncio.create_task(controller.start_route())
    await flush()

    if older_first:
        directions.calls[0].resolve(first_route)
        await first
        directions.calls[1].resolve(second_route)
        await second
    else:
        directions.calls[1].resolve(second_route)
        await second
        directions.calls[0].resolve(first_route)
        await first

    assert controller.route_state.destination == b
    assert controller.route_state.geometry == second_route
    await controller.wait_idle()


@pytest.mark.asyncio
async def test_start_route_while_active_is_noop(controller, directions, previews) -> None:
    previews.reply_with(None)
    directions.reply_with(make_route())
    controller.select(make_place("a"))
    await controller.start_route()
    before = controller.route_state

    after = await controller.start_route()

    assert after == before
    assert len(directions.calls) == 1
    await controller.wait_idle()


@pytest.mark.asyncio
async def test_routing_mode_shows_only_destination_marker(controller, places, directions, previews) -> None:
    previews.reply_with(None)
    candidates = [make_place("a"), make_place("b"), make_place("c")]
    places.reply_with(candidates)
    directions.reply_with(make_route())
    await controller.submit_search("coffee")
    controller.select(candidates[1])

    await controller.start_route()

    snapshot = controller.snapshot()
    assert snapshot.visible_markers == (candidates[1],)
    assert snapshot.search.candidates == tuple(candidates)
    assert snapshot.search_affordance_visible is False
    await controller.wait_idle()


@pytest.mark.asyncio
async def test_select_during_routing_keeps_details_hidden(controller, directions, previews) -> None:
    previews.reply_with(None)
    directions.reply_with(make_route())
    controller.select(make_place("a"))
    await controller.start_route()

    controller.select(make_place("b"))

    assert controller.selection_state.selected == make_place("b")
    assert controller.selection_state.details_visible is False
    assert controller.route_state.destination == make_place("a")
    await controller.wait_idle()


@pytest.mark.asyncio
async def test_end_route_restores_selection_and_default_region(controller, directions, previews, settings) -> None:
    previews.reply_with(None)
    destination = make_place("a")
    directions.reply_with(make_route())
    controller.select(destination)
    await controller.wait_idle()
    directly_selected = controller.selection_state
    await controller.start_route()
    fits = controller.camera_fits()

    state = controller.end_route()

    assert state.status is RouteStatus.IDLE
    assert state.geometry is None
    assert controller.mode is InteractionMode.BROWSING
    assert controller.selection_state == directly_selected
    assert controller.selection_state.details_visible is True
    [fit] = fits.pending()
    assert fit.kind is FitKind.REGION
    assert fit.region == settings.default_region

    controller.select(destination)
    assert controller.selection_state == directly_selected
    assert len(previews.calls) == 1
    await controller.wait_idle()


@pytest.mark.asyncio
async def test_end_route_refetches_preview_after_selection_was_cleared(controller, directions, previews) -> None:
    destination = make_place("a")
    previews.reply_with(make_preview(destination))
    directions.reply_with(make_route())
    controller.select(destination)
    await controller.wait_idle()
    await controller.start_route()
    controller.select(None)
    assert controller.preview_state.handle is None

    controller.end_route()
    await controller.wait_idle()

    assert controller.selection_state.selected == destination
    assert controller.preview_state.handle == make_preview(destination)
    assert len(previews.calls) == 2


@pytest.mark.asyncio
async def test_end_route_publishes_single_transition_before_camera_fit(controller, directions, previews) -> None:
    previews.reply_with(None)
    directions.reply_with(make_route())
    controller.select(make_place("a"))
    await controller.start_route()
    await controller.wait_idle()
    events = controller.events()

    controller.end_route()

    changed, fit = events.pending()
    assert changed.reason == "route_ended"
    assert changed.snapshot.mode is InteractionMode.BROWSING
    assert changed.snapshot.selection.details_visible is True
    assert fit.kind is FitKind.REGION


def test_end_route_when_idle_is_noop(controller) -> None:
    events = []
    controller.subscribe(events.append)

    state = controller.end_route()

    assert state.status is RouteStatus.IDLE
    assert events == []


@pytest.mark.asyncio
async def test_cancelled_route_request_clears_pending(controller, directions, previews) -> None:
    previews.reply_with(None)
    controller.select(make_place("a"))
    await controller.wait_idle()
    reasons: list[str] = []
    controller.subscribe(lambda event: reasons.append(getattr(event, "reason", "fit")))

    task = asyncio.create_task(controller.start_route())
    await flush()
    assert controller.route_state.pending is True

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert directions.calls[0].cancelled
    assert controller.route_state.pending is False
    assert controller.route_state.status is RouteStatus.IDLE
    assert reasons == ["route_requested", "route_cancelled"]

    directions.reply_with(make_route())
    state = await controller.start_route()
    assert state.status is RouteStatus.ACTIVE
    assert state.pending is False


@pytest.mark.asyncio
async def test_cancelled_stale_route_request_keeps_newer_pending(controller, directions, previews) -> None:
    previews.reply_with(None)
    controller.select(make_place("a"))
    await controller.wait_idle()

    older = asyncio.create_task(controller.start_route())
    await flush()
    newer = asyncio.create_task(controller.start_route())
    await flush()
    older.cancel()
    with pytest.raises(asyncio.CancelledError):
        await older

    assert controller.route_state.pending is True
    directions.calls[1].resolve(make_route())
    state = await newer
    assert state.status is RouteStatus.ACTIVE
    assert state.pending is False
