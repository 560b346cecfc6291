import asyncio

import pytest

from core.exceptions import ExternalServiceException, ResourceNotFoundException
from fake_providers import ScriptedPreviews, flush, make_place, make_preview
from interaction.preview_fetcher import PreviewFetcher


@pytest.mark.asyncio
async def test_select_shows_details_in_browsing_mode(controller, previews) -> None:
    place = make_place("a")
    previews.reply_with(make_preview(place))

    controller.select(place)

    state = controller.selection_state
    assert state.selected == place
    assert state.details_visible is True
    assert controller.preview_state.loading is True
    await controller.wait_idle()
    assert controller.preview_state.handle == make_preview(place)
    assert controller.preview_state.loading is False


@pytest.mark.asyncio
async def test_select_none_clears_selection_and_preview_without_request(controller, previews) -> None:
    place = make_place("a")
    previews.reply_with(make_preview(place))
    controller.select(place)
    await controller.wait_idle()

    controller.select(None)

    assert controller.selection_state.selected is None
    assert controller.selection_state.details_visible is False
    assert controller.preview_state.handle is None
    assert controller.preview_state.place_id is None
    assert len(previews.calls) == 1


@pytest.mark.asyncio
async def test_latest_selection_wins_when_older_preview_arrives_last(controller, previews) -> None:
    a, b = make_place("a"), make_place("b")

    controller.select(a)
    await flush()
    controller.select(b)
    await flush()

    previews.calls[1].resolve(make_preview(b))
    await controller.wait_idle()
    previews.calls[0].resolve(make_preview(a))
    await flush()

    assert controller.preview_state.handle == make_preview(b)
    assert controller.preview_state.place_id == "b"


@pytest.mark.asyncio
async def test_latest_selection_wins_when_older_preview_arrives_first(controller, previews) -> None:
    a, b = make_place("a"), make_place("b")

    controller.select(a)
    await flush()
    controller.select(b)
    await flush()

    previews.calls[0].resolve(make_preview(a))
    await flush()
    assert controller.preview_state.handle is None
    assert controller.preview_state.loading is True

    previews.calls[1].resolve(make_preview(b))
    await controller.wait_idle()
    assert controller.preview_state.handle == make_preview(b)


@pytest.mark.asyncio
async def test_superseded_preview_request_is_cancelled(controller, previews) -> None:
    controller.select(make_place("a"))
    await flush()
    controller.select(make_place("b"))
    await flush()

    assert previews.calls[0].cancelled
    assert not previews.calls[1].done


@pytest.mark.asyncio
async def test_preview_failure_leaves_no_preview(controller, previews) -> None:
    previews.reply_with(ExternalServiceException("Mapillary request failed"))

    controller.select(make_place("a"))
    await controller.wait_idle()

    assert controller.preview_state.handle is None
    assert controller.preview_state.loading is False
    assert controller.preview_state.place_id == "a"


@pytest.mark.asyncio
async def test_reselecting_same_place_reopens_details_without_refetch(controller, places, previews) -> None:
    place = make_place("a")
    previews.reply_with(make_preview(place))
    controller.select(place)
    await controller.wait_idle()
    controller.exit_search()
    assert controller.selection_state.details_visible is False

    controller.select(make_place("a", name="Renamed"))

    assert controller.selection_state.details_visible is True
    assert controller.preview_state.handle == make_preview(place)
    assert len(previews.calls) == 1


@pytest.mark.asyncio
async def test_select_by_id_resolves_candidates(controller, places, previews) -> None:
    previews.reply_with(None)
    places.reply_with([make_place("a"), make_place("b", name="Blue Bottle")])
    await controller.submit_search("coffee")

    chosen = controller.select_by_id("b")

    assert chosen is not None
    assert chosen.name == "Blue Bottle"
    assert controller.selection_state.selected == chosen
    await controller.wait_idle()


def test_select_by_id_unknown_place_raises(controller) -> None:
    with pytest.raises(ResourceNotFoundException) as excinfo:
        controller.select_by_id("missing")

    assert excinfo.value.details == {"place_id": "missing"}


def test_select_outside_event_loop_leaves_state_untouched(controller, previews) -> None:
    with pytest.raises(RuntimeError):
        controller.select(make_place("a"))

    assert controller.selection_state.selected is None
    assert controller.selection_state.details_visible is False
    assert controller.preview_state.loading is False
    assert controller.preview_state.place_id is None
    assert previews.calls == []


def test_preview_fetcher_refresh_requires_running_loop() -> None:
    fetcher = PreviewFetcher(
        ScriptedPreviews(),
        current_selection=lambda: None,
        on_update=lambda: None,
    )

    with pytest.raises(RuntimeError):
        fetcher.refresh(make_place("a"))

    assert fetcher.state.loading is False
    assert fetcher.state.place_id is None


@pytest.mark.asyncio
async def test_select_by_id_none_dismisses_details(controller, previews) -> None:
    previews.reply_with(None)
    controller.select(make_place("a"))

    assert controller.select_by_id(None) is None
    assert controller.selection_state.selected is None
    await controller.wait_idle()


@pytest.mark.asyncio
async def test_selection_changes_publish_preview_updates(controller, previews) -> None:
    reasons: list[str] = []
    controller.subscribe(lambda event: reasons.append(event.reason))
    previews.reply_with(make_preview(make_place("a")))

    controller.select(make_place("a"))
    await controller.wait_idle()

    assert reasons == ["selection_changed", "preview_updated"]


@pytest.mark.asyncio
async def test_preview_fetcher_discards_result_for_other_identity() -> None:
    previews = ScriptedPreviews()
    current = {"place": make_place("a")}
    updates: list[None] = []
    fetcher = PreviewFetcher(
        previews,
        current_selection=lambda: current["place"],
        on_update=lambda: updates.append(None),
    )

    fetcher.refresh(make_place("a"))
    await flush()
    current["place"] = make_place("b")
    previews.calls[0].resolve(make_preview(make_place("a")))
    await fetcher.wait_idle()

    assert fetcher.state.handle is None
    assert updates == []


@pytest.mark.asyncio
async def test_preview_fetcher_aclose_cancels_in_flight_request() -> None:
    previews = ScriptedPreviews()
    fetcher = PreviewFetcher(
        previews,
        current_selection=lambda: make_place("a"),
        on_update=lambda: None,
    )
    fetcher.refresh(make_place("a"))
    await flush()

    await fetcher.aclose()

    assert previews.calls[0].cancelled
    await asyncio.sleep(0)
