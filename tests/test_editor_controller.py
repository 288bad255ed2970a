"""Editor controller against the real HTTP app (httpx.ASGITransport) and a fake player."""
from __future__ import annotations

import asyncio
from typing import List, Tuple

import httpx
import pytest
import pytest_asyncio

from main import app
from timeline_selections.application.selection.drag_edit import TimelineScale
from timeline_selections.application.selection.editor import (
    SelectionEditorController,
    frame_for_time,
)
from timeline_selections.application.selection.session import ActiveGroupSession
from timeline_selections.domain.errors import (
    ApiRequestError,
    DragStateError,
    NotFoundError,
    OverlapError,
)
from timeline_selections.domain.selection_group import SelectionGroup
from timeline_selections.domain.timeframe import Timeframe
from timeline_selections.domain.value_objects import DragMode, SelectionGroupId
from timeline_selections.infrastructure.http.selection_groups_client import (
    SelectionGroupsApiClient,
)

from .conftest import BASE_TS, interval_set


class FakePlayer:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, object]] = []

    def pause(self) -> None:
        self.calls.append(("pause", None))

    def seek_to(self, frame: int) -> None:
        self.calls.append(("seek", frame))


@pytest_asyncio.fixture
async def api(data_file):
    client = SelectionGroupsApiClient(
        "http://testserver",
        transport=httpx.ASGITransport(app=app),
    )
    yield client
    await client.aclose()


@pytest.fixture
def notices():
    return []


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def controller(api, player, notices):
    return SelectionEditorController(
        api,
        ActiveGroupSession(),
        scale=TimelineScale(pixels_per_second=100.0),
        player=player,
        fps=30,
        notify=lambda level, message: notices.append((level, message)),
    )


class TestFrameForTime:

    @pytest.mark.parametrize(
        "seconds,expected",
        [(0.0, 0), (1.0, 30), (2.5, 75), (0.05, 2), (0.016, 0)],
    )
    def test_half_up_rounding(self, seconds, expected):
        assert frame_for_time(seconds, 30) == expected


class TestApiClient:

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, api):
        tfs = interval_set({"a": (0.0, 5.0), "b": (5.0, 8.0)})
        group_id = await api.create_group("cuts", tfs)

        group = await api.get_group(group_id)
        assert group.name == "cuts"
        assert group.timeframes == tfs

        summaries = await api.list_groups()
        assert [s.id for s in summaries] == [group_id]

    @pytest.mark.asyncio
    async def test_overlap_is_mapped_to_overlap_error(self, api):
        with pytest.raises(OverlapError) as exc_info:
            await api.create_group("bad", interval_set({"a": (0.0, 5.0), "b": (3.0, 8.0)}))
        assert exc_info.value.first[0] == "a"
        assert exc_info.value.second[0] == "b"

    @pytest.mark.asyncio
    async def test_unknown_group_is_not_found(self, api):
        with pytest.raises(NotFoundError):
            await api.get_group(SelectionGroupId("missing"))
        with pytest.raises(NotFoundError):
            await api.update_group(SelectionGroupId("missing"), interval_set())

    @pytest.mark.asyncio
    async def test_transport_failure_is_api_error(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with SelectionGroupsApiClient(
            "http://testserver", transport=httpx.MockTransport(refuse)
        ) as client:
            with pytest.raises(ApiRequestError):
                await client.list_groups()

    @pytest.mark.asyncio
    async def test_server_error_carries_status(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(500, json={"error": "boom"})
        )
        async with SelectionGroupsApiClient("http://testserver", transport=transport) as client:
            with pytest.raises(ApiRequestError) as exc_info:
                await client.list_groups()
        assert exc_info.value.status_code == 500
        assert str(exc_info.value) == "boom"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>oops</html>", headers={"content-type": "text/plain"}),
            httpx.Response(200, json={"id": "g1"}),
            httpx.Response(200, json=["not", "an", "object"]),
            httpx.Response(
                200,
                json={
                    "id": "g1",
                    "name": "n",
                    "createdAt": "yesterday",
                    "updatedAt": "today",
                    "timeframes": {},
                },
            ),
        ],
    )
    async def test_malformed_success_body_is_api_error(self, response):
        transport = httpx.MockTransport(lambda request: response)
        async with SelectionGroupsApiClient("http://testserver", transport=transport) as client:
            with pytest.raises(ApiRequestError):
                await client.get_group(SelectionGroupId("g1"))

    @pytest.mark.asyncio
    async def test_non_json_list_and_create_are_api_errors(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, text="ok", headers={"content-type": "text/plain"})
        )
        async with SelectionGroupsApiClient("http://testserver", transport=transport) as client:
            with pytest.raises(ApiRequestError):
                await client.list_groups()
            with pytest.raises(ApiRequestError):
                await client.create_group("g", interval_set())


class TestLoadAndSave:

    @pytest.mark.asyncio
    async def test_refresh_groups_lists_summaries(self, api, controller):
        group_id = await api.create_group("listed", interval_set())
        summaries = await controller.refresh_groups()
        assert [(s.id, s.name) for s in summaries] == [(group_id, "listed")]

    @pytest.mark.asyncio
    async def test_refresh_failure_is_reported(self, notices):
        transport = httpx.MockTransport(lambda request: httpx.Response(503, json={}))
        async with SelectionGroupsApiClient("http://testserver", transport=transport) as broken:
            controller = SelectionEditorController(
                broken,
                ActiveGroupSession(),
                scale=TimelineScale(pixels_per_second=10.0),
                notify=lambda level, message: notices.append((level, message)),
            )
            assert await controller.refresh_groups() == []
        assert notices == [("error", "Failed to fetch selection groups")]

    @pytest.mark.asyncio
    async def test_load_seeks_to_earliest_start(self, api, controller, player, notices):
        group_id = await api.create_group(
            "cuts", interval_set({"late": (10.0, 12.0), "early": (2.5, 4.0)})
        )

        assert await controller.load_group(group_id) is True

        active = controller.session.active_group
        assert active.id == group_id
        assert player.calls == [("pause", None), ("seek", 75)]
        assert notices[-1] == ("success", "Loaded selection group: cuts")

    @pytest.mark.asyncio
    async def test_load_empty_group_does_not_seek(self, api, controller, player):
        group_id = await api.create_group("empty", interval_set())
        assert await controller.load_group(group_id) is True
        assert player.calls == []

    @pytest.mark.asyncio
    async def test_load_failure_leaves_session_untouched(self, controller, notices):
        draft = controller.new_draft("local", interval_set({"a": (0.0, 1.0)}))

        assert await controller.load_group(SelectionGroupId("missing")) is False
        assert controller.session.active_group is draft
        assert notices[-1][0] == "error"

    @pytest.mark.asyncio
    async def test_save_creates_then_updates(self, api, controller, notices):
        controller.new_draft("draft", interval_set({"a": (0.0, 1.0)}))

        group_id = await controller.save("  My group  ")
        assert group_id is not None
        assert notices[-1] == ("success", "Selection group created")
        assert controller.session.active_group.id == group_id
        assert controller.session.active_group.name == "My group"

        controller.session.update_timeframe("a", end=2.0)
        assert await controller.save("Renamed") == group_id
        assert notices[-1] == ("success", "Selection group updated")

        stored = await api.get_group(group_id)
        assert stored.name == "Renamed"
        assert stored.timeframes["a"] == Timeframe(0.0, 2.0)
        assert len(await api.list_groups()) == 1

    @pytest.mark.asyncio
    async def test_save_requires_name(self, controller, notices):
        controller.new_draft("draft")
        assert await controller.save("   ") is None
        assert notices == [("error", "Please enter a name")]

    @pytest.mark.asyncio
    async def test_save_requires_active_group(self, controller, notices):
        assert await controller.save("name") is None
        assert notices == [("error", "No active selection group")]

    @pytest.mark.asyncio
    async def test_rejected_save_keeps_draft(self, api, controller, notices):
        controller.new_draft("bad", interval_set({"a": (0.0, 5.0), "b": (3.0, 8.0)}))

        assert await controller.save("bad") is None
        level, message = notices[-1]
        assert level == "error"
        assert '"a"' in message and '"b"' in message
        assert controller.session.active_group.id is None
        assert await api.list_groups() == []

    @pytest.mark.asyncio
    async def test_garbled_response_is_reported_not_raised(self, notices):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, text="ok", headers={"content-type": "text/plain"})
        )
        async with SelectionGroupsApiClient("http://testserver", transport=transport) as garbled:
            controller = SelectionEditorController(
                garbled,
                ActiveGroupSession(),
                scale=TimelineScale(pixels_per_second=10.0),
                notify=lambda level, message: notices.append((level, message)),
            )
            draft = controller.new_draft("local", interval_set({"a": (0.0, 1.0)}))

            assert await controller.load_group(SelectionGroupId("g1")) is False
            assert await controller.save("local") is None

        assert controller.session.active_group is draft
        assert [level for level, _ in notices] == ["error", "error"]

    @pytest.mark.asyncio
    async def test_move_to_neighbour_then_save_passes_server_validation(
        self, api, controller, notices
    ):
        controller.new_draft(
            "tight",
            interval_set({"prev": (0.0, 3.07), "item": (5.88, 8.54), "next": (11.08, 12.0)}),
        )

        controller.start_drag("item", DragMode.MOVE, pointer_x=0.0)
        controller.drag_to(10_000.0)
        controller.end_drag()
        group_id = await controller.save("tight")
        assert group_id is not None
        assert notices[-1] == ("success", "Selection group created")

        controller.start_drag("item", DragMode.MOVE, pointer_x=0.0)
        controller.drag_to(-10_000.0)
        controller.end_drag()
        assert await controller.save("tight") == group_id

        stored = (await api.get_group(group_id)).timeframes
        assert stored["item"].start == 3.07
        assert stored["item"].end <= stored["next"].start


class SlowGateway:
    """Gateway whose get_group waits until the test releases it."""

    def __init__(self, groups) -> None:
        self._groups = groups
        self.release = {group_id: asyncio.Event() for group_id in groups}

    async def list_groups(self):
        return []

    async def get_group(self, group_id):
        await self.release[group_id].wait()
        return self._groups[group_id]


class TestStaleLoads:

    @pytest.mark.asyncio
    async def test_older_response_arriving_last_is_discarded(self, notices):
        groups = {
            gid: SelectionGroup(
                id=SelectionGroupId(gid),
                name=gid,
                created_at=BASE_TS,
                updated_at=BASE_TS,
                timeframes=interval_set({"a": (0.0, 1.0)}),
            )
            for gid in ("first", "second")
        }
        gateway = SlowGateway(groups)
        controller = SelectionEditorController(
            gateway,
            ActiveGroupSession(),
            scale=TimelineScale(pixels_per_second=10.0),
            notify=lambda level, message: notices.append((level, message)),
        )

        first = asyncio.create_task(controller.load_group(SelectionGroupId("first")))
        second = asyncio.create_task(controller.load_group(SelectionGroupId("second")))
        await asyncio.sleep(0)

        gateway.release["second"].set()
        assert await second is True
        gateway.release["first"].set()
        assert await first is False

        assert controller.session.active_group.name == "second"


@pytest.fixture
def local_controller():
    return SelectionEditorController(
        SlowGateway({}),
        ActiveGroupSession(),
        scale=TimelineScale(pixels_per_second=100.0),
    )


class TestDragWiring:

    def test_drag_updates_active_group(self, local_controller):
        local_controller.new_draft(
            "g", interval_set({"prev": (0.0, 2.0), "item": (2.5, 3.5), "next": (5.0, 7.0)})
        )

        local_controller.start_drag("item", DragMode.MOVE, pointer_x=0.0)
        local_controller.drag_to(1000.0)
        last = local_controller.end_drag()

        assert (last.start, last.end) == (pytest.approx(4.0), pytest.approx(5.0))
        tf = local_controller.session.active_group.timeframes["item"]
        assert tf.start == pytest.approx(4.0)
        assert tf.end == pytest.approx(5.0)

    def test_cancel_restores_segment(self, local_controller):
        local_controller.new_draft("g", interval_set({"item": (1.0, 2.0)}))

        local_controller.start_drag("item", DragMode.RESIZE_RIGHT, pointer_x=0.0)
        local_controller.drag_to(300.0)
        assert local_controller.session.active_group.timeframes["item"].end == pytest.approx(5.0)
        local_controller.cancel_drag()

        assert local_controller.session.active_group.timeframes["item"] == Timeframe(1.0, 2.0)

    def test_unknown_segment_cannot_be_dragged(self, local_controller):
        local_controller.new_draft("g", interval_set({"item": (1.0, 2.0)}))
        with pytest.raises(DragStateError):
            local_controller.start_drag("ghost", DragMode.MOVE, pointer_x=0.0)

    def test_scale_change(self, local_controller):
        local_controller.set_scale(TimelineScale(pixels_per_second=20.0))
        assert local_controller.engine.scale.pixels_per_second == 20.0
