"""Unit tests for the client render session."""

import asyncio
from collections import defaultdict

from planvision.client.api_client import PlanVisionAPIError
from planvision.client.poller import TIMEOUT_MESSAGE, GenerationPoller
from planvision.client.session import RenderSession
from planvision.models.enums import JobStatus
from planvision.schemas.generation import GenerationJobResponse
from planvision.schemas.render_config import RenderConfigCreate, RenderConfigResponse


def yield_once(_delay):
    return asyncio.sleep(0)


class FakeClient:
    """In-memory stand-in for PlanVisionClient.

    ``statuses`` maps a config id to the responses returned by successive
    status requests; the last response repeats.
    """

    def __init__(self, statuses=None, submit_error=None):
        self.statuses = defaultdict(list, statuses or {})
        self.submit_error = submit_error
        self.requests = []
        self.refinements = []

    async def create_render_config(self, data):
        if self.submit_error is not None:
            raise self.submit_error
        return RenderConfigResponse(id="c1", inputImageUrl=data.inputImageUrl, imageTypeLabel=data.imageTypeLabel)

    async def refine(self, config_id, custom_instructions):
        self.refinements.append((config_id, custom_instructions))
        return RenderConfigResponse(
            id="c2", parentConfigId=config_id, inputImageUrl="https://images.test/plan.png",
            imageTypeLabel="Room", customInstructions=custom_instructions,
        )

    async def get_generation_status(self, config_id):
        self.requests.append(config_id)
        responses = self.statuses[config_id]
        if len(responses) > 1:
            return responses.pop(0)
        if responses:
            return responses[0]
        return GenerationJobResponse(id="", status=JobStatus.PENDING)

    async def get_generations(self, config_id):
        return [GenerationJobResponse(id="old", status=JobStatus.COMPLETED)]


def make_session(client, max_attempts=30):
    poller = GenerationPoller(client.get_generation_status, interval=2.0, max_attempts=max_attempts, sleep=yield_once)
    return RenderSession(client, poller=poller)


def completed(job_id):
    return GenerationJobResponse(id=job_id, status=JobStatus.COMPLETED, outputImageUrl=f"https://out/{job_id}.jpg")


class TestSubmit:
    """Tests for submitting and polling a config."""

    def test_completed_job_is_prepended_and_selected(self):
        client = FakeClient({"c1": [GenerationJobResponse(id="j1", status=JobStatus.PROCESSING), completed("j1")]})

        async def scenario():
            session = make_session(client)
            session.history = [completed("j0")]
            await session.submit(RenderConfigCreate(inputImageUrl="https://images.test/k.jpg"))
            assert session.is_polling
            await session.wait()
            return session

        session = asyncio.run(scenario())

        assert session.config_id == "c1"
        assert [job.id for job in session.history] == ["j1", "j0"]
        assert session.selected.id == "j1"
        assert session.result.id == "j1"
        assert session.error_message is None
        assert not session.is_polling

    def test_failed_job_surfaces_error(self):
        client = FakeClient({"c1": [GenerationJobResponse(id="j1", status=JobStatus.FAILED, errorMessage="boom")]})

        async def scenario():
            session = make_session(client)
            await session.submit(RenderConfigCreate(inputImageUrl="https://images.test/k.jpg"))
            await session.wait()
            return session

        session = asyncio.run(scenario())

        assert session.error_message == "boom"
        assert session.history == []

    def test_timeout_surfaces_message(self):
        client = FakeClient()

        async def scenario():
            session = make_session(client, max_attempts=3)
            await session.submit(RenderConfigCreate(inputImageUrl="https://images.test/k.jpg"))
            await session.wait()
            return session

        session = asyncio.run(scenario())

        assert session.error_message == TIMEOUT_MESSAGE
        assert client.requests == ["c1"] * 3

    def test_submit_error_is_recorded(self):
        client = FakeClient(submit_error=PlanVisionAPIError("server down", 503))

        async def scenario():
            session = make_session(client)
            result = await session.submit(RenderConfigCreate(inputImageUrl="https://images.test/k.jpg"))
            return session, result

        session, result = asyncio.run(scenario())

        assert result is None
        assert session.error_message == "Failed to submit job: server down"
        assert not session.is_polling


class TestPollReplacement:
    """Tests for the single-poll-per-session rule."""

    def test_new_poll_cancels_previous(self):
        client = FakeClient({"c2": [completed("j2")]})

        async def scenario():
            session = make_session(client)
            first = session.start_polling("c1")
            await asyncio.sleep(0)
            second = session.start_polling("c2")
            await session.wait()
            await asyncio.gather(first, return_exceptions=True)
            return session, first, second

        session, first, second = asyncio.run(scenario())

        assert first.cancelled()
        assert second.done() and not second.cancelled()
        assert [job.id for job in session.history] == ["j2"]
        assert session.error_message is None

    def test_cancel_stops_polling(self):
        client = FakeClient()

        async def scenario():
            session = make_session(client)
            task = session.start_polling("c1")
            await asyncio.sleep(0)
            session.cancel()
            await session.wait()
            return session, task

        session, task = asyncio.run(scenario())

        assert task.cancelled()
        assert session.error_message is None
        assert session.result is None


class TestRefine:
    """Tests for refinement from the current config."""

    def test_refine_polls_child_config(self):
        client = FakeClient({"c2": [completed("j2")]})

        async def scenario():
            session = make_session(client)
            session.config_id = "c1"
            config = await session.refine("add plants")
            await session.wait()
            return session, config

        session, config = asyncio.run(scenario())

        assert client.refinements == [("c1", "add plants")]
        assert config.parentConfigId == "c1"
        assert session.config_id == "c2"
        assert session.selected.id == "j2"

    def test_refine_without_config(self):
        session = make_session(FakeClient())

        assert asyncio.run(session.refine("add plants")) is None
        assert session.error_message == "Cannot refine: no render config submitted yet."

    def test_load_history(self):
        async def scenario():
            session = make_session(FakeClient())
            session.config_id = "c1"
            await session.load_history()
            return session

        session = asyncio.run(scenario())

        assert [job.id for job in session.history] == ["old"]
        assert session.selected.id == "old"
