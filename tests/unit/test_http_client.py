"""Unit tests for HttpHostClient against an in-process aiohttp server."""

from contextlib import asynccontextmanager

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from interviewmate.errors import (
    AppendFailure,
    HostRequestError,
    LoadFailure,
    SuggestionFailure,
    TranscriptionFailure,
)
from interviewmate.host.http_client import HttpHostClient
from interviewmate.models.conversation import Speaker


@asynccontextmanager
async def running_host(routes):
    """Serve ``routes`` locally and yield a client pointed at them."""
    app = web.Application()
    app.add_routes(routes)
    server = TestServer(app)
    await server.start_server()
    client = HttpHostClient(f"http://{server.host}:{server.port}/", timeout_seconds=5.0)
    try:
        yield client
    finally:
        await client.close()
        await server.close()


@pytest.mark.unit
class TestHttpHostClient:
    """Test cases for HttpHostClient."""

    @pytest.mark.asyncio
    async def test_get_conversation(self):
        """Test messages are parsed in host order with ids as strings."""
        async def conversation(request):
            return web.json_response({"success": True, "messages": [
                {"id": 7, "speaker": "interviewer", "text": "Why us?", "timestamp": 1000},
                {"id": "8", "speaker": "interviewee", "text": "Scale.", "timestamp": 2000,
                 "edited": True},
            ]})

        async with running_host([web.get("/conversation", conversation)]) as client:
            messages = await client.get_conversation()

        assert [m.id for m in messages] == ["7", "8"]
        assert messages[0].speaker is Speaker.INTERVIEWER
        assert messages[1].edited is True
        assert messages[1].timestamp == 2000

    @pytest.mark.asyncio
    async def test_get_conversation_server_error(self):
        """Test a 500 becomes a LoadFailure."""
        async def conversation(request):
            return web.Response(status=500, text="boom")

        async with running_host([web.get("/conversation", conversation)]) as client:
            with pytest.raises(LoadFailure, match="500"):
                await client.get_conversation()

    @pytest.mark.asyncio
    async def test_malformed_json_maps_to_operation_failure(self):
        """Test a body declared as JSON that does not parse raises the operation's failure."""
        async def broken(request):
            return web.Response(text="{not json", content_type="application/json")

        routes = [web.get("/conversation", broken), web.post("/transcribe", broken)]
        async with running_host(routes) as client:
            with pytest.raises(LoadFailure):
                await client.get_conversation()
            with pytest.raises(TranscriptionFailure):
                await client.transcribe_audio(b"x", "audio/wav")

    @pytest.mark.asyncio
    async def test_add_conversation_message(self):
        """Test the append request body."""
        received = []

        async def add(request):
            received.append(await request.json())
            return web.json_response({"success": True})

        async with running_host([web.post("/conversation/messages", add)]) as client:
            await client.add_conversation_message("I use retries.", Speaker.INTERVIEWEE)

        assert received == [{"text": "I use retries.", "speaker": "interviewee"}]

    @pytest.mark.asyncio
    async def test_add_conversation_message_rejected(self):
        """Test success=false becomes an AppendFailure with the host's reason."""
        async def add(request):
            return web.json_response({"success": False, "error": "conversation locked"})

        async with running_host([web.post("/conversation/messages", add)]) as client:
            with pytest.raises(AppendFailure, match="conversation locked"):
                await client.add_conversation_message("text", Speaker.INTERVIEWER)

    @pytest.mark.asyncio
    async def test_transcribe_audio(self):
        """Test the payload is posted raw with its mime type."""
        received = {}

        async def transcribe(request):
            received["body"] = await request.read()
            received["content_type"] = request.content_type
            return web.json_response({"success": True, "result": {"text": "How do you handle failures?"}})

        async with running_host([web.post("/transcribe", transcribe)]) as client:
            text = await client.transcribe_audio(b"RIFF1234WAVE", "audio/wav")

        assert text == "How do you handle failures?"
        assert received == {"body": b"RIFF1234WAVE", "content_type": "audio/wav"}

    @pytest.mark.asyncio
    async def test_transcribe_audio_failure(self):
        """Test a failed or empty transcription result raises."""
        responses = [
            {"success": False, "error": "Transcription failed"},
            {"success": True},
        ]

        async def transcribe(request):
            return web.json_response(responses.pop(0))

        async with running_host([web.post("/transcribe", transcribe)]) as client:
            with pytest.raises(TranscriptionFailure, match="Transcription failed"):
                await client.transcribe_audio(b"x", "audio/wav")
            with pytest.raises(TranscriptionFailure, match="no result"):
                await client.transcribe_audio(b"x", "audio/wav")

    @pytest.mark.asyncio
    async def test_get_answer_suggestions(self):
        """Test suggestion order is preserved."""
        async def suggestions(request):
            body = await request.json()
            assert body == {"question": "Tell me about a failure"}
            return web.json_response({"success": True, "suggestions": {
                "suggestions": ["Pick a real outage", "Explain the fix", "Share the lesson"],
                "reasoning": "Behavioral question",
            }})

        async with running_host([web.post("/suggestions", suggestions)]) as client:
            suggestion = await client.get_answer_suggestions("Tell me about a failure")

        assert suggestion.suggestions == ["Pick a real outage", "Explain the fix", "Share the lesson"]
        assert suggestion.reasoning == "Behavioral question"

    @pytest.mark.asyncio
    async def test_get_answer_suggestions_malformed(self):
        """Test a response that fails validation becomes a SuggestionFailure."""
        async def suggestions(request):
            return web.json_response({"success": True, "suggestions": {"suggestions": "not a list"}})

        async with running_host([web.post("/suggestions", suggestions)]) as client:
            with pytest.raises(SuggestionFailure):
                await client.get_answer_suggestions("q")

    @pytest.mark.asyncio
    async def test_toggle_speaker(self):
        async def toggle(request):
            return web.json_response({"success": True, "speaker": "interviewer"})

        async with running_host([web.post("/speaker/toggle", toggle)]) as client:
            assert await client.toggle_speaker() is Speaker.INTERVIEWER

    @pytest.mark.asyncio
    async def test_toggle_speaker_without_speaker(self):
        async def toggle(request):
            return web.json_response({"success": True})

        async with running_host([web.post("/speaker/toggle", toggle)]) as client:
            with pytest.raises(HostRequestError):
                await client.toggle_speaker()

    @pytest.mark.asyncio
    async def test_unreachable_host(self, unused_tcp_port):
        """Test connection errors map to the operation's failure type."""
        client = HttpHostClient(f"http://127.0.0.1:{unused_tcp_port}", timeout_seconds=2.0)
        try:
            with pytest.raises(LoadFailure):
                await client.get_conversation()
        finally:
            await client.close()
