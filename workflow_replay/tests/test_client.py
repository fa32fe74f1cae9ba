import unittest

import httpx

from workflow_replay.client import (
    WorkflowClient,
    WorkflowClientError,
    WorkflowConnectionError,
    WorkflowNotFoundError,
)

ARTIFACT = {
    "sessionId": "sess-1",
    "summary": {"totalSteps": 1, "toolCalls": 1},
    "steps": [
        {"id": "evt-0", "index": 0, "type": "tool_call", "content": "ls", "metadata": {"tool": "Bash"}},
        {"id": "evt-1", "index": 1, "type": "tool_result", "content": "src", "metadata": {"exitCode": 0}},
    ],
    "rawLines": ["{}", "{}"],
}


def _client(handler) -> WorkflowClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WorkflowClient(base_url="http://replay.test/", http_client=http)


class WorkflowClientTests(unittest.IsolatedAsyncioTestCase):
    async def test_get_session_parses_artifact(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=ARTIFACT)

        async with _client(handler) as client:
            artifact = await client.get_session("sess-1")

        self.assertEqual(seen, ["http://replay.test/workflow/sessions/sess-1"])
        self.assertEqual(artifact.sessionId, "sess-1")
        self.assertEqual([event.kind.value for event in artifact.events], ["tool_call", "tool_result"])
        self.assertEqual(artifact.rawLines, ["{}", "{}"])

    async def test_not_found(self) -> None:
        async with _client(lambda request: httpx.Response(404, json={"detail": "nope"})) as client:
            with self.assertRaises(WorkflowNotFoundError) as ctx:
                await client.get_session("missing")
        self.assertEqual(ctx.exception.status_code, 404)

    async def test_server_error_carries_status(self) -> None:
        async with _client(lambda request: httpx.Response(500, text="boom")) as client:
            with self.assertRaises(WorkflowClientError) as ctx:
                await client.get_session("sess-1")
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertIn("boom", ctx.exception.message)

    async def test_connection_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            with self.assertRaises(WorkflowConnectionError):
                await client.list_transcripts()

    async def test_malformed_payload(self) -> None:
        async with _client(lambda request: httpx.Response(200, json={"events": "oops"})) as client:
            with self.assertRaises(WorkflowClientError):
                await client.get_session("sess-1")

        async with _client(lambda request: httpx.Response(200, text="not json")) as client:
            with self.assertRaises(WorkflowClientError):
                await client.list_transcripts()

    async def test_list_transcripts(self) -> None:
        payload = [{"sessionId": "b", "path": "/x/b.jsonl", "size": 10}, {"sessionId": "a", "path": "/x/a.jsonl"}]

        async with _client(lambda request: httpx.Response(200, json=payload)) as client:
            transcripts = await client.list_transcripts()

        self.assertEqual([item.sessionId for item in transcripts], ["b", "a"])
        self.assertEqual(transcripts[0].size, 10)

    async def test_session_id_is_escaped(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path.decode("ascii"))
            return httpx.Response(404)

        async with _client(handler) as client:
            with self.assertRaises(WorkflowNotFoundError):
                await client.get_session("a/b")
        self.assertEqual(seen, ["/workflow/sessions/a%2Fb"])


if __name__ == "__main__":
    unittest.main()
