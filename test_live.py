"""Live test: connect to /ws, open a session, send reasoning steps and query memory."""

import asyncio
import json
import sys

import websockets


HOST = sys.argv[1] if len(sys.argv) > 1 else "127.0.0.1:3000"
WS_URI = f"ws://{HOST}/ws"


class Client:
    """Minimal JSON-RPC client over one WebSocket."""

    def __init__(self, ws):
        self.ws = ws
        self.next_id = 1

    async def request(self, method, params=None):
        message = {"jsonrpc": "2.0", "method": method, "id": self.next_id}
        if params is not None:
            message["params"] = params
        self.next_id += 1
        await self.ws.send(json.dumps(message))
        return json.loads(await self.ws.recv())

    async def tool(self, name, arguments):
        response = await self.request("call_tool", {"name": name, "arguments": arguments})
        if "error" in response:
            raise RuntimeError(response["error"])
        result = response["result"]
        text = result["content"][0]["text"]
        try:
            return json.loads(text), result.get("isError", False)
        except json.JSONDecodeError:
            return text, result.get("isError", False)


async def main():
    async with websockets.connect(WS_URI) as ws:
        client = Client(ws)
        print(f"[WS] Connected to {WS_URI}")

        tools = await client.request("list_tools")
        print(f"[TOOLS] {len(tools['result']['tools'])} tools: "
              f"{', '.join(t['name'] for t in tools['result']['tools'])}\n")

        session, _ = await client.tool("create_reasoning_session", {"goal": "Why is the checkout API slow?"})
        session_id = session["sessionId"]
        print(f"[SESSION] {session_id} in library {session['library']}")

        steps = [
            ("The checkout API latency doubled after the last deploy", 0.6, "medium", None),
            ("The deploy added a synchronous call to the pricing service", 0.7, "medium",
             "The pricing call is the latency source"),
            ("Traces show the pricing call takes 400ms of the 600ms checkout latency", 0.9, "high", None),
        ]
        for number, (thought, confidence, quality, hypothesis) in enumerate(steps, start=1):
            arguments = {
                "thought": thought,
                "thoughtNumber": number,
                "totalThoughts": len(steps),
                "nextThoughtNeeded": number < len(steps),
                "confidence": confidence,
                "reasoning_quality": quality,
                "session_id": session_id,
            }
            if hypothesis:
                arguments["hypothesis"] = hypothesis
            payload, is_error = await client.tool("advanced_reasoning", arguments)
            if is_error:
                print(f"[STEP {number}] ERROR {payload}")
                continue
            print(f"[STEP {number}] history={payload['thoughtHistoryLength']} "
                  f"memory={payload['memoryStats']} related={len(payload['relatedMemories'])}")

        print("\n--- MEMORY QUERY ---")
        found, _ = await client.tool("query_reasoning_memory", {"session_id": session_id, "query": "pricing latency"})
        for memory in found["relatedMemories"]:
            print(f"  * ({memory['confidence']:.2f}, {memory['connections']} links) {memory['content']}")

        print("\n--- LIBRARIES ---")
        libraries, _ = await client.tool("list_memory_libraries", {})
        for library in libraries["libraries"]:
            marker = "*" if library["current"] else " "
            print(f"  {marker} {library['name']}: {library['nodes']} nodes")

        unknown = await client.request("no_such_method")
        print(f"\n[PROTOCOL] unknown method -> {unknown['error']}")

    print("\nDone!")


if __name__ == "__main__":
    asyncio.run(main())
