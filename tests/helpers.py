"""Transcript line builders shared by tests."""

import json


def assistant_line(text: str, timestamp: str = "2025-01-01T00:00:00Z") -> str:
    return json.dumps(
        {
            "type": "assistant",
            "timestamp": timestamp,
            "message": {"role": "assistant", "content": [{"type": "text", "text": text}]},
        }
    )


def agent_result_line(
    agent_id: str, text: str, timestamp: str = "2025-01-01T00:01:00Z", status: str = "completed"
) -> str:
    return json.dumps(
        {
            "type": "user",
            "timestamp": timestamp,
            "toolUseResult": {
                "status": status,
                "agentId": agent_id,
                "content": [{"type": "text", "text": text}],
            },
        }
    )


def tool_use_line() -> str:
    return json.dumps(
        {
            "type": "assistant",
            "timestamp": "2025-01-01T00:02:00Z",
            "message": {"content": [{"type": "tool_use", "name": "Edit", "input": {}}]},
        }
    )
