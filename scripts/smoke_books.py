import os
import sys
import json
from fastapi.testclient import TestClient


def main() -> int:
    # Ensure repo root is importable
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)

    try:
        import server  # type: ignore
    except Exception as e:
        print(json.dumps({"ok": False, "stage": "import", "error": str(e)}))
        return 2

    payload = {
        "ok": False,
        "health": None,
        "created": None,
        "tools": 0,
        "found": [],
    }

    with TestClient(server.app) as client:
        # 1) Health
        r = client.get("/api/health")
        payload["health"] = r.json() if r.status_code == 200 else {"status": r.status_code}

        # 2) Create a book over REST
        r = client.post("/api/books", json={"title": "Smoke", "author": "Smoke Author", "isbn": "000"})
        if r.status_code != 201:
            print(json.dumps({"ok": False, "stage": "create_book", "status": r.status_code, "body": r.text}))
            return 1
        payload["created"] = r.json()

        # 3) Discover tools and search over JSON-RPC
        r = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
        payload["tools"] = len(r.json().get("result", {}).get("tools", []))

        r = client.post("/mcp", json={
            "jsonrpc": "2.0", "id": 2, "method": "tools/call",
            "params": {"name": "findBookByAuthor", "arguments": {"author": "Smoke Author"}},
        })
        result = r.json().get("result")
        if result:
            payload["found"] = json.loads(result["content"][0]["text"])

        # 4) Clean up through the tool surface
        client.post("/mcp", json={
            "jsonrpc": "2.0", "id": 3, "method": "tools/call",
            "params": {"name": "deleteBook", "arguments": {"id": payload["created"]["id"]}},
        })

    ok = (
        payload["tools"] == 7
        and any(b["id"] == payload["created"]["id"] for b in payload["found"])
    )
    payload["ok"] = ok
    print(json.dumps(payload))
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
