"""Seed script: creates sample drafts, shares and comments via the REST API.

Usage:
    python scripts/seed.py              # uses http://localhost:8000
    python scripts/seed.py http://host  # custom base URL

Tokens are minted locally with JWT_SECRET (defaults to the dev secret).
"""

import os
import sys
from datetime import datetime, timedelta, timezone

import httpx
import jwt

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"
JWT_SECRET = os.environ.get("JWT_SECRET", "dev-secret")

DRAFTS = [
    {
        "owner": "writer-alice",
        "title": "Chapter One",
        "content": "<p>It was a cold morning.</p><p>The harbour was empty.</p>",
        "visibility": "shared",
        "shared_with": ["writer-jules"],
    },
    {
        "owner": "writer-alice",
        "title": "Open notes",
        "content": "<p>Ideas for the sequel.</p>",
        "visibility": "public",
    },
    {
        "owner": "writer-ronin",
        "title": "Untitled poem",
        "content": "<p>Quiet lines</p>",
    },
]


def token_for(actor_id: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {"sub": actor_id, "iat": now, "exp": now + timedelta(minutes=30)}
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


def headers_for(actor_id: str) -> dict:
    return {"Authorization": f"Bearer {token_for(actor_id)}"}


def create_draft(client: httpx.Client, draft: dict) -> str:
    body = {k: v for k, v in draft.items() if k != "owner"}
    resp = client.post(f"{BASE_URL}/api/drafts/", json=body, headers=headers_for(draft["owner"]))
    resp.raise_for_status()
    draft_id = resp.json()["draft"]["id"]
    print(f"  Created draft '{draft['title']}' ({draft_id}) for {draft['owner']}")
    return draft_id


def main() -> None:
    print(f"Seeding against {BASE_URL}\n")

    with httpx.Client(timeout=10) as client:
        print("Drafts:")
        ids = [create_draft(client, draft) for draft in DRAFTS]

        print("\nCollaboration:")
        resp = client.patch(
            f"{BASE_URL}/api/drafts/{ids[0]}",
            json={"content": "<p>It was a cold morning.</p><p>The harbour was full of gulls.</p>"},
            headers=headers_for("writer-jules"),
        )
        resp.raise_for_status()
        print("  writer-jules revised 'Chapter One'")

        resp = client.post(
            f"{BASE_URL}/api/drafts/{ids[0]}/comments",
            json={"body": "Love the gulls", "placement": "inline", "quote": "full of gulls"},
            headers=headers_for("writer-jules"),
        )
        resp.raise_for_status()
        print("  writer-jules commented on 'Chapter One'")

    print("\nDone!")


if __name__ == "__main__":
    main()
