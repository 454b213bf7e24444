#!/usr/bin/env python3
"""
Seed script to import sample GitHub users via the API and run a sample search.
Make sure the API is running on http://localhost:8000 before running this script.

Usage:
    python scripts/seed_data.py                 # built-in sample users
    python scripts/seed_data.py users.json      # JSON array of user records
"""

import asyncio
import json
import sys

import httpx


API_BASE_URL = "http://localhost:8000"

SAMPLE_QUERY = "Find me top Python developers with Django experience"

# Sample records in the shape accepted by /import-github-users
GITHUB_USER_SAMPLES = [
    {
        "username": "pydev-ana",
        "name": "Ana Souza",
        "bio": "Backend engineer. Django, FastAPI and PostgreSQL. Maintainer of a few Python packages.",
        "location": "Lisbon",
        "public_repos": 48,
        "total_stars": 2310,
        "followers": 890,
        "experience_years": 7,
        "popularity_score": 0.82,
        "skills": ["Python", "Django", "FastAPI", "PostgreSQL"],
        "languages": {"Python": 78, "JavaScript": 12, "Shell": 10},
    },
    {
        "username": "gopher-kenji",
        "name": "Kenji Watanabe",
        "bio": "Distributed systems in Go. Kubernetes operators and gRPC services.",
        "location": "Tokyo",
        "public_repos": 63,
        "total_stars": 4120,
        "followers": 1500,
        "experience_years": 9,
        "popularity_score": 0.91,
        "skills": ["Go", "Kubernetes", "gRPC"],
        "languages": {"Go": 85, "Shell": 10, "Python": 5},
    },
    {
        "username": "react-maya",
        "name": "Maya Patel",
        "bio": "Frontend developer building design systems with React and TypeScript.",
        "location": "Toronto",
        "public_repos": 35,
        "total_stars": 950,
        "followers": 410,
        "experience_years": 5,
        "popularity_score": 0.64,
        "skills": ["React", "TypeScript", "CSS"],
        "languages": {"TypeScript": 70, "JavaScript": 20, "CSS": 10},
    },
    {
        "username": "ml-oluwaseun",
        "name": "Oluwaseun Adeyemi",
        "bio": "Machine learning engineer. PyTorch, data pipelines, and model serving in Python.",
        "location": "Lagos",
        "public_repos": 27,
        "total_stars": 1780,
        "followers": 620,
        "experience_years": 6,
        "popularity_score": 0.77,
        "skills": ["Python", "PyTorch", "Pandas", "Airflow"],
        "languages": {"Python": 88, "Jupyter Notebook": 12},
    },
    {
        "username": "rustacean-lena",
        "name": "Lena Fischer",
        "bio": "Systems programmer. Rust, embedded Linux, and performance tooling.",
        "location": "Munich",
        "public_repos": 41,
        "total_stars": 3050,
        "followers": 1020,
        "experience_years": 8,
        "popularity_score": 0.86,
        "skills": ["Rust", "C", "Linux"],
        "languages": {"Rust": 80, "C": 15, "Python": 5},
    },
]


def load_users(argv: list[str]) -> list[dict]:
    if len(argv) < 2:
        return GITHUB_USER_SAMPLES
    with open(argv[1], encoding="utf-8") as f:
        users = json.load(f)
    if not isinstance(users, list):
        raise ValueError(f"{argv[1]} must contain a JSON array of user records")
    return users


async def seed_data(users: list[dict]):
    """Import users via the API, then run a sample search."""
    async with httpx.AsyncClient(timeout=120.0) as client:
        print(f"Connecting to API at {API_BASE_URL}...")
        print(f"\nImporting {len(users)} GitHub users...")

        response = await client.post(
            f"{API_BASE_URL}/import-github-users",
            json={"users": users},
        )
        if response.status_code != 200:
            print(f"  ❌ Import failed: {response.status_code}")
            print(f"     Response: {response.text}")
            return

        body = response.json()
        results = body.get("results") or {}
        print(f"  ✓ {body.get('message')}")
        if results.get("failed"):
            print("  ⚠ Some users failed; re-run the script to retry them (existing users are skipped).")

        print(f"\nSearching: {SAMPLE_QUERY!r}")
        response = await client.post(
            f"{API_BASE_URL}/search-candidates",
            json={"query": SAMPLE_QUERY},
        )
        if response.status_code != 200:
            print(f"  ❌ Search failed: {response.status_code}")
            print(f"     Response: {response.text}")
            return

        body = response.json()
        candidates = body.get("candidates") or []
        print(f"  ✓ {len(candidates)} candidates")
        for c in candidates:
            print(f"    {c['similarity']:.3f}  {c['username']}  ({', '.join(c.get('skills') or [])})")

        enhanced = body.get("enhancedResults")
        if enhanced:
            print(f"\n  Analysis: {enhanced.get('analysis')}")
            for t in enhanced.get("topCandidates") or []:
                print(f"    - {t.get('username')}: {t.get('matchReason')}")
        else:
            print("\n  (no LLM analysis available)")

        print("\n✅ Seed data completed!")


if __name__ == "__main__":
    try:
        asyncio.run(seed_data(load_users(sys.argv)))
    except KeyboardInterrupt:
        print("\n\nSeed cancelled by user")
        sys.exit(0)
    except Exception as e:
        print(f"\n❌ Fatal error: {str(e)}")
        sys.exit(1)
