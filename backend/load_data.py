"""
Data Loader Script - Loads question_bank.json into the platform via API.

Logs in as an administrator and creates every question and its answer
options through the admin endpoints.

Usage:
    python load_data.py                              # Uses default URL
    python load_data.py http://localhost:8000         # Custom API URL

Credentials come from ADMIN_EMAIL / ADMIN_PASSWORD (create the account
first with create_admin.py).
"""

import json
import sys
import os

import httpx


def login(client: httpx.Client, api_url: str, email: str, password: str) -> str:
    resp = client.post(f"{api_url}/api/auth/login", json={"email": email, "password": password})
    if resp.status_code != 200:
        print(f"Login failed ({resp.status_code}): {resp.json().get('message')}")
        sys.exit(1)
    return resp.json()["token"]


def load_question(client: httpx.Client, api_url: str, item: dict) -> int:
    """Create one question with its answers; returns the new question id."""
    resp = client.post(f"{api_url}/api/admin/questions", json={
        "question_text": item["question_text"],
        "competence": item["competence"],
        "question_type": item.get("question_type", "single_choice"),
    })
    resp.raise_for_status()
    question_id = resp.json()["question"]["id"]

    for answer in item.get("answers", []):
        resp = client.post(f"{api_url}/api/admin/answers", json={
            "question_id": question_id,
            "answer_text": answer["answer_text"],
            "is_correct": bool(answer.get("is_correct", False)),
        })
        resp.raise_for_status()

    return question_id


def load_bank(client: httpx.Client, api_url: str, questions: list) -> int:
    """Load each bank entry, reporting and skipping the ones that fail; returns the number created."""
    created = 0
    for item in questions:
        try:
            load_question(client, api_url, item)
            created += 1
        except httpx.HTTPStatusError as e:
            print(f"  Failed to load '{item.get('question_text', '')[:60]}': "
                  f"HTTP {e.response.status_code} {e.response.text}")
        except KeyError as e:
            print(f"  Failed to load '{item.get('question_text', '')[:60]}': "
                  f"missing field {e}")
    return created


def main():
    # Determine API base URL
    api_url = sys.argv[1] if len(sys.argv) > 1 else os.getenv("API_URL", "http://localhost:8000")
    email = os.getenv("ADMIN_EMAIL", "admin@example.com")
    password = os.getenv("ADMIN_PASSWORD", "admin")

    # Locate the data file
    data_file = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "question_bank.json")
    if not os.path.exists(data_file):
        data_file = "question_bank.json"

    if not os.path.exists(data_file):
        print("Error: Could not find question_bank.json")
        sys.exit(1)

    with open(data_file, "r", encoding="utf-8") as f:
        questions = json.load(f)

    print(f"Loaded {len(questions)} questions from {data_file}")
    print(f"Sending to {api_url}/api/admin/questions ...")

    with httpx.Client(timeout=30.0) as client:
        token = login(client, api_url, email, password)
        client.headers["Authorization"] = f"Bearer {token}"

        created = load_bank(client, api_url, questions)

    print()
    print("=" * 60)
    print("  LOAD SUMMARY")
    print("=" * 60)
    print(f"  Questions in file:  {len(questions)}")
    print(f"  Created:            {created}")
    print(f"  Failed:             {len(questions) - created}")
    print("=" * 60)


if __name__ == "__main__":
    main()
