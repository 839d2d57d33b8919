"""
Plates demo — drives a running answer engine over HTTP.

Start the service first (``python -m plates_search.api``), then:

    python demo_client.py "What is the ruling on combining prayers? Also, what about travel?"
"""

import json
import os
import sys

import requests

BASE_URL = os.getenv("PLATES_URL", "http://localhost:8093")
HEADERS = {"x-api-key": os.environ["PLATES_API_KEY"]} if os.getenv("PLATES_API_KEY") else {}

question = " ".join(sys.argv[1:]) or "What are the conditions of wudu?"

health = requests.get(f"{BASE_URL}/api/health", headers=HEADERS, timeout=5).json()
print(f"Service: {health['status']} (generation={health['generation']} search={health['search']})")

resp = requests.post(
    f"{BASE_URL}/api/generate", json={"query": question}, headers=HEADERS, timeout=10
)
resp.raise_for_status()
generation_id = resp.json()["generation_id"]
print(f"Question: {question}")
print(f"Generation: {generation_id}\n")
print("=" * 70)

with requests.get(
    f"{BASE_URL}/api/generate/{generation_id}/stream", headers=HEADERS, stream=True, timeout=620
) as stream:
    for line in stream.iter_lines(decode_unicode=True):
        if not line or not line.startswith("data: "):
            continue
        event = json.loads(line.removeprefix("data: "))
        data = event.get("data", {})
        if event["type"] == "status":
            print(f"... {data.get('message', '')}")
        elif event["type"] == "error":
            print(f"\nERROR: {data.get('message', '')}")
            break
        elif event["type"] == "done":
            print("=" * 70)
            if data.get("kind") == "sections":
                for section in data["sections"]:
                    print(f"\n## {section['title']}\n{section['content']}")
            else:
                print(data.get("text", ""))
            break
