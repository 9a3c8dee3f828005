import json

import httpx

BASE_URL = "http://127.0.0.1:8000"

# --- sample payload ---
payload = {
    "startTime": 18,
    "budget": 700,
    "numberOfPeople": 2,
    "startLocation": {"lat": 12.9716, "lng": 77.5946},
    "preferredTypes": [{"dinings": {}}, {"movies": {}}],
    "pools": {
        "dinings": [
            {
                "_id": "D1",
                "location": {"lat": 12.9750, "lng": 77.6050},
                "pricePerPerson": 100,
                "duration": 90,
                "availableTimeStart": 0,
                "availableTimeEnd": 24,
            }
        ],
        "movies": [
            {
                "_id": "M1",
                "location": {"lat": 12.9800, "lng": 77.6400},
                "pricePerPerson": 200,
                "duration": 120,
                "availableTimeStart": 19,
                "availableTimeEnd": 23,
            }
        ],
    },
    "includeItineraries": True,
}


def run_smoke():
    url = f"{BASE_URL}/api/plan-itinerary"

    print(f"➡️ Sending POST {url}")
    print(json.dumps(payload, indent=2))

    resp = httpx.post(url, json=payload, timeout=60.0)

    print(f"\n⬅️ Status: {resp.status_code}")
    try:
        data = resp.json()
        print(json.dumps(data, indent=2))
    except ValueError:
        print(resp.text)


if __name__ == "__main__":
    run_smoke()
