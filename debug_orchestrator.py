# debug_orchestrator.py
import asyncio
import json

from outing_planner.orchestrator import orchestrate_itinerary_plan


async def main():
    payload = {
        "startTime": 18,
        "endTime": 23,
        "budget": 2500,
        "numberOfPeople": 2,
        "startLocation": {"lat": 28.4595, "lng": 77.0266},
        "extraInfo": "anniversary evening, quiet places",
        "minimumRating": 4.0,
        "travelTolerance": 30,
        "dining": {"cuisines": ["Italian", "Continental"], "alcohol": True},
        "movie": {"language": ["English"]},
        "preferredTypes": [{"dinings": {}}, {"movies": {}}],
        "pools": {
            "dinings": [
                {
                    "_id": "d-101",
                    "name": "Olive Terrace",
                    "location": {"lat": 28.4672, "lng": 77.0810},
                    "pricePerPerson": 600,
                    "duration": 90,
                    "availableTimeStart": 12,
                    "availableTimeEnd": 24,
                    "cuisines": ["Italian"],
                    "rating": 4.4,
                },
                {
                    "_id": "d-102",
                    "name": "Copper Kettle",
                    "location": {"lat": 28.4950, "lng": 77.0890},
                    "pricePerPerson": 450,
                    "duration": 75,
                    "availableTimeStart": 11,
                    "availableTimeEnd": 23,
                    "cuisines": ["Continental"],
                    "rating": 4.1,
                },
            ],
            "movies": [
                {
                    "_id": "m-201",
                    "name": "Dune: Part Two (IMAX 2D)",
                    "location": {"lat": 28.5022, "lng": 77.0960},
                    "pricePerPerson": 550,
                    "duration": 166,
                    "availableTimeStart": 19,
                    "availableTimeEnd": 24,
                    "language": ["English"],
                    "rating": 4.6,
                },
            ],
        },
        "includeItineraries": True,
    }

    # Call orchestrator directly
    result = await orchestrate_itinerary_plan(payload)
    print("➡️ Orchestrator returned:\n")
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    asyncio.run(main())
