"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Race for a handful of seats
  locust -f locustfile.py --tags throughput   # Snapshot reads across flights
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import random
import string
from collections import Counter

import httpx

from locust import HttpUser, task, between, tag, events

CONCURRENCY_FLIGHT = "LOAD-" + "".join(random.choices(string.ascii_uppercase, k=4))
CONTESTED_SEATS = ["1A", "1B", "1C", "1D", "1E", "1F"]
READ_FLIGHTS = [f"READ-{n}" for n in range(20)]


def random_passenger():
    return "p_" + "".join(random.choices(string.ascii_lowercase, k=8))


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"SETUP: Concurrency flight is {CONCURRENCY_FLIGHT}")
    print("=" * 60)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """
    After the run, no passenger may hold two seats on the contested flight.
    """
    if environment.host is None:
        return

    resp = httpx.get(f"{environment.host}/seats", params={"flightId": CONCURRENCY_FLIGHT})
    if resp.status_code != 200:
        print(f"\n✗ Could not read seat map: {resp.status_code}\n")
        return

    held = Counter(seat["occupant"] for seat in resp.json() if seat["occupant"])
    doubled = [name for name, count in held.items() if count > 1]
    if doubled:
        print(f"\n✗ Passengers holding more than one seat: {doubled}\n")
        environment.process_exit_code = 1
    else:
        print(f"\n✓ {len(held)} seats taken, every passenger holds at most one\n")


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 passengers -> 6 seats on one flight

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    Expect a few 200s, the rest 400 "Seat not available".
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.passenger = random_passenger()

    @tag("concurrency")
    @task
    def book_contested_seat(self):
        """All users fight for the same row of seats."""
        seat = random.choice(CONTESTED_SEATS)
        with self.client.post("/book-seat",
            params={"flightId": CONCURRENCY_FLIGHT},
            json={"seatNumber": seat, "name": self.passenger},
            name="/book-seat [contested]",
            catch_response=True
        ) as resp:
            if resp.status_code == 200:
                resp.success()
            elif resp.status_code == 400:
                resp.success()  # Expected: taken
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - snapshot reads spread over many partitions

    Run: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def read_seat_map(self):
        self.client.get("/seats",
            params={"flightId": random.choice(READ_FLIGHTS)},
            name="/seats")

    @tag("throughput")
    @task(3)
    def book_random_seat(self):
        row = random.randint(1, 10)
        column = random.choice("ABCDEF")
        with self.client.post("/book-seat",
            params={"flightId": random.choice(READ_FLIGHTS)},
            json={"seatNumber": f"{row}{column}", "name": random_passenger()},
            name="/book-seat",
            catch_response=True
        ) as resp:
            if resp.status_code in [200, 400]:
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    @tag("edge")
    @task
    def unknown_seat(self):
        with self.client.post("/book-seat",
            params={"flightId": CONCURRENCY_FLIGHT},
            json={"seatNumber": "99Z", "name": random_passenger()},
            catch_response=True
        ) as resp:
            if resp.status_code == 400:
                resp.success()
            else:
                resp.failure(f"Expected 400, got {resp.status_code}")

    @tag("edge")
    @task
    def missing_name(self):
        with self.client.post("/book-seat",
            params={"flightId": CONCURRENCY_FLIGHT},
            json={"seatNumber": "1A"},
            catch_response=True
        ) as resp:
            if resp.status_code == 400:
                resp.success()
            else:
                resp.failure(f"Expected 400, got {resp.status_code}")

    @tag("edge")
    @task
    def missing_flight_id(self):
        with self.client.get("/seats", catch_response=True) as resp:
            if resp.status_code == 404:
                resp.success()
            else:
                resp.failure(f"Expected 404, got {resp.status_code}")
