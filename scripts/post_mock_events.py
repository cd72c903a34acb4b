#!/usr/bin/env python3
"""
Post Mock Events to the dtconn Endpoint

Generates mock monitoring events, signs them with the shared secret, and
posts them to a running relay for end-to-end testing.

Usage:
    # Post 20 events (default)
    SIGNATURE=secret python post_mock_events.py --url http://localhost:8080

    # Re-send a few events to exercise BigQuery insertId deduplication
    python post_mock_events.py --secret secret --count 50 --duplicates 5

    # Dry run (generate but don't post)
    python post_mock_events.py --secret secret --dry-run
"""

import asyncio
import json
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
import httpx
from faker import Faker

sys.path.insert(0, str(Path(__file__).parent.parent / "ingestion"))

from dtconn_relay.validators import compute_signature


EVENT_TYPES = [
    "PROBLEM_OPEN",
    "PROBLEM_RESOLVED",
    "CUSTOM_DEPLOYMENT",
    "CUSTOM_CONFIGURATION",
    "ERROR_EVENT",
    "AVAILABILITY_EVENT",
]

ENVIRONMENTS = ["prod", "staging", "dev"]


class MockEventPoster:
    """Post generated monitoring events to the relay."""

    def __init__(
        self,
        base_url: str,
        secret: str,
        timeout: float = 30.0,
        concurrency: int = 10,
        seed: Optional[int] = None,
    ):
        """
        Initialize the poster.

        Args:
            base_url: Base URL of the relay (e.g., http://localhost:8080)
            secret: Shared signing secret
            timeout: HTTP request timeout in seconds
            concurrency: Max requests in flight
            seed: Random seed for reproducibility
        """
        self.base_url = base_url.rstrip("/")
        self.secret = secret
        self.timeout = timeout
        self._semaphore = asyncio.Semaphore(concurrency)

        self.fake = Faker()
        if seed is not None:
            Faker.seed(seed)
            self.fake.random.seed(seed)

        self.stats = {
            "posted": 0,
            "failed": 0,
            "by_status": {},
        }

    def generate_event(self) -> Dict[str, Any]:
        """Generate one dtconn request body."""
        event_type = self.fake.random.choice(EVENT_TYPES)
        return {
            "event": {
                "eventId": str(uuid.UUID(int=self.fake.random.getrandbits(128))),
                "targetName": f"{self.fake.domain_word()}-service",
                "eventType": event_type,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "data": {
                    "title": self.fake.sentence(nb_words=5),
                    "host": self.fake.hostname(),
                    "severity": self.fake.random.choice(["INFO", "WARNING", "ERROR"]),
                    "impactedEntities": [self.fake.uuid4() for _ in range(self.fake.random.randint(0, 3))],
                },
            },
            "labels": {
                "env": self.fake.random.choice(ENVIRONMENTS),
                "team": self.fake.word(),
            },
        }

    async def post_event(self, client: httpx.AsyncClient, body: Dict[str, Any]) -> bool:
        """
        Post a single signed event.

        Args:
            client: HTTP client
            body: Request body

        Returns:
            True if successful, False otherwise
        """
        headers = {
            "Content-Type": "application/json",
            "x-dt-signature": compute_signature(self.secret),
        }

        async with self._semaphore:
            try:
                response = await client.post(
                    f"{self.base_url}/dtconn",
                    json=body,
                    headers=headers,
                    timeout=self.timeout,
                )
            except httpx.HTTPError as e:
                self.stats["failed"] += 1
                print(f"  Error: {body['event']['eventId']} - {type(e).__name__}: {e}")
                return False

        code = response.status_code
        self.stats["by_status"][code] = self.stats["by_status"].get(code, 0) + 1
        if code == 200:
            self.stats["posted"] += 1
            return True

        self.stats["failed"] += 1
        print(f"  Failed: {body['event']['eventId']} - {code}")
        return False

    async def run(self, count: int, duplicates: int, dry_run: bool = False) -> Dict[str, Any]:
        """Generate and post events, re-sending `duplicates` of them."""
        events: List[Dict[str, Any]] = [self.generate_event() for _ in range(count)]
        events += self.fake.random.sample(events, min(duplicates, len(events)))

        print("=" * 60)
        print(f"Posting {len(events)} events ({duplicates} redelivered) to {self.base_url}/dtconn")
        print("=" * 60)

        if dry_run:
            for body in events[:3]:
                print(json.dumps(body, indent=2))
            print(f"\nDry run: {len(events)} events generated, nothing posted")
            return self.stats

        async with httpx.AsyncClient() as client:
            await asyncio.gather(*(self.post_event(client, body) for body in events))

        print("\n" + "=" * 60)
        print("Summary")
        print("=" * 60)
        print(f"Total Posted: {self.stats['posted']}")
        print(f"Total Failed: {self.stats['failed']}")
        if self.stats["by_status"]:
            print("\nBy Status:")
            for code, n in sorted(self.stats["by_status"].items()):
                print(f"  {code}: {n}")
        print("=" * 60)

        return self.stats


@click.command()
@click.option(
    "--url",
    default="http://localhost:8080",
    help="Relay base URL",
)
@click.option(
    "--secret",
    envvar="SIGNATURE",
    required=True,
    help="Shared signing secret (defaults to $SIGNATURE)",
)
@click.option(
    "--count",
    default=20,
    type=int,
    help="Number of distinct events",
)
@click.option(
    "--duplicates",
    default=0,
    type=int,
    help="Number of events to send a second time",
)
@click.option(
    "--concurrency",
    default=10,
    type=int,
    help="Max requests in flight",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Random seed for reproducibility",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Generate events but don't post",
)
def main(
    url: str,
    secret: str,
    count: int,
    duplicates: int,
    concurrency: int,
    seed: Optional[int],
    dry_run: bool,
):
    """Post signed mock events to the dtconn endpoint."""
    poster = MockEventPoster(base_url=url, secret=secret, concurrency=concurrency, seed=seed)
    stats = asyncio.run(poster.run(count=count, duplicates=duplicates, dry_run=dry_run))
    if stats["failed"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
