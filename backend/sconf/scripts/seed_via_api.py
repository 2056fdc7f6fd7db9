"""
SConf Backend - Seed Demo Data Through the Public API
=====================================================

What:  Creates random scientists, conferences and participations by POSTing
       to a running SConf API, so seeded data passes the same validation as
       client writes.
How:   httpx.AsyncClient against the API base URL (SEED_API_URL, or
       http://localhost:{API_PORT}{API_PREFIX}); stops at the first non-2xx
       response.

Usage:
    python -m sconf.scripts.seed_via_api
    sconf-seed --scientists 10 --conferences 5 --participations 20 --seed 42
    sconf-seed --base-url http://api.internal:3000/api

Generated data:
    Scientist N            random country / degree / specialization / organization
    Conference N           weekly dates starting a week from today, random capacity
    participations         random scientist and conference, 15-90 minutes,
                           metadata {rating 1-5, slidesUrl, tags [title, type]}
"""

import argparse
import asyncio
import logging
import random
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

import httpx

from sconf.config import settings
from sconf.exceptions import SconfError

logger = logging.getLogger(__name__)

COUNTRIES = ["USA", "Germany", "France", "UK", "Canada", "Japan", "Australia", "Spain"]
DEGREES = ["PhD", "Doctor of Sciences", "Master", "Professor"]
SPECIALIZATIONS = ["AI", "Biology", "Physics", "Chemistry", "Math", "Data Science", "Robotics"]
ORGANIZATIONS = ["MIT", "Stanford", "Cambridge", "Oxford", "ETH Zurich", "CNRS", "Max Planck"]
TOPICS = ["AI", "Biotech", "Quantum", "Climate", "Space", "Robotics", "Health"]
CITIES = ["Boston", "Berlin", "Paris", "London", "Toronto", "Tokyo", "Sydney", "Madrid"]
PARTICIPATION_TYPES = ["Keynote", "Workshop", "Poster", "Panel"]
TALK_TITLES = [
    "Advances in AI",
    "Future of Robotics",
    "Climate Change Solutions",
    "Quantum Breakthroughs",
    "Biotech Innovations",
    "Space Exploration",
]


class SeedRequestError(SconfError):
    """The API answered a seed request with a non-2xx status."""

    code = "seed_request_failed"

    def __init__(self, method: str, url: str, status_code: int, body: str):
        super().__init__(
            message=f"Request failed {status_code}: {method} {url}: {body}",
            context={"status_code": status_code, "url": url},
        )
        self.status_code = status_code


@dataclass
class SeedPlan:
    scientists: int = 30
    conferences: int = 15
    participations: int = 80


@dataclass
class SeedResult:
    scientist_ids: List[int]
    conference_ids: List[int]
    participations: int


class ApiSeeder:
    """
    Generates and submits seed records.

    `client` must have its base_url set to the API prefix; `rng` makes runs
    reproducible; `today` anchors the weekly conference dates.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        rng: Optional[random.Random] = None,
        today: Optional[datetime] = None,
    ):
        self.client = client
        self.rng = rng or random.Random()
        self.today = today or datetime.now(timezone.utc)

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        response = await self.client.post(path, json=body)
        if response.is_error:
            raise SeedRequestError("POST", str(response.request.url), response.status_code, response.text)
        return response.json()

    async def seed_scientists(self, count: int) -> List[int]:
        created = []
        for i in range(1, count + 1):
            scientist = await self._post(
                "/scientists",
                {
                    "fullName": f"Scientist {i}",
                    "country": self.rng.choice(COUNTRIES),
                    "degree": self.rng.choice(DEGREES),
                    "specialization": self.rng.choice(SPECIALIZATIONS),
                    "organization": self.rng.choice(ORGANIZATIONS),
                },
            )
            created.append(scientist["id"])
        return created

    async def seed_conferences(self, count: int) -> List[int]:
        created = []
        for i in range(1, count + 1):
            conference = await self._post(
                "/conferences",
                {
                    "topic": self.rng.choice(TOPICS),
                    "name": f"Conference {i}",
                    "date": (self.today + timedelta(days=7 * i)).isoformat(),
                    "country": self.rng.choice(COUNTRIES),
                    "location": self.rng.choice(CITIES),
                    "capacity": self.rng.randint(50, 500),
                },
            )
            created.append(conference["id"])
        return created

    async def seed_participations(
        self,
        scientist_ids: Sequence[int],
        conference_ids: Sequence[int],
        count: int,
    ) -> int:
        if count and not (scientist_ids and conference_ids):
            logger.warning("No scientists or conferences to link; skipping participations")
            return 0

        for i in range(count):
            participation_type = self.rng.choice(PARTICIPATION_TYPES)
            await self._post(
                "/participations",
                {
                    "talkTitle": self.rng.choice(TALK_TITLES),
                    "participationType": participation_type,
                    "durationMinutes": self.rng.randint(15, 90),
                    "scientistId": self.rng.choice(scientist_ids),
                    "conferenceId": self.rng.choice(conference_ids),
                    "metadata": {
                        "rating": self.rng.randint(1, 5),
                        "slidesUrl": f"https://example.com/slides/{i + 1}",
                        "tags": [self.rng.choice(TALK_TITLES), participation_type],
                    },
                },
            )
        return count

    async def run(self, plan: SeedPlan) -> SeedResult:
        scientist_ids = await self.seed_scientists(plan.scientists)
        logger.info("Created scientists: %d", len(scientist_ids))

        conference_ids = await self.seed_conferences(plan.conferences)
        logger.info("Created conferences: %d", len(conference_ids))

        participations = await self.seed_participations(
            scientist_ids, conference_ids, plan.participations
        )
        logger.info("Created participations: %d", participations)

        return SeedResult(scientist_ids, conference_ids, participations)


async def seed(
    base_url: str,
    plan: SeedPlan,
    rng_seed: Optional[int] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> SeedResult:
    """
    Seeds the API at `base_url`. A caller-supplied `client` (for example one
    bound to an in-process ASGI app) is used as-is and left open.
    """
    rng = random.Random(rng_seed)
    if client is not None:
        return await ApiSeeder(client, rng).run(plan)

    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as own_client:
        return await ApiSeeder(own_client, rng).run(plan)


def build_parser() -> argparse.ArgumentParser:
    defaults = SeedPlan()
    parser = argparse.ArgumentParser(description="Seed the SConf API with random demo data.")
    parser.add_argument(
        "--base-url",
        default=settings.resolved_seed_api_url,
        help="API base URL including the prefix (default: %(default)s)",
    )
    parser.add_argument("--scientists", type=int, default=defaults.scientists)
    parser.add_argument("--conferences", type=int, default=defaults.conferences)
    parser.add_argument("--participations", type=int, default=defaults.participations)
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    for name in ("scientists", "conferences", "participations"):
        if getattr(args, name) < 0:
            logger.error("--%s must not be negative", name)
            return 2

    plan = SeedPlan(args.scientists, args.conferences, args.participations)
    logger.info("Seeding via API at %s", args.base_url)
    try:
        asyncio.run(seed(args.base_url, plan, rng_seed=args.seed))
    except SeedRequestError as e:
        logger.error("Seeding failed: %s", e.message)
        return 1
    except httpx.HTTPError as e:
        logger.error("Seeding failed: cannot reach %s (%s)", args.base_url, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
