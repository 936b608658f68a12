from __future__ import annotations

import random
from typing import Any

from prospect_fusion.schema import SourceChannel

_FIRST_NAMES = [
    "Maria",
    "Juan",
    "Jose",
    "Ana",
    "Mark",
    "Kristine",
    "Paolo",
    "Angelica",
    "Ramon",
    "Liza",
    "Carlo",
    "Joy",
]
_LAST_NAMES = [
    "Santos",
    "Reyes",
    "Cruz",
    "Bautista",
    "Garcia",
    "Mendoza",
    "Villanueva",
    "Ramos",
    "Dela Cruz",
    "Aquino",
]
_CITIES = ["Quezon City", "Makati", "Cebu City", "Davao City", "Pasig", "Taguig", "Iloilo City"]
_OCCUPATIONS = [
    "Call Center Agent",
    "Nurse",
    "Bank Teller",
    "Sales Manager",
    "Freelance Designer",
    "Store Owner",
    "OFW",
    "Team Leader",
    "Virtual Assistant",
]
_INTERESTS = ["online selling", "investment", "travel", "fitness", "cooking", "freelance", "insurance"]
_BIO_FRAGMENTS = [
    "Looking for extra income",
    "Pagod sa trabaho",
    "Gusto mag business someday",
    "Interested in passive income",
    "Bagong kasal",
    "Just got promoted",
    "Kulang ang sahod",
    "Open for opportunities",
    "Coffee lover",
    "Proud parent",
]
_DOMAINS = ["gmail.com", "yahoo.com", "outlook.com"]
_PLATFORM_URLS = [
    "https://facebook.com/{handle}",
    "https://instagram.com/{handle}",
    "https://www.linkedin.com/in/{handle}",
    "https://tiktok.com/@{handle}",
]
_SUFFIXES = ["Jr.", "Sr.", "III"]


class ProspectDatasetGenerator:
    """Generate multi-channel prospect payloads (with intentional dupes) for demos and tests.

    The output is keyed by channel name and can be passed straight to the
    pipeline. Duplicates are copies of an earlier person placed on another
    channel with a small perturbation: a case change, a name suffix, an
    abbreviated last name sharing the email, or the same phone number.
    """

    def __init__(self, seed: int = 7) -> None:
        self._rng = random.Random(seed)

    def generate(self, size: int, duplicate_rate: float = 0.2) -> dict[str, list[dict[str, Any]]]:
        sources: dict[str, list[dict[str, Any]]] = {channel.value: [] for channel in SourceChannel}
        if size <= 0:
            return sources

        unique_count = int(size * (1.0 - duplicate_rate))
        unique_count = max(1, min(unique_count, size))

        people = [self._person(i) for i in range(unique_count)]
        for person in people:
            channel = self._rng.choice(list(SourceChannel))
            sources[channel.value].append(self._payload(person, channel))

        for _ in range(size - unique_count):
            person = dict(self._rng.choice(people))
            self._perturb(person)
            channel = self._rng.choice(list(SourceChannel))
            sources[channel.value].append(self._payload(person, channel))

        return sources

    def _person(self, idx: int) -> dict[str, Any]:
        first_name = self._rng.choice(_FIRST_NAMES)
        last_name = self._rng.choice(_LAST_NAMES)
        handle = f"{first_name}{last_name}{idx}".lower().replace(" ", "")
        email_local = f"{first_name}.{last_name}{idx}".lower().replace(" ", "")
        bio = ". ".join(self._rng.sample(_BIO_FRAGMENTS, k=self._rng.randint(0, 3)))

        return {
            "first_name": first_name,
            "last_name": last_name,
            "email": f"{email_local}@{self._rng.choice(_DOMAINS)}",
            "phone": f"+63 9{idx % 1_000_000_000:09d}",
            "location": self._rng.choice(_CITIES),
            "occupation": self._rng.choice(_OCCUPATIONS),
            "interests": self._rng.sample(_INTERESTS, k=self._rng.randint(0, 3)),
            "bio": bio,
            "url": self._rng.choice(_PLATFORM_URLS).format(handle=handle),
            "followers": self._rng.choice([0, 120, 850, 1_500, 6_200, 12_000]),
            "engagement": self._rng.randint(0, 600),
            "mutual_connections": self._rng.choice([0, 3, 8, 25, 60]),
            "past_interactions": self._rng.randint(0, 7),
        }

    def _perturb(self, person: dict[str, Any]) -> None:
        mutation = self._rng.choice(["case", "suffix", "abbreviation", "phone"])

        if mutation == "case":
            person["first_name"] = person["first_name"].upper()
            person["last_name"] = person["last_name"].upper()
        elif mutation == "suffix":
            person["last_name"] = f"{person['last_name']} {self._rng.choice(_SUFFIXES)}"
        elif mutation == "abbreviation":
            # Name drifts but the email still ties the records together.
            person["last_name"] = f"{person['last_name'][0]}."
        else:
            person["email"] = ""
            person["first_name"] = person["first_name"][:3]

        # Other channels rarely agree on free text.
        person["bio"] = person["bio"] if self._rng.random() < 0.5 else ""

    def _payload(self, person: dict[str, Any], channel: SourceChannel) -> dict[str, Any]:
        payload = {key: value for key, value in person.items() if key not in {"first_name", "last_name"}}
        if channel == SourceChannel.LINKEDIN_EXPORT:
            payload["first_name"] = person["first_name"]
            payload["last_name"] = person["last_name"]
        else:
            payload["name"] = f"{person['first_name']} {person['last_name']}"
        payload["interests"] = list(person["interests"])
        return {key: value for key, value in payload.items() if value not in ("", None, [])}
