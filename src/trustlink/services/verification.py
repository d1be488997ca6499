"""Identity and ownership verification providers.

The simulated provider stands in for real ID-document and deeds/vehicle
registry lookups: it waits a fixed delay and returns a randomized outcome.
A real integration implements ``VerificationProvider`` and is selected by
``settings.verification_backend``.
"""

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass

from trustlink.config import settings

logger = logging.getLogger(__name__)

MOCK_NAMES = ["John Smith", "Sarah Johnson", "Michael Brown", "Emily Davis"]


@dataclass(frozen=True)
class IdentityCheck:
    """Identity lookup result."""

    verified: bool
    name_match: bool
    retrieved_name: str


@dataclass(frozen=True)
class OwnershipCheck:
    """Property or vehicle registry lookup result."""

    verified: bool
    ownership_match: bool


class VerificationProvider(ABC):
    """Abstract base class for verification providers."""

    @abstractmethod
    async def check_identity(self, id_number: str, expected_name: str) -> IdentityCheck:
        """Look up an ID number and compare the registered name."""

    @abstractmethod
    async def check_property(self, reference: str) -> OwnershipCheck:
        """Look up property ownership by ERF number or street address."""

    @abstractmethod
    async def check_vehicle(self, reference: str) -> OwnershipCheck:
        """Look up vehicle ownership by VIN or chassis number."""


class SimulatedVerificationProvider(VerificationProvider):
    """Delay-and-random-outcome simulator."""

    def __init__(
        self,
        id_delay: float = 1.0,
        property_delay: float = 1.2,
        vehicle_delay: float = 1.1,
        rng: random.Random | None = None,
    ):
        self.id_delay = id_delay
        self.property_delay = property_delay
        self.vehicle_delay = vehicle_delay
        self.rng = rng or random.Random()

    async def check_identity(self, id_number: str, expected_name: str) -> IdentityCheck:
        await asyncio.sleep(self.id_delay)

        retrieved_name = self.rng.choice(MOCK_NAMES)
        first_name = expected_name.lower().split(" ")[0]
        name_match = first_name in retrieved_name.lower() or self.rng.random() > 0.3

        logger.debug(f"Simulated identity check: name_match={name_match}")
        return IdentityCheck(
            verified=True,
            name_match=name_match,
            retrieved_name=expected_name if name_match else retrieved_name,
        )

    async def check_property(self, reference: str) -> OwnershipCheck:
        await asyncio.sleep(self.property_delay)
        return OwnershipCheck(verified=True, ownership_match=self.rng.random() > 0.2)

    async def check_vehicle(self, reference: str) -> OwnershipCheck:
        await asyncio.sleep(self.vehicle_delay)
        return OwnershipCheck(verified=True, ownership_match=self.rng.random() > 0.2)


def get_verification_provider() -> VerificationProvider:
    """Get the configured verification provider."""
    if settings.verification_backend == "simulated":
        return SimulatedVerificationProvider(
            id_delay=settings.simulated_id_delay,
            property_delay=settings.simulated_property_delay,
            vehicle_delay=settings.simulated_vehicle_delay,
        )
    raise ValueError(f"Unknown verification backend: {settings.verification_backend}")
