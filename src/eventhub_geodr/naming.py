"""Random resource names for one sample run."""

import secrets
from dataclasses import astuple, dataclass
from typing import Optional

from eventhub_geodr.config import NamePrefixes

DEFAULT_NAME_LENGTH = 12


def create_random_name(prefix: str, length: int = DEFAULT_NAME_LENGTH) -> str:
    """
    Return ``prefix`` followed by random lowercase hex, ``length`` chars total.

    Example:
        >>> create_random_name("ns")  # doctest: +SKIP
        'ns3f9a0c1b7e'
    """
    random_chars = length - len(prefix)
    if random_chars < 1:
        raise ValueError(f"Prefix {prefix!r} is too long for a {length}-character name")
    # token_hex(n) yields 2n characters
    return (prefix + secrets.token_hex((random_chars + 1) // 2)[:random_chars]).lower()


@dataclass(frozen=True)
class ResourceNames:
    """Names of every resource the sample creates."""

    resource_group: str
    primary_namespace: str
    secondary_namespace: str
    pairing: str
    event_hub: str

    @property
    def is_distinct(self) -> bool:
        values = astuple(self)
        return len(set(values)) == len(values)

    @classmethod
    def generate(
        cls,
        prefixes: Optional[NamePrefixes] = None,
        length: int = DEFAULT_NAME_LENGTH,
        max_attempts: int = 10,
    ) -> "ResourceNames":
        """
        Generate a pairwise-distinct set of names.

        Regenerates on collision, which can only happen when prefixes are
        shared (both namespaces default to "ns").

        Raises:
            RuntimeError: If no distinct set is found within max_attempts
        """
        prefixes = prefixes or NamePrefixes()
        for _ in range(max_attempts):
            names = cls(
                resource_group=create_random_name(prefixes.resource_group, length),
                primary_namespace=create_random_name(prefixes.primary_namespace, length),
                secondary_namespace=create_random_name(prefixes.secondary_namespace, length),
                pairing=create_random_name(prefixes.pairing, length),
                event_hub=create_random_name(prefixes.event_hub, length),
            )
            if names.is_distinct:
                return names
        raise RuntimeError(f"Could not generate distinct resource names in {max_attempts} attempts")
